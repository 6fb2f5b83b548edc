"""
helpers.py - Factories and comparison utilities shared by the test modules
"""

from datetime import datetime
from typing import Any, Dict

from pickup_ledger import (
    Ledger, UserProfile, UserStats, Character, Skill,
)


BASE_TIME = datetime(2025, 1, 1, 12, 0)


def make_profile(
    id: str = "user_1",
    name: str = "Tester",
    level: int = 1,
    experience: int = 0,
    experience_to_next_level: int = 1000,
    spendable_balance: int = 0,
    stat_points: int = 0,
    attack: int = 0,
    defense: int = 0,
) -> UserProfile:
    """Create a profile for testing."""
    return UserProfile(
        id=id,
        name=name,
        level=level,
        experience=experience,
        experience_to_next_level=experience_to_next_level,
        spendable_balance=spendable_balance,
        stats=UserStats(),
        character=Character(
            id=f"char_{id}",
            name="Avatar",
            stat_points=stat_points,
            attack=attack,
            defense=defense,
            skills=(Skill("Test Skill", "Does nothing"),),
        ),
    )


def make_ledger(profile: UserProfile = None, **kwargs) -> Ledger:
    """Quiet ledger at BASE_TIME."""
    kwargs.setdefault("initial_time", BASE_TIME)
    kwargs.setdefault("verbose", False)
    return Ledger("test", profile or make_profile(), **kwargs)


def snapshot(ledger: Ledger) -> Dict[str, Any]:
    """Everything a change could touch, for before/after comparisons."""
    return {
        "profile": ledger.get_profile(),
        "activities": ledger.get_activities(),
        "friend_ids": ledger.get_friend_ids(),
        "journal": list(ledger.journal),
        "sequence": ledger.sequence,
    }


class FixedRng:
    """Stand-in for numpy Generator.integers that always lands on one index."""

    def __init__(self, index: int):
        self.index = index

    def integers(self, high):
        return self.index
