"""
demo_data.py - The app's sample user, roster and history

Builds a ledger equivalent to the app's mock database: a level 25 user with
12000 experience and 5000 spendable points, five other users, one friend
and two past pickups.
"""

from __future__ import annotations
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Tuple

from .core import Activity, Character, Skill, UserProfile, UserStats, GameRules, DEFAULT_RULES
from .ledger import Ledger


DEMO_SKILLS = (
    Skill("Thrift Strike", "Earn bonus points in proportion to the money saved."),
    Skill("Carbon Shield", "Defense grows with the carbon you reduce."),
)


def demo_character() -> Character:
    return Character(
        id="char_1",
        name="Picky",
        stat_points=15,
        attack=25,
        defense=18,
        skills=DEMO_SKILLS,
    )


def demo_profile() -> UserProfile:
    return UserProfile(
        id="user_1",
        name="Kim Pickup",
        level=25,
        experience=12000,
        experience_to_next_level=15000,
        spendable_balance=5000,
        stats=UserStats(
            total_pickups=128,
            total_calories_burned=Decimal("5450"),
            total_money_saved=342000,
            total_carbon_reduced=Decimal("45.5"),
        ),
        character=demo_character(),
    )


def _roster_user(id, name, level, experience, threshold, pickups, calories, saved, carbon) -> UserProfile:
    return UserProfile(
        id=id,
        name=name,
        level=level,
        experience=experience,
        experience_to_next_level=threshold,
        spendable_balance=0,
        stats=UserStats(pickups, Decimal(calories), saved, Decimal(carbon)),
        character=demo_character(),
    )


def demo_roster() -> Tuple[UserProfile, ...]:
    return (
        _roster_user("user_2", "Park Delivery", 20, 9500, 10000, 10, "500", 10000, "2.0"),
        _roster_user("user_3", "Lee Package", 18, 8200, 9000, 15, "800", 15000, "3.5"),
        _roster_user("user_4", "Choi Walking", 15, 7000, 8000, 5, "300", 5000, "1.0"),
        _roster_user("user_5", "Kang Runner", 22, 11000, 12000, 20, "1000", 30000, "5.0"),
        _roster_user("user_6", "Jo Saver", 10, 4500, 5000, 8, "400", 8000, "1.5"),
    )


def demo_activities(now: datetime) -> Tuple[Activity, ...]:
    """Two past pickups, most recent first."""
    return (
        Activity("act_1", "Pizza Hut", now - timedelta(hours=1),
                 Decimal("60"), 3000, Decimal("0.35"), 55, True),
        Activity("act_2", "BHC Chicken", now - timedelta(days=2),
                 Decimal("45"), 3000, Decimal("0.2"), 40, False),
    )


def demo_ledger(
    initial_time: Optional[datetime] = None,
    rules: GameRules = DEFAULT_RULES,
    verbose: bool = True,
) -> Ledger:
    """Ledger seeded with the demo user; the first roster user is a friend."""
    now = initial_time or datetime.now()
    roster = demo_roster()
    return Ledger(
        "demo",
        demo_profile(),
        roster=roster,
        friend_ids=[roster[0].id],
        activities=demo_activities(now),
        initial_time=now,
        rules=rules,
        verbose=verbose,
    )
