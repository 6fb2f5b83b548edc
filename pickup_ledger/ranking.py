"""
ranking.py - Ranking Aggregator

Projects the roster and the current user into the app's three leaderboards.

- local:   everyone, sorted by experience descending (stable: ties keep
           roster order, with the current user last)
- friends: local filtered to the friend set plus the current user
- weekly:  the same entries as local in a shuffled order

"weekly" is a shuffle, not a time window. It is the only non-deterministic
part; pass a seeded numpy Generator to make it reproducible.

No caching: rankings are recomputed from the inputs on every call.
"""

from __future__ import annotations
from typing import FrozenSet, Iterable, List, Optional, Tuple

import numpy as np

from .core import LedgerView, UserProfile, RankEntry, Rankings


def rank_users(users: Iterable[UserProfile]) -> Tuple[RankEntry, ...]:
    """Sort users by experience descending and assign 1-based ranks."""
    ordered = sorted(users, key=lambda u: u.experience, reverse=True)
    return tuple(
        RankEntry(rank=i + 1, user_id=u.id, name=u.name, level=u.level, score=u.experience)
        for i, u in enumerate(ordered)
    )


def shuffle_entries(
    entries: Tuple[RankEntry, ...],
    rng: Optional[np.random.Generator] = None,
) -> Tuple[RankEntry, ...]:
    """Return the entries in a random order. Items and ranks are unchanged."""
    if rng is None:
        rng = np.random.default_rng()
    order = rng.permutation(len(entries))
    return tuple(entries[i] for i in order)


def compute_rankings(
    user: UserProfile,
    roster: Iterable[UserProfile],
    friend_ids: Iterable[str],
    rng: Optional[np.random.Generator] = None,
) -> Rankings:
    """
    Compute local, friends and weekly leaderboards.

    Args:
        user: The current user
        roster: Other users
        friend_ids: Ids of the current user's friends
        rng: Random generator for the weekly shuffle (default: fresh generator)

    Returns:
        Rankings; local and friends are a pure function of the inputs
    """
    all_users: List[UserProfile] = list(roster)
    all_users.append(user)
    local = rank_users(all_users)

    visible: FrozenSet[str] = frozenset(friend_ids) | {user.id}
    friends = tuple(entry for entry in local if entry.user_id in visible)

    return Rankings(local=local, friends=friends, weekly=shuffle_entries(local, rng))


def rankings_for(view: LedgerView, rng: Optional[np.random.Generator] = None) -> Rankings:
    """Compute rankings from the ledger's current state."""
    return compute_rankings(view.get_profile(), view.get_roster(), view.get_friend_ids(), rng)


def rank_of(rankings: Rankings, user_id: str) -> Optional[int]:
    """Position of a user in the local leaderboard, or None."""
    for entry in rankings.local:
        if entry.user_id == user_id:
            return entry.rank
    return None
