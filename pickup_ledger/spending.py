"""
spending.py - Spending Subsystem

Operations that consume the user's balances, plus the account operations
that sit next to them in the app:

1. spend() - The single gate for every spendable-balance debit
2. allocate_stats() - Moves stat points into attack/defense (a separate balance)
3. draw_coupon() - Lucky draw: spend, then a fixed coupon (or None on a miss)
4. spin_roulette() - Point roulette: spend, then one of six equal slices
5. reward_steps() - Balance-only credit for pedometer steps
6. add_friend() / update_username() - Non-spend account edits

Insufficient spendable balance is a normal outcome (False/None), not an
exception. Insufficient stat points raises InsufficientPoints.
Every operation builds a PendingChange and goes through Ledger.execute().
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .core import (
    Character, Coupon, FriendResult, UserProfile, ChangeKind, ExecuteResult,
    InvalidInput, InsufficientPoints,
    build_change,
)
from .ledger import Ledger
from .rewards import compute_step_reward


LUCKY_DRAW_COUPON = Coupon(
    name="Random Coupon",
    discount_rate=Decimal("0.1"),
    description="Congratulations!",
)


class RoulettePrize(Enum):
    MISS = "miss"
    POINTS = "points"
    COUPON_20 = "coupon_20"
    COUPON_40 = "coupon_40"


# Six equal slices, in wheel order
ROULETTE_SLICES: Tuple[RoulettePrize, ...] = (
    RoulettePrize.MISS,
    RoulettePrize.MISS,
    RoulettePrize.MISS,
    RoulettePrize.POINTS,
    RoulettePrize.COUPON_20,
    RoulettePrize.COUPON_40,
)

ROULETTE_COUPONS = {
    RoulettePrize.COUPON_20: Coupon("20% Off", Decimal("0.2"), "Roulette prize: 20% discount"),
    RoulettePrize.COUPON_40: Coupon("40% Off", Decimal("0.4"), "Roulette prize: 40% discount"),
}


@dataclass(frozen=True, slots=True)
class RouletteResult:
    """
    Outcome of one roulette spin.

    Attributes:
        slice_index: Index into ROULETTE_SLICES where the wheel stopped
        prize: What the slice awards
        coupon: Coupon added to the coupon box, if any
        points: Points credited back to the spendable balance
        message: Text for the result dialog
    """
    slice_index: int
    prize: RoulettePrize
    coupon: Optional[Coupon]
    points: int
    message: str


def _require_amount(amount: int, name: str = "amount") -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidInput(f"{name} must be an integer, got {amount!r}")
    if amount < 0:
        raise InvalidInput(f"{name} cannot be negative, got {amount}")


# ============================================================================
# BALANCE DEBITS AND CREDITS
# ============================================================================

def spend(ledger: Ledger, amount: int, description: str = "") -> bool:
    """
    Debit the spendable balance.

    Args:
        ledger: Ledger to debit
        amount: Points to spend (>= 0)
        description: Journal note

    Returns:
        True if debited; False (and nothing changed) if amount exceeds the balance

    Raises:
        InvalidInput: If amount is negative or not an integer
    """
    _require_amount(amount)
    profile = ledger.get_profile()
    if amount > profile.spendable_balance:
        return False
    pending = build_change(
        ledger,
        ChangeKind.SPEND,
        replace(profile, spendable_balance=profile.spendable_balance - amount),
        amount=amount,
        description=description,
    )
    return ledger.execute(pending) == ExecuteResult.APPLIED


def credit(ledger: Ledger, amount: int, description: str = "") -> int:
    """
    Add points to the spendable balance only. Experience is not touched.

    Returns:
        The new spendable balance
    """
    _require_amount(amount)
    profile = ledger.get_profile()
    pending = build_change(
        ledger,
        ChangeKind.CREDIT,
        replace(profile, spendable_balance=profile.spendable_balance + amount),
        amount=amount,
        description=description,
    )
    ledger.require_applied(ledger.execute(pending), pending)
    return ledger.get_profile().spendable_balance


def _award_coupon(ledger: Ledger, coupon: Coupon) -> None:
    profile = ledger.get_profile()
    pending = build_change(
        ledger,
        ChangeKind.PRIZE,
        replace(profile, coupons=profile.coupons + (coupon,)),
        description=coupon.name,
    )
    ledger.require_applied(ledger.execute(pending), pending)


# ============================================================================
# STAT ALLOCATION
# ============================================================================

def allocate_stats(ledger: Ledger, attack_delta: int, defense_delta: int) -> Character:
    """
    Spend stat points on attack and defense.

    Args:
        ledger: Ledger to update
        attack_delta: Points added to attack (>= 0)
        defense_delta: Points added to defense (>= 0)

    Returns:
        The updated Character

    Raises:
        InvalidInput: If a delta is negative
        InsufficientPoints: If attack_delta + defense_delta > stat_points.
                            Nothing is changed.
    """
    _require_amount(attack_delta, "attack_delta")
    _require_amount(defense_delta, "defense_delta")
    profile = ledger.get_profile()
    character = profile.character
    cost = attack_delta + defense_delta
    if cost > character.stat_points:
        raise InsufficientPoints(
            f"Allocation costs {cost} stat points, only {character.stat_points} available"
        )

    updated = replace(
        character,
        attack=character.attack + attack_delta,
        defense=character.defense + defense_delta,
        stat_points=character.stat_points - cost,
    )
    pending = build_change(
        ledger,
        ChangeKind.ALLOCATE,
        replace(profile, character=updated),
        amount=cost,
        description=f"attack+{attack_delta} defense+{defense_delta}",
    )
    ledger.require_applied(ledger.execute(pending), pending)
    return ledger.get_character()


# ============================================================================
# COUPONS AND LOTTERY
# ============================================================================

def draw_coupon(ledger: Ledger, cost: Optional[int] = None) -> Optional[Coupon]:
    """
    Lucky draw: pay cost points for the fixed reward coupon.

    Args:
        ledger: Ledger to debit
        cost: Points to spend (default: rules.lucky_draw_cost)

    Returns:
        The coupon (also added to the coupon box), or None if the balance is
        insufficient
    """
    if cost is None:
        cost = ledger.rules.lucky_draw_cost
    if not spend(ledger, cost, "lucky draw"):
        return None
    _award_coupon(ledger, LUCKY_DRAW_COUPON)
    return LUCKY_DRAW_COUPON


def spin_roulette(
    ledger: Ledger,
    rng: Optional[np.random.Generator] = None,
    cost: Optional[int] = None,
) -> Optional[RouletteResult]:
    """
    Point roulette: pay cost points, then land on one of six equal slices.

    Slices: three misses, a points refund (credited to the spendable balance
    only), a 20% coupon and a 40% coupon.

    Args:
        ledger: Ledger to debit
        rng: Random generator picking the slice (default: fresh generator)
        cost: Points per spin (default: rules.roulette_cost)

    Returns:
        RouletteResult, or None if the balance is insufficient (no spin)
    """
    rules = ledger.rules
    if cost is None:
        cost = rules.roulette_cost
    if not spend(ledger, cost, "roulette spin"):
        return None

    if rng is None:
        rng = np.random.default_rng()
    index = int(rng.integers(len(ROULETTE_SLICES)))
    prize = ROULETTE_SLICES[index]

    if prize is RoulettePrize.MISS:
        return RouletteResult(index, prize, None, 0, "No luck this time!")
    if prize is RoulettePrize.POINTS:
        credit(ledger, rules.roulette_refund, "roulette refund")
        return RouletteResult(
            index, prize, None, rules.roulette_refund,
            f"You won {rules.roulette_refund}P!",
        )
    coupon = ROULETTE_COUPONS[prize]
    _award_coupon(ledger, coupon)
    return RouletteResult(index, prize, coupon, 0, f"You won a {coupon.name} coupon!")


# ============================================================================
# STEP REWARDS
# ============================================================================

def reward_steps(ledger: Ledger, steps: int) -> int:
    """
    Credit points for a pedometer session (one per 100 steps, at most 100).

    Returns:
        Points credited

    Raises:
        InvalidInput: If steps is negative
    """
    points = compute_step_reward(steps, ledger.rules)
    if points > 0:
        credit(ledger, points, f"{steps} steps")
    return points


# ============================================================================
# ACCOUNT OPERATIONS (not spends)
# ============================================================================

def add_friend(ledger: Ledger, nickname: str) -> FriendResult:
    """
    Add a roster user to the friend set by display name.

    Never raises for a missing user or an existing friend; both are
    reported in the result.
    """
    friend = ledger.find_user_by_name(nickname) if nickname else None
    if friend is None:
        return FriendResult(success=False, message="User not found.")
    friend_ids = ledger.get_friend_ids()
    if friend.id in friend_ids:
        return FriendResult(success=False, message="Already friends.")

    pending = build_change(
        ledger,
        ChangeKind.FRIEND,
        ledger.get_profile(),
        friend_ids=friend_ids | {friend.id},
        description=f"friend {friend.id}",
    )
    ledger.require_applied(ledger.execute(pending), pending)
    return FriendResult(success=True, message=f"Added {nickname} as a friend.")


def update_username(ledger: Ledger, new_name: str) -> UserProfile:
    """
    Rename the current user.

    Raises:
        InvalidInput: If the name is empty or whitespace
    """
    if not new_name or not new_name.strip():
        raise InvalidInput("username cannot be empty")
    profile = ledger.get_profile()
    pending = build_change(
        ledger,
        ChangeKind.PROFILE,
        replace(profile, name=new_name),
        description="rename",
    )
    ledger.require_applied(ledger.execute(pending), pending)
    return ledger.get_profile()
