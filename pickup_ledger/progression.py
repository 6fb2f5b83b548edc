"""
progression.py - Progression Engine

Turns a RewardOutcome into a pending change of the user's profile:
1. apply_reward() - Pure function building the new Activity and profile
2. level_up() - The single LevelUp transition
3. log_activity() - Calculator + progression + execute, as called by the session layer

Level-ups are checked once per reward by default: a reward large enough to
cross two thresholds levels up once and the next reward re-checks. The
GameRules.max_level_ups_per_reward knob allows a bounded loop instead.
"""

from __future__ import annotations
from dataclasses import replace
from decimal import Decimal

from .core import (
    LedgerView, UserProfile, UserStats, Activity, RewardOutcome, RewardEvent,
    PendingChange, ChangeKind, GameRules, DEFAULT_RULES,
    InvalidInput,
    build_change, floor_int,
)
from .rewards import compute_reward


def needs_level_up(profile: UserProfile) -> bool:
    return profile.experience >= profile.experience_to_next_level


def level_up(profile: UserProfile, rules: GameRules = DEFAULT_RULES) -> UserProfile:
    """
    Apply one LevelUp transition.

    level += 1, threshold = floor(threshold * 1.2), stat_points += 3.
    """
    character = profile.character
    return replace(
        profile,
        level=profile.level + 1,
        experience_to_next_level=floor_int(
            Decimal(profile.experience_to_next_level) * rules.level_up_threshold_growth
        ),
        character=replace(character, stat_points=character.stat_points + rules.stat_points_per_level),
    )


def _accumulate_stats(stats: UserStats, outcome: RewardOutcome) -> UserStats:
    return UserStats(
        total_pickups=stats.total_pickups + 1,
        total_calories_burned=stats.total_calories_burned + outcome.calories,
        total_money_saved=stats.total_money_saved + outcome.money_saved,
        total_carbon_reduced=stats.total_carbon_reduced + outcome.carbon,
    )


def apply_reward(
    view: LedgerView,
    outcome: RewardOutcome,
    event: RewardEvent,
) -> PendingChange:
    """
    Compute the profile change for one reward.

    Steps, in order:
    1. Build the immutable Activity (ledger time, next activity id)
    2. Pickups only: bump total_pickups and add calories/money/carbon to stats
    3. Add total_points to both experience and spendable_balance
    4. Level-up check (once by default)
    5. The ledger prepends the Activity to history on execute()

    Args:
        view: Read-only ledger access
        outcome: Result of compute_reward()
        event: The event the outcome was computed from

    Returns:
        PendingChange of kind EARN carrying the new profile and activity

    Raises:
        InvalidInput: If the event's restaurant name is blank
    """
    if not event.restaurant_name or not event.restaurant_name.strip():
        raise InvalidInput("restaurant_name cannot be empty")

    rules = view.rules
    profile = view.get_profile()

    activity = Activity(
        id=view.next_activity_id(),
        restaurant_name=event.restaurant_name,
        timestamp=view.current_time,
        calories_burned=outcome.calories,
        money_saved=outcome.money_saved,
        carbon_reduced=outcome.carbon,
        points_earned=outcome.total_points,
        used_reusable_container=event.used_reusable_container,
    )

    stats = _accumulate_stats(profile.stats, outcome) if event.is_pickup else profile.stats

    updated = replace(
        profile,
        stats=stats,
        experience=profile.experience + outcome.total_points,
        spendable_balance=profile.spendable_balance + outcome.total_points,
    )

    for _ in range(rules.max_level_ups_per_reward):
        if not needs_level_up(updated):
            break
        updated = level_up(updated, rules)

    kind = "pickup" if event.is_pickup else "delivery"
    return build_change(
        view,
        ChangeKind.EARN,
        updated,
        amount=outcome.total_points,
        activity=activity,
        description=f"{kind} at {event.restaurant_name}",
    )


def log_activity(ledger, event: RewardEvent) -> Activity:
    """
    Log a completed pickup or delivery: compute the reward and apply it.

    Args:
        ledger: The Ledger to update
        event: PickupEvent or DeliveryEvent

    Returns:
        The new Activity (already at the head of the history)

    Raises:
        InvalidInput: For malformed events; nothing is changed
    """
    profile = ledger.get_profile()
    outcome = compute_reward(event, profile.character.attack, ledger.rules)
    pending = apply_reward(ledger, outcome, event)
    ledger.require_applied(ledger.execute(pending), pending)
    return pending.activity
