"""
rewards.py - Reward Calculator

Pure functions mapping a logged event and the character's attack stat to the
calories, money saved, carbon reduced and points it earns.

Pickup:
    calories    = round(distance_km * 30)
    money_saved = 3000 (delivery fee avoided)
    carbon      = round2(distance_km * 0.15) (+0.05 with a reusable container)
    base_points = round(calories * 0.5 + money_saved / 100 + carbon * 20)

Delivery:
    calories = money_saved = carbon = 0
    base_points = floor(order_value * 0.005)

Bonus:
    total_points = floor(base_points * (1 + attack * 0.01))

Rounding is half away from zero and all arithmetic is exact Decimal, so
results never depend on binary float representation.
"""

from __future__ import annotations
from decimal import Decimal

from .core import (
    PickupEvent, DeliveryEvent, RewardEvent, RewardOutcome, GameRules,
    DEFAULT_RULES, CARBON_DECIMAL_PLACES,
    InvalidInput,
    to_decimal, round_half_up, floor_int,
)


def pickup_base(event: PickupEvent, rules: GameRules = DEFAULT_RULES):
    """
    Compute (calories, money_saved, carbon, base_points) for a pickup.

    Raises:
        InvalidInput: If distance_km is not a positive finite number
    """
    distance = to_decimal(event.distance_km, "distance_km")
    if distance <= 0:
        raise InvalidInput(f"distance_km must be positive, got {event.distance_km}")

    calories = round_half_up(distance * rules.calories_per_km)
    money_saved = rules.pickup_money_saved
    carbon = round_half_up(distance * rules.carbon_per_km, CARBON_DECIMAL_PLACES)
    if event.used_reusable_container:
        carbon += rules.reusable_container_carbon_bonus

    raw = (
        calories * rules.points_per_calorie
        + Decimal(money_saved) / rules.money_saved_per_point
        + carbon * rules.points_per_carbon
    )
    base_points = int(round_half_up(raw))
    return calories, money_saved, carbon, base_points


def delivery_base(event: DeliveryEvent, rules: GameRules = DEFAULT_RULES) -> int:
    """
    Base points for a delivery order.

    Raises:
        InvalidInput: If order_value is not a positive integer
    """
    if isinstance(event.order_value, bool) or not isinstance(event.order_value, int):
        raise InvalidInput(f"order_value must be an integer, got {event.order_value!r}")
    if event.order_value <= 0:
        raise InvalidInput(f"order_value must be positive, got {event.order_value}")
    return floor_int(Decimal(event.order_value) * rules.delivery_point_rate)


def apply_attack_bonus(base_points: int, character_attack: int, rules: GameRules = DEFAULT_RULES) -> int:
    """floor(base_points * (1 + attack * 0.01))."""
    if character_attack < 0:
        raise InvalidInput(f"character_attack cannot be negative, got {character_attack}")
    bonus_rate = Decimal(character_attack) * rules.attack_bonus_per_point
    return floor_int(Decimal(base_points) * (1 + bonus_rate))


def compute_reward(
    event: RewardEvent,
    character_attack: int,
    rules: GameRules = DEFAULT_RULES,
) -> RewardOutcome:
    """
    Compute the reward for one event.

    No side effects; deterministic given inputs. Distances and order values
    are supplied by the caller.

    Args:
        event: PickupEvent or DeliveryEvent
        character_attack: Current attack stat (>= 0)
        rules: Reward parameters

    Returns:
        RewardOutcome with calories, money_saved, carbon, base_points, total_points

    Raises:
        InvalidInput: For non-positive distance/order value or negative attack

    Example:
        >>> compute_reward(PickupEvent(Decimal("2.0"), True), 25).total_points
        83
    """
    if isinstance(event, PickupEvent):
        calories, money_saved, carbon, base_points = pickup_base(event, rules)
    elif isinstance(event, DeliveryEvent):
        calories, money_saved, carbon = Decimal("0"), 0, Decimal("0")
        base_points = delivery_base(event, rules)
    else:
        raise InvalidInput(f"Unknown reward event type: {type(event).__name__}")

    total_points = apply_attack_bonus(base_points, character_attack, rules)
    return RewardOutcome(
        calories=calories,
        money_saved=money_saved,
        carbon=carbon,
        base_points=base_points,
        total_points=total_points,
    )


def compute_step_reward(steps: int, rules: GameRules = DEFAULT_RULES) -> int:
    """
    Points for a pedometer session: one point per 100 steps, capped at 100.

    Raises:
        InvalidInput: If steps is negative
    """
    if steps < 0:
        raise InvalidInput(f"steps cannot be negative, got {steps}")
    return min(steps // rules.steps_per_point, rules.max_step_points)
