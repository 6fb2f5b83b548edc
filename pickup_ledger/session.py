"""
session.py - Pickup sessions

The app picks a random walking distance when a pickup starts and rewards it
when the user confirms the pickup. That randomness lives here, outside the
reward calculator, so compute_reward() stays a pure function.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import numpy as np

from .core import Activity, PickupEvent, DeliveryEvent, InvalidInput, round_half_up
from .ledger import Ledger
from .progression import log_activity


MIN_SESSION_DISTANCE_KM = 0.5
MAX_SESSION_DISTANCE_KM = 2.5


@dataclass(frozen=True, slots=True)
class PickupSession:
    """A pickup in progress: the order and the distance the user will walk."""
    restaurant_name: str
    order_value: int
    distance_km: Decimal
    used_reusable_container: bool = False

    def to_event(self) -> PickupEvent:
        return PickupEvent(
            distance_km=self.distance_km,
            used_reusable_container=self.used_reusable_container,
            restaurant_name=self.restaurant_name,
        )


def start_pickup(
    restaurant_name: str,
    order_value: int,
    used_reusable_container: bool = False,
    rng: Optional[np.random.Generator] = None,
) -> PickupSession:
    """
    Start a pickup with a random distance in [0.5, 2.5] km.

    The distance is kept to three decimal places (metres).
    """
    if not restaurant_name or not restaurant_name.strip():
        raise InvalidInput("restaurant_name cannot be empty")
    if rng is None:
        rng = np.random.default_rng()
    distance = rng.uniform(MIN_SESSION_DISTANCE_KM, MAX_SESSION_DISTANCE_KM)
    return PickupSession(
        restaurant_name=restaurant_name,
        order_value=order_value,
        distance_km=round_half_up(Decimal(str(distance)), 3),
        used_reusable_container=used_reusable_container,
    )


def complete_pickup(ledger: Ledger, session: PickupSession) -> Activity:
    """Reward a finished pickup session."""
    return log_activity(ledger, session.to_event())


def process_delivery(ledger: Ledger, restaurant_name: str, order_value: int) -> Activity:
    """Reward a delivery order (0.5% of the order value, no stats)."""
    return log_activity(ledger, DeliveryEvent(order_value=order_value, restaurant_name=restaurant_name))
