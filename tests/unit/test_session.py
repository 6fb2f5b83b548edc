"""
test_session.py - Unit tests for pickup sessions and deliveries
"""

import numpy as np
import pytest
from decimal import Decimal

from pickup_ledger import (
    PickupSession, start_pickup, complete_pickup, process_delivery, InvalidInput,
)
from pickup_ledger.session import MIN_SESSION_DISTANCE_KM, MAX_SESSION_DISTANCE_KM


class TestStartPickup:

    @pytest.mark.parametrize("seed", range(10))
    def test_distance_within_range(self, seed):
        session = start_pickup("Pizza Hut", 18000, rng=np.random.default_rng(seed))
        assert Decimal(str(MIN_SESSION_DISTANCE_KM)) <= session.distance_km <= Decimal(str(MAX_SESSION_DISTANCE_KM))
        assert session.distance_km == session.distance_km.quantize(Decimal("0.001"))

    def test_seeded_distance_is_reproducible(self):
        a = start_pickup("Pizza Hut", 18000, rng=np.random.default_rng(3))
        b = start_pickup("Pizza Hut", 18000, rng=np.random.default_rng(3))
        assert a == b

    def test_blank_restaurant(self):
        with pytest.raises(InvalidInput):
            start_pickup("  ", 18000)

    def test_to_event(self):
        session = PickupSession("Pizza Hut", 18000, Decimal("2.0"), True)
        event = session.to_event()
        assert event.distance_km == Decimal("2.0")
        assert event.used_reusable_container is True
        assert event.restaurant_name == "Pizza Hut"


class TestCompletion:

    def test_complete_pickup(self, ledger):
        session = PickupSession("Pizza Hut", 18000, Decimal("2.0"), True)
        activity = complete_pickup(ledger, session)
        assert activity.points_earned == 83
        assert activity.restaurant_name == "Pizza Hut"
        assert ledger.get_profile().stats.total_pickups == 129

    def test_order_value_does_not_affect_pickup_points(self, fresh_ledger):
        cheap = complete_pickup(fresh_ledger.clone(), PickupSession("A", 1000, Decimal("1.0")))
        pricey = complete_pickup(fresh_ledger.clone(), PickupSession("A", 90000, Decimal("1.0")))
        assert cheap.points_earned == pricey.points_earned == 48

    def test_process_delivery(self, ledger):
        activity = process_delivery(ledger, "BHC Chicken", 18000)
        assert activity.points_earned == 112
        assert activity.calories_burned == 0
        assert activity.used_reusable_container is False
        assert ledger.get_profile().stats.total_pickups == 128

    def test_process_delivery_invalid_value(self, ledger):
        with pytest.raises(InvalidInput):
            process_delivery(ledger, "BHC Chicken", 0)
