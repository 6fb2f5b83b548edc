"""
Monotonicity Conformance Tests

INVARIANT: Experience and level never decrease.

    ∀ operation op:
        experience(after op) >= experience(before op)
        level(after op) >= level(before op)

Spending reduces only the spendable balance; experience is the permanent
ranking score.
"""

import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st
from decimal import Decimal

from pickup_ledger import (
    GameRules, PickupEvent, DeliveryEvent, log_activity, spend, draw_coupon,
    spin_roulette, reward_steps, update_username,
)
from tests.helpers import make_profile, make_ledger


operation_strategy = st.one_of(
    st.tuples(st.just("pickup"), st.integers(min_value=1, max_value=3000), st.booleans()),
    st.tuples(st.just("delivery"), st.integers(min_value=1, max_value=200000)),
    st.tuples(st.just("spend"), st.integers(min_value=0, max_value=2000)),
    st.tuples(st.just("draw")),
    st.tuples(st.just("roulette"), st.integers(min_value=0, max_value=1000)),
    st.tuples(st.just("steps"), st.integers(min_value=0, max_value=20000)),
    st.tuples(st.just("rename")),
)


def _apply(ledger, op):
    name = op[0]
    if name == "pickup":
        log_activity(ledger, PickupEvent(Decimal(op[1]) / 10, op[2], "Cafe"))
    elif name == "delivery":
        log_activity(ledger, DeliveryEvent(op[1], "Cafe"))
    elif name == "spend":
        spend(ledger, op[1])
    elif name == "draw":
        draw_coupon(ledger)
    elif name == "roulette":
        spin_roulette(ledger, np.random.default_rng(op[1]))
    elif name == "steps":
        reward_steps(ledger, op[1])
    elif name == "rename":
        update_username(ledger, "Renamed")


class TestMonotonicityProperties:

    @given(st.lists(operation_strategy, min_size=1, max_size=20))
    @settings(max_examples=50)
    def test_experience_and_level_never_decrease(self, ops):
        ledger = make_ledger(make_profile(spendable_balance=3000, experience_to_next_level=50))
        for op in ops:
            before = ledger.get_profile()
            _apply(ledger, op)
            after = ledger.get_profile()
            assert after.experience >= before.experience
            assert after.level >= before.level
            assert after.experience_to_next_level >= before.experience_to_next_level

    @given(
        st.lists(st.integers(min_value=1, max_value=3000), min_size=1, max_size=10),
        st.integers(min_value=1, max_value=5),
    )
    @settings(max_examples=50)
    def test_level_up_is_bounded_per_reward(self, distances, max_level_ups):
        """
        PROPERTY: One reward raises the level by at most the configured bound.
        """
        rules = GameRules(max_level_ups_per_reward=max_level_ups)
        ledger = make_ledger(make_profile(experience_to_next_level=10), rules=rules)
        for tenths in distances:
            before = ledger.get_profile()
            log_activity(ledger, PickupEvent(Decimal(tenths) / 10, False, "Cafe"))
            after = ledger.get_profile()
            gained = after.level - before.level
            assert 0 <= gained <= max_level_ups
            assert after.character.stat_points - before.character.stat_points == 3 * gained
