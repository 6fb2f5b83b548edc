"""
Atomicity Conformance Tests

INVARIANT: Changes are all-or-nothing.

    ∀ pending change P:
        P applied ⟹ profile, activity history, friend set and journal all updated
        P rejected or raises ⟹ none of them changed

A failed operation (insufficient balance, invalid input, stale base)
leaves the ledger exactly as it was.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from dataclasses import replace
from decimal import Decimal

from pickup_ledger import (
    ExecuteResult, ChangeKind, PickupEvent, DeliveryEvent, InvalidInput, InsufficientPoints,
    build_change, log_activity, spend, allocate_stats, draw_coupon, spin_roulette,
)
from tests.helpers import make_profile, make_ledger, snapshot, FixedRng


class TestAtomicityProperties:
    """Property-based atomicity tests."""

    @given(
        st.integers(min_value=0, max_value=3000),
        st.lists(st.integers(min_value=0, max_value=1500), min_size=1, max_size=8),
    )
    @settings(max_examples=50)
    def test_spend_sequence_never_partial(self, balance, amounts):
        """
        PROPERTY: Each spend either debits exactly its amount or nothing.
        """
        ledger = make_ledger(make_profile(spendable_balance=balance))
        for amount in amounts:
            before = ledger.get_profile().spendable_balance
            ok = spend(ledger, amount)
            after = ledger.get_profile().spendable_balance
            if ok:
                assert after == before - amount
            else:
                assert after == before
            assert after >= 0

    @given(st.integers(min_value=1, max_value=3000), st.booleans())
    @settings(max_examples=50)
    def test_reward_updates_every_part_together(self, tenths, reusable):
        """
        PROPERTY: A logged activity appears in history, stats, balances and
        journal in the same step.
        """
        ledger = make_ledger()
        activity = log_activity(ledger, PickupEvent(Decimal(tenths) / 10, reusable, "Cafe"))
        profile = ledger.get_profile()

        assert ledger.get_activities() == (activity,)
        assert profile.stats.total_pickups == 1
        assert profile.experience == activity.points_earned
        assert profile.spendable_balance == activity.points_earned
        assert len(ledger.journal) == 1
        assert ledger.journal[0].activity_id == activity.id


class TestAtomicityExamples:
    """Explicit atomicity examples."""

    def test_rejected_change_leaves_everything(self, ledger):
        profile = ledger.get_profile()
        pending = build_change(
            ledger, ChangeKind.SPEND, replace(profile, spendable_balance=-1),
            friend_ids=ledger.get_friend_ids() | {"user_3"},
        )
        before = snapshot(ledger)
        assert ledger.execute(pending) == ExecuteResult.REJECTED
        assert snapshot(ledger) == before

    def test_invalid_reward_leaves_everything(self, ledger):
        before = snapshot(ledger)
        with pytest.raises(InvalidInput):
            log_activity(ledger, DeliveryEvent(-5, "Cafe"))
        assert snapshot(ledger) == before

    def test_failed_allocation_leaves_everything(self, poor_ledger):
        before = snapshot(poor_ledger)
        with pytest.raises(InsufficientPoints):
            allocate_stats(poor_ledger, 3, 0)
        assert snapshot(poor_ledger) == before

    def test_unaffordable_draw_awards_nothing(self, poor_ledger):
        before = snapshot(poor_ledger)
        assert draw_coupon(poor_ledger) is None
        assert spin_roulette(poor_ledger, FixedRng(5)) is None
        assert snapshot(poor_ledger) == before
        assert poor_ledger.get_profile().coupons == ()
