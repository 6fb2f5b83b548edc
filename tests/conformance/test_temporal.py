"""
Temporal Conformance Tests

INVARIANT: Activities and journal entries follow the ledger's logical clock.

    ∀ entries e1, e2 in journal:
        seq(e1) < seq(e2) ⟹ time(e1) <= time(e2)

This ensures:
- Activity timestamps come from the ledger, never the wall clock
- Time can only advance forward
- History is ordered most recent first
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from datetime import timedelta

from pickup_ledger import DeliveryEvent, log_activity, spend
from tests.helpers import BASE_TIME, make_profile, make_ledger


class TestTemporalProperties:

    @given(st.lists(st.integers(min_value=0, max_value=3600), min_size=1, max_size=10))
    @settings(max_examples=50)
    def test_journal_times_non_decreasing(self, gaps):
        """
        PROPERTY: Journal sequence and time order agree.
        """
        ledger = make_ledger(make_profile(spendable_balance=100))
        now = BASE_TIME
        for gap in gaps:
            now += timedelta(seconds=gap)
            ledger.advance_time(now)
            log_activity(ledger, DeliveryEvent(10000, "Cafe"))
            spend(ledger, 10)

        times = [e.execution_time for e in ledger.journal]
        assert times == sorted(times)
        assert [e.sequence_number for e in ledger.journal] == list(range(len(ledger.journal)))

    @given(st.lists(st.integers(min_value=1, max_value=3600), min_size=2, max_size=10))
    @settings(max_examples=50)
    def test_history_most_recent_first(self, gaps):
        ledger = make_ledger()
        now = BASE_TIME
        for gap in gaps:
            now += timedelta(seconds=gap)
            ledger.advance_time(now)
            log_activity(ledger, DeliveryEvent(10000, "Cafe"))

        timestamps = [a.timestamp for a in ledger.get_activities()]
        assert timestamps == sorted(timestamps, reverse=True)


class TestTemporalExamples:

    def test_activity_timestamp_is_ledger_time(self, fresh_ledger):
        later = BASE_TIME + timedelta(days=3)
        fresh_ledger.advance_time(later)
        activity = log_activity(fresh_ledger, DeliveryEvent(10000, "Cafe"))
        assert activity.timestamp == later
        assert fresh_ledger.journal[-1].timestamp == later

    def test_time_cannot_go_backwards(self, fresh_ledger):
        fresh_ledger.advance_time(BASE_TIME + timedelta(hours=1))
        with pytest.raises(ValueError):
            fresh_ledger.advance_time(BASE_TIME)
        assert fresh_ledger.current_time == BASE_TIME + timedelta(hours=1)
