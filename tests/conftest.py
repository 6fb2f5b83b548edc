"""
conftest.py - Shared pytest fixtures for reward ledger tests

Provides common fixtures used across unit, conformance and functional tests:
- The app's demo ledger
- Fresh, nearly broke and nearly levelled-up users
"""

import pytest

from pickup_ledger import demo_ledger

from tests.helpers import BASE_TIME, make_profile, make_ledger


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def ledger():
    """The app's demo ledger: 12000/15000 exp, 5000 points, attack 25."""
    return demo_ledger(initial_time=BASE_TIME, verbose=False)


@pytest.fixture
def fresh_ledger():
    """Level 1 user with no points, no roster."""
    return make_ledger()


@pytest.fixture
def poor_ledger():
    """User with 50 spendable points and 2 stat points."""
    return make_ledger(make_profile(spendable_balance=50, stat_points=2))


@pytest.fixture
def near_level_up_ledger():
    """User 50 experience short of the next level."""
    return make_ledger(make_profile(
        level=25, experience=14950, experience_to_next_level=15000,
        spendable_balance=100, attack=25,
    ))
