#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Reward Ledger Step by Step

A walkthrough of one session with the app's demo user. Each step builds on
the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Earning       - Pickups, deliveries, the attack bonus
  4-5:  Progression   - Level-up and stat allocation
  6-8:  Spending      - Shop, lucky draw, roulette, step rewards
  9-10: Social        - Friends and the three leaderboards
  11:   Guarantees    - Rejection, idempotency and balance reconciliation

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from decimal import Decimal
import sys

import numpy as np

from pickup_ledger import (
    # Ledger
    Ledger, ExecuteResult, ChangeKind, build_change,
    # Data
    PickupEvent, DeliveryEvent, demo_ledger,
    # Operations
    compute_reward, apply_reward, log_activity,
    start_pickup, complete_pickup, process_delivery,
    spend, allocate_stats, draw_coupon, spin_roulette, reward_steps,
    add_friend, update_username, rankings_for,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    start_time: datetime = datetime(2025, 1, 1, 9, 0, 0)
    seed: int = 2025

    pickup_restaurant: str = "Pizza Hut"
    pickup_distance_km: Decimal = Decimal("2.0")
    delivery_restaurant: str = "BHC Chicken"
    delivery_order_value: int = 18000

    shop_price: int = 1200
    steps_walked: int = 8000
    new_friend: str = "Kang Runner"


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def show_profile(ledger: Ledger):
    profile = ledger.get_profile()
    character = profile.character
    print(f"User:          {profile.name} (level {profile.level})")
    print(f"Experience:    {profile.experience} / {profile.experience_to_next_level}")
    print(f"Balance:       {profile.spendable_balance}P")
    print(f"Character:     attack {character.attack}, defense {character.defense}, "
          f"{character.stat_points} stat points")
    print(f"Coupons:       {[c.name for c in profile.coupons]}")


# ============================================================================
# PHASE 1: EARNING (Steps 1-3)
# ============================================================================

def step_01_demo_user():
    step_header(1, "The Demo User",
        "Meet the starting state: one user, five others, one friend.")

    print(">>> ledger = demo_ledger(initial_time=datetime(2025, 1, 1, 9, 0))")
    ledger = demo_ledger(initial_time=CONFIG.start_time, verbose=True)

    section_header("Initial State")
    show_profile(ledger)
    print(f"History:       {[a.restaurant_name for a in ledger.get_activities()]}")
    print(f"Friends:       {sorted(ledger.get_friend_ids())}")

    print("""
    Two counters matter:
    - experience        : permanent score, drives level and rank
    - spendable_balance : currency, goes down when you spend
    Earning raises both by the same amount. Spending lowers only the balance.
    """)
    return ledger


def step_02_pickup(ledger: Ledger):
    step_header(2, "A Pickup",
        "See how distance and a reusable container turn into points.")

    event = PickupEvent(CONFIG.pickup_distance_km, True, CONFIG.pickup_restaurant)
    outcome = compute_reward(event, ledger.get_character().attack)

    section_header("Reward Calculator (pure)")
    print(f"calories    = round(30 × {event.distance_km})             = {outcome.calories}")
    print(f"money saved = flat delivery fee                    = {outcome.money_saved}")
    print(f"carbon      = round2(0.15 × {event.distance_km}) + 0.05    = {outcome.carbon}")
    print(f"base points = round(cal×0.5 + saved/100 + carbon×20) = {outcome.base_points}")
    print(f"total       = floor(base × (1 + attack × 0.01))    = {outcome.total_points}")

    section_header("Logging the Pickup")
    activity = log_activity(ledger, event)
    print(f"Activity {activity.id} at {activity.timestamp}: +{activity.points_earned}P")
    show_profile(ledger)
    return ledger


def step_03_delivery(ledger: Ledger):
    step_header(3, "A Delivery",
        "Deliveries earn 0.5% of the order value and never touch the eco stats.")

    pickups_before = ledger.get_profile().stats.total_pickups
    ledger.advance_time(ledger.current_time + timedelta(hours=3))
    activity = process_delivery(ledger, CONFIG.delivery_restaurant, CONFIG.delivery_order_value)

    print(f"Order value {CONFIG.delivery_order_value} → {activity.points_earned}P "
          f"(attack bonus included)")
    print(f"Total pickups before/after: {pickups_before} / "
          f"{ledger.get_profile().stats.total_pickups}")
    return ledger


# ============================================================================
# PHASE 2: PROGRESSION (Steps 4-5)
# ============================================================================

def step_04_level_up(ledger: Ledger, rng: np.random.Generator):
    step_header(4, "Levelling Up",
        "Cross the threshold: level +1, threshold ×1.2, +3 stat points.")

    while ledger.get_profile().level == 25:
        ledger.advance_time(ledger.current_time + timedelta(minutes=30))
        session = start_pickup(CONFIG.pickup_restaurant, 18000, True, rng=rng)
        activity = complete_pickup(ledger, session)
        print(f"  walked {session.distance_km} km, +{activity.points_earned}P")
        if len(ledger.get_activities()) > 200:
            break

    section_header("After Level-Up")
    show_profile(ledger)
    print("""
    At most one level-up happens per reward. If a single reward jumps past
    two thresholds, the next reward performs the next level-up.
    """)
    return ledger


def step_05_allocate(ledger: Ledger):
    step_header(5, "Stat Allocation",
        "Stat points buy attack, and attack multiplies future rewards.")

    points = ledger.get_character().stat_points
    character = allocate_stats(ledger, points, 0)
    print(f"Allocated {points} to attack → attack {character.attack}")

    preview = compute_reward(DeliveryEvent(CONFIG.delivery_order_value), character.attack)
    print(f"The same delivery would now earn {preview.total_points}P")
    return ledger


# ============================================================================
# PHASE 3: SPENDING (Steps 6-8)
# ============================================================================

def step_06_shop(ledger: Ledger):
    step_header(6, "The Shop",
        "Spending lowers the balance but never experience or level.")

    exp_before = ledger.get_profile().experience
    ok = spend(ledger, CONFIG.shop_price, "shop item")
    print(f"spend({CONFIG.shop_price}) → {ok}")
    print(f"Experience unchanged: {exp_before} == {ledger.get_profile().experience}")

    section_header("Too Expensive")
    too_much = ledger.get_profile().spendable_balance + 1
    print(f"spend({too_much}) → {spend(ledger, too_much)}  (nothing changed)")
    return ledger


def step_07_draws(ledger: Ledger, rng: np.random.Generator):
    step_header(7, "Lucky Draw and Roulette",
        "Games of chance are a spend followed by a prize.")

    coupon = draw_coupon(ledger)
    print(f"Lucky draw: {coupon.name if coupon else 'not enough points'}")

    for _ in range(3):
        result = spin_roulette(ledger, rng)
        if result is None:
            print("Roulette: not enough points")
            break
        print(f"Roulette slice {result.slice_index}: {result.message}")
    show_profile(ledger)
    return ledger


def step_08_steps(ledger: Ledger):
    step_header(8, "Step Rewards",
        "One point per 100 steps, at most 100, credited to the balance only.")

    points = reward_steps(ledger, CONFIG.steps_walked)
    print(f"{CONFIG.steps_walked} steps → {points}P")
    return ledger


# ============================================================================
# PHASE 4: SOCIAL (Steps 9-10)
# ============================================================================

def step_09_friends(ledger: Ledger):
    step_header(9, "Friends and Profile",
        "Friend lookups report failure in the result instead of raising.")

    for nickname in (CONFIG.new_friend, CONFIG.new_friend, "Nobody"):
        result = add_friend(ledger, nickname)
        print(f"add_friend({nickname!r}) → {result.success}: {result.message}")

    update_username(ledger, "Kim Walker")
    print(f"Renamed to {ledger.get_profile().name}")
    return ledger


def step_10_rankings(ledger: Ledger, rng: np.random.Generator):
    step_header(10, "Leaderboards",
        "Local and friends are sorted by experience; weekly is a shuffle.")

    rankings = rankings_for(ledger, rng)
    for title, entries in (("Local", rankings.local), ("Friends", rankings.friends),
                           ("Weekly", rankings.weekly)):
        section_header(title)
        for entry in entries:
            print(f"  #{entry.rank:<2} {entry.name:<15} lvl {entry.level:<3} {entry.score}")
    return ledger


# ============================================================================
# PHASE 5: GUARANTEES (Step 11)
# ============================================================================

def step_11_guarantees(ledger: Ledger):
    step_header(11, "Guarantees",
        "Bad changes are rejected, retries are harmless, and the journal adds up.")

    section_header("Rejection")
    profile = ledger.get_profile()
    bad = build_change(ledger, ChangeKind.SPEND, replace(profile, spendable_balance=-1))
    print(f"Negative balance change → {ledger.execute(bad).value}")

    section_header("Idempotency")
    event = DeliveryEvent(10000, "Cafe")
    pending = apply_reward(ledger, compute_reward(event, ledger.get_character().attack), event)
    first = ledger.execute(pending)
    second = ledger.execute(pending)
    print(f"First execute: {first.value}, retry: {second.value}")
    assert second == ExecuteResult.ALREADY_APPLIED

    section_header("Reconciliation")
    check = ledger.verify_balances()
    print(f"Journal entries:   {len(ledger.journal)}")
    print(f"Balance:           expected {check['expected_balance']}, actual {check['actual_balance']}")
    print(f"Experience:        expected {check['expected_experience']}, actual {check['actual_experience']}")
    print(f"Valid:             {check['valid']}")
    return ledger


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       PICKUP REWARD LEDGER - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    rng = np.random.default_rng(CONFIG.seed)
    wait_for_enter()

    ledger = step_01_demo_user()
    wait_for_enter()
    ledger = step_02_pickup(ledger)
    wait_for_enter()
    ledger = step_03_delivery(ledger)
    wait_for_enter()
    ledger = step_04_level_up(ledger, rng)
    wait_for_enter()
    ledger = step_05_allocate(ledger)
    wait_for_enter()
    ledger = step_06_shop(ledger)
    wait_for_enter()
    ledger = step_07_draws(ledger, rng)
    wait_for_enter()
    ledger = step_08_steps(ledger)
    wait_for_enter()
    ledger = step_09_friends(ledger)
    wait_for_enter()
    ledger = step_10_rankings(ledger, rng)
    wait_for_enter()
    step_11_guarantees(ledger)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    Next steps:
      - See pickup_ledger/rewards.py for the reward formulas
      - See pickup_ledger/ledger.py for validation and the journal
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
