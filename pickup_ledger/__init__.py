"""
pickup_ledger - Activity Reward & Progression Engine

Turns logged pickups and deliveries into points, experience, level-ups,
stat points and leaderboard positions, and spends the resulting balance on
coupons, roulette spins and stat allocation.

Usage:
    from decimal import Decimal
    from pickup_ledger import demo_ledger, log_activity, PickupEvent, spend, rankings_for

    ledger = demo_ledger()
    activity = log_activity(ledger, PickupEvent(Decimal("2.0"), True, "Pizza Hut"))
    activity.points_earned        # 83
    spend(ledger, 1000)           # True
    rankings_for(ledger).local[0]
"""

# Core types
from .core import (
    LedgerView,
    GameRules,
    DEFAULT_RULES,
    PickupEvent,
    DeliveryEvent,
    RewardOutcome,
    Skill,
    Character,
    UserStats,
    Coupon,
    UserProfile,
    Activity,
    RankEntry,
    Rankings,
    FriendResult,
    PendingChange,
    JournalEntry,
    ExecuteResult,
    ChangeKind,
    LedgerError,
    InvalidInput,
    InsufficientPoints,
    build_change,
    to_decimal,
)

# Ledger
from .ledger import Ledger

# Reward calculator
from .rewards import (
    compute_reward,
    compute_step_reward,
)

# Progression
from .progression import (
    apply_reward,
    level_up,
    needs_level_up,
    log_activity,
)

# Rankings
from .ranking import (
    compute_rankings,
    rankings_for,
    rank_users,
    rank_of,
)

# Spending
from .spending import (
    spend,
    credit,
    allocate_stats,
    draw_coupon,
    spin_roulette,
    reward_steps,
    add_friend,
    update_username,
    RoulettePrize,
    RouletteResult,
    ROULETTE_SLICES,
    LUCKY_DRAW_COUPON,
)

# Sessions
from .session import (
    PickupSession,
    start_pickup,
    complete_pickup,
    process_delivery,
)

# Demo data
from .demo_data import (
    demo_profile,
    demo_roster,
    demo_activities,
    demo_ledger,
)

__all__ = [
    # Core
    'LedgerView', 'GameRules', 'DEFAULT_RULES',
    'PickupEvent', 'DeliveryEvent', 'RewardOutcome',
    'Skill', 'Character', 'UserStats', 'Coupon', 'UserProfile', 'Activity',
    'RankEntry', 'Rankings', 'FriendResult',
    'PendingChange', 'JournalEntry', 'ExecuteResult', 'ChangeKind',
    'LedgerError', 'InvalidInput', 'InsufficientPoints',
    'build_change', 'to_decimal',
    # Ledger
    'Ledger',
    # Rewards
    'compute_reward', 'compute_step_reward',
    # Progression
    'apply_reward', 'level_up', 'needs_level_up', 'log_activity',
    # Rankings
    'compute_rankings', 'rankings_for', 'rank_users', 'rank_of',
    # Spending
    'spend', 'credit', 'allocate_stats', 'draw_coupon', 'spin_roulette',
    'reward_steps', 'add_friend', 'update_username',
    'RoulettePrize', 'RouletteResult', 'ROULETTE_SLICES', 'LUCKY_DRAW_COUPON',
    # Sessions
    'PickupSession', 'start_pickup', 'complete_pickup', 'process_delivery',
    # Demo data
    'demo_profile', 'demo_roster', 'demo_activities', 'demo_ledger',
]

__version__ = '1.0.0'
