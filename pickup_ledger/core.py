"""
Core types and pure helpers for the reward ledger.

This module provides the foundational data structures and protocols:
1. Protocols: LedgerView for read-only ledger access
2. Immutable data structures: UserProfile, Character, Activity, PendingChange, ...
3. Exceptions: LedgerError and domain-specific error types
4. Configuration: GameRules and the constants it is built from
5. Helpers: Decimal conversion and rounding, intent hashing

All functions in this module are pure and operate on read-only views.
No function can mutate ledger state directly.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_FLOOR, getcontext
from enum import Enum
import hashlib
from typing import (
    Optional, Any, Protocol, Tuple, FrozenSet, Union, runtime_checkable
)


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Distances, calories and carbon are computed in Decimal so the reward rules
# reproduce exactly regardless of binary float representation.
#
# PRECONDITION: No other code should modify the global Decimal context.
#
_LEDGER_DECIMAL_CONTEXT = getcontext()
_LEDGER_DECIMAL_CONTEXT.prec = 50
_LEDGER_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

# Pickup reward rules
CALORIES_PER_KM = Decimal("30")
CARBON_PER_KM = Decimal("0.15")
REUSABLE_CONTAINER_CARBON_BONUS = Decimal("0.05")
PICKUP_MONEY_SAVED = 3000            # flat delivery fee avoided
CARBON_DECIMAL_PLACES = 2

# Base point weights: calories*0.5 + money_saved/100 + carbon*20
POINTS_PER_CALORIE = Decimal("0.5")
MONEY_SAVED_PER_POINT = Decimal("100")
POINTS_PER_CARBON = Decimal("20")

# Delivery orders earn 0.5% of the order value
DELIVERY_POINT_RATE = Decimal("0.005")

# Each attack point adds 1% to earned points
ATTACK_BONUS_PER_POINT = Decimal("0.01")

# Level-up transition
LEVEL_UP_THRESHOLD_GROWTH = Decimal("1.2")
STAT_POINTS_PER_LEVEL = 3
MAX_LEVEL_UPS_PER_REWARD = 1

# Spending
LUCKY_DRAW_COST = 1000
ROULETTE_COST = 1000
ROULETTE_REFUND = 1000

# Step counter rewards
STEPS_PER_POINT = 100
MAX_STEP_POINTS = 100


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass(frozen=True, slots=True)
class GameRules:
    """
    Tunable parameters of the reward, progression and spending rules.

    Defaults reproduce the app's behaviour. A custom instance can be passed to
    Ledger and to the pure functions that accept a ``rules`` argument.

    max_level_ups_per_reward is the level-up policy: 1 checks the threshold
    once per reward (the app's behaviour), larger values allow a bounded
    number of consecutive level-ups when one reward crosses several thresholds.
    """
    calories_per_km: Decimal = CALORIES_PER_KM
    carbon_per_km: Decimal = CARBON_PER_KM
    reusable_container_carbon_bonus: Decimal = REUSABLE_CONTAINER_CARBON_BONUS
    pickup_money_saved: int = PICKUP_MONEY_SAVED
    points_per_calorie: Decimal = POINTS_PER_CALORIE
    money_saved_per_point: Decimal = MONEY_SAVED_PER_POINT
    points_per_carbon: Decimal = POINTS_PER_CARBON
    delivery_point_rate: Decimal = DELIVERY_POINT_RATE
    attack_bonus_per_point: Decimal = ATTACK_BONUS_PER_POINT
    level_up_threshold_growth: Decimal = LEVEL_UP_THRESHOLD_GROWTH
    stat_points_per_level: int = STAT_POINTS_PER_LEVEL
    max_level_ups_per_reward: int = MAX_LEVEL_UPS_PER_REWARD
    lucky_draw_cost: int = LUCKY_DRAW_COST
    roulette_cost: int = ROULETTE_COST
    roulette_refund: int = ROULETTE_REFUND
    steps_per_point: int = STEPS_PER_POINT
    max_step_points: int = MAX_STEP_POINTS

    def __post_init__(self):
        if self.max_level_ups_per_reward < 1:
            raise ValueError("max_level_ups_per_reward must be at least 1")
        if self.level_up_threshold_growth <= 1:
            raise ValueError("level_up_threshold_growth must be greater than 1")
        if self.steps_per_point <= 0:
            raise ValueError("steps_per_point must be positive")


DEFAULT_RULES = GameRules()


# ============================================================================
# ENUMS
# ============================================================================

class ExecuteResult(Enum):
    """
    Outcome of executing a pending change.

    APPLIED: Change was validated and applied to the ledger.
    ALREADY_APPLIED: Intent id was previously processed (idempotent behavior).
    REJECTED: Change failed validation (stale base, negative balance,
              decreasing experience, future timestamp).
    """
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    REJECTED = "rejected"


class ChangeKind(Enum):
    """Classification of a pending change, recorded in the journal."""
    EARN = "earn"                 # Reward from a logged pickup/delivery
    SPEND = "spend"               # Debit of the spendable balance
    CREDIT = "credit"             # Balance-only credit (steps, roulette refund)
    ALLOCATE = "allocate"         # Stat points moved into attack/defense
    PRIZE = "prize"               # Coupon added to the coupon box
    PROFILE = "profile"           # Non-point profile edit (rename)
    FRIEND = "friend"             # Friend set update


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class InvalidInput(LedgerError, ValueError):
    """Raised for malformed event parameters, negative amounts or blank names."""
    pass


class InsufficientPoints(LedgerError):
    """Raised when a stat allocation costs more than the available stat points."""
    pass


# ============================================================================
# DECIMAL HELPERS
# ============================================================================

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number, name: str = "value") -> Decimal:
    """
    Convert a number to Decimal via its string form.

    Floats go through str() so 2.0 becomes Decimal("2.0") rather than its
    binary expansion.

    Raises:
        InvalidInput: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be a number, got bool")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except ArithmeticError:
            raise InvalidInput(f"{name} must be a number, got {value!r}") from None
    if result.is_nan() or result.is_infinite():
        raise InvalidInput(f"{name} must be finite, got {value!r}")
    return result


def round_half_up(value: Decimal, places: int = 0) -> Decimal:
    """Round half away from zero to the given number of decimal places."""
    quantizer = Decimal(10) ** -places
    return value.quantize(quantizer, rounding=ROUND_HALF_UP)


def floor_int(value: Decimal) -> int:
    """Largest integer not greater than value."""
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


# ============================================================================
# EVENTS AND REWARD OUTCOMES
# ============================================================================

@dataclass(frozen=True, slots=True)
class PickupEvent:
    """
    A completed pickup: the user walked to the restaurant.

    Attributes:
        distance_km: Walked distance (must be > 0 when rewarded).
        used_reusable_container: Whether a reusable container was used.
        restaurant_name: Display name recorded on the activity.
    """
    distance_km: Decimal
    used_reusable_container: bool = False
    restaurant_name: str = "Pickup"

    @property
    def is_pickup(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class DeliveryEvent:
    """
    A completed delivery order.

    Attributes:
        order_value: Order value in won (must be > 0 when rewarded).
        restaurant_name: Display name recorded on the activity.
    """
    order_value: int
    restaurant_name: str = "Delivery"
    used_reusable_container: bool = False

    @property
    def is_pickup(self) -> bool:
        return False


RewardEvent = Union[PickupEvent, DeliveryEvent]


@dataclass(frozen=True, slots=True)
class RewardOutcome:
    """Result of the reward calculator for one event."""
    calories: Decimal
    money_saved: int
    carbon: Decimal
    base_points: int
    total_points: int


# ============================================================================
# PROFILE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Skill:
    name: str
    description: str


@dataclass(frozen=True, slots=True)
class Character:
    """
    The user's avatar and its stats.

    Attributes:
        id: Character identifier.
        name: Character display name.
        stat_points: Unallocated stat points (gained on level-up).
        attack: Attack stat; each point adds 1% to earned points.
        defense: Defense stat.
        skills: Immutable skill catalog.
    """
    id: str
    name: str
    stat_points: int = 0
    attack: int = 0
    defense: int = 0
    skills: Tuple[Skill, ...] = ()


@dataclass(frozen=True, slots=True)
class UserStats:
    """Cumulative pickup statistics. Deliveries never change these."""
    total_pickups: int = 0
    total_calories_burned: Decimal = Decimal("0")
    total_money_saved: int = 0
    total_carbon_reduced: Decimal = Decimal("0")


@dataclass(frozen=True, slots=True)
class Coupon:
    """A discount coupon won from a spend. Never mutated."""
    name: str
    discount_rate: Decimal
    description: str

    def __post_init__(self):
        if not Decimal("0") <= self.discount_rate <= Decimal("1"):
            raise ValueError(f"discount_rate must be within [0, 1], got {self.discount_rate}")


@dataclass(frozen=True, slots=True)
class UserProfile:
    """
    Canonical state of one user.

    experience is the permanent ranking score and spendable_balance the
    currency; both grow by the same amount when points are earned and
    diverge once the balance is spent.

    Balance and stat-point sign constraints are enforced by Ledger.execute()
    rather than here, so a bad pending change is REJECTED instead of raising.
    """
    id: str
    name: str
    level: int
    experience: int
    experience_to_next_level: int
    spendable_balance: int
    stats: UserStats
    character: Character
    coupons: Tuple[Coupon, ...] = ()

    def __post_init__(self):
        if not self.id or not self.id.strip():
            raise ValueError("UserProfile id cannot be empty")
        if self.level < 1:
            raise ValueError(f"level must be at least 1, got {self.level}")
        if self.experience < 0:
            raise ValueError(f"experience cannot be negative, got {self.experience}")
        if self.experience_to_next_level <= 0:
            raise ValueError(
                f"experience_to_next_level must be positive, got {self.experience_to_next_level}"
            )


@dataclass(frozen=True, slots=True)
class Activity:
    """
    Immutable record of one logged pickup or delivery.

    Created exactly once per logged event and prepended to the history.
    """
    id: str
    restaurant_name: str
    timestamp: datetime
    calories_burned: Decimal
    money_saved: int
    carbon_reduced: Decimal
    points_earned: int
    used_reusable_container: bool


# ============================================================================
# RANKINGS AND RESULTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class RankEntry:
    """Single leaderboard row; score is the user's experience."""
    rank: int
    user_id: str
    name: str
    level: int
    score: int


@dataclass(frozen=True, slots=True)
class Rankings:
    """The three leaderboards shown by the app."""
    local: Tuple[RankEntry, ...]
    friends: Tuple[RankEntry, ...]
    weekly: Tuple[RankEntry, ...]


@dataclass(frozen=True, slots=True)
class FriendResult:
    success: bool
    message: str


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class LedgerView(Protocol):
    """
    Read-only interface to ledger state.

    Functions accepting a LedgerView declare their read-only intent. The
    Ledger class implements this protocol but also provides execute().
    For testing, FakeView provides a minimal implementation.
    """

    @property
    def current_time(self) -> datetime:
        """Return the current logical time of the ledger."""
        ...

    @property
    def sequence(self) -> int:
        """Number of changes applied so far (the base for new changes)."""
        ...

    @property
    def rules(self) -> GameRules:
        ...

    def get_profile(self) -> UserProfile:
        ...

    def get_roster(self) -> Tuple[UserProfile, ...]:
        ...

    def get_friend_ids(self) -> FrozenSet[str]:
        ...

    def next_activity_id(self) -> str:
        ...


# ============================================================================
# INTENT HASHING
# ============================================================================

def _normalize_decimal(d: Decimal) -> str:
    """
    Normalize a Decimal to a canonical string representation.

    Decimal("1.0") and Decimal("1.00") both become "1".
    """
    normalized = d.normalize()
    if normalized == normalized.to_integral_value():
        return str(int(normalized))
    return format(normalized, 'f')


def _canonicalize(value: Any) -> str:
    """
    Produce a canonical string representation of a value for hashing.

    Deterministic regardless of dict/set ordering or Decimal representation.
    """
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return f"E:{value.value}"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return f"D:{_normalize_decimal(value)}"
    if isinstance(value, (int, float)):
        return f"N:{value}"
    if isinstance(value, str):
        return f"S:{value}"
    if isinstance(value, datetime):
        return f"T:{value.isoformat()}"
    if is_dataclass(value) and not isinstance(value, type):
        items = ",".join(
            f"{f.name}={_canonicalize(getattr(value, f.name))}" for f in fields(value)
        )
        return f"{type(value).__name__}({items})"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        serialized = ",".join(f"{_canonicalize(k)}:{_canonicalize(v)}" for k, v in items)
        return f"{{{serialized}}}"
    if isinstance(value, (list, tuple)):
        serialized = ",".join(_canonicalize(item) for item in value)
        return f"[{serialized}]"
    if isinstance(value, (set, frozenset)):
        serialized = ",".join(_canonicalize(item) for item in sorted(value, key=str))
        return f"<{serialized}>"
    return f"R:{repr(value)}"


def _compute_intent_id(
    kind: ChangeKind,
    base_sequence: int,
    profile: UserProfile,
    amount: int,
    activity: Optional[Activity],
    friend_ids: Optional[FrozenSet[str]],
) -> str:
    """
    Compute a deterministic content hash for a pending change.

    The base sequence is part of the content, so two identical rewards logged
    one after the other get different ids, while re-submitting the same
    PendingChange object is detected as a duplicate.
    """
    content = "|".join([
        f"kind:{kind.value}",
        f"base:{base_sequence}",
        f"amount:{amount}",
        f"profile:{_canonicalize(profile)}",
        f"activity:{_canonicalize(activity)}",
        f"friends:{_canonicalize(friend_ids)}",
    ])
    return hashlib.sha256(content.encode()).hexdigest()[:16]


# ============================================================================
# PENDING CHANGES AND JOURNAL
# ============================================================================

@dataclass(frozen=True, slots=True)
class PendingChange:
    """
    A change description before execution - represents INTENT.

    Built by the pure functions in progression.py and spending.py and
    submitted to Ledger.execute().

    Attributes:
        kind: What kind of change this is
        base_sequence: Ledger sequence the change was computed from
        profile: Complete profile after the change
        timestamp: When the change was built (ledger time)
        amount: Points moved by the change (journal bookkeeping)
        activity: Activity to prepend to history, if any
        friend_ids: Replacement friend set, if any
        description: Human-readable note for the journal
        intent_id: Content hash (auto-computed)
    """
    kind: ChangeKind
    base_sequence: int
    profile: UserProfile
    timestamp: datetime
    amount: int = 0
    activity: Optional[Activity] = None
    friend_ids: Optional[FrozenSet[str]] = None
    description: str = ""
    intent_id: str = field(default="")

    def __post_init__(self):
        if not self.intent_id:
            computed_id = _compute_intent_id(
                self.kind, self.base_sequence, self.profile,
                self.amount, self.activity, self.friend_ids,
            )
            object.__setattr__(self, 'intent_id', computed_id)

    def __repr__(self) -> str:
        return f"PendingChange({self.kind.value}, amount={self.amount}, base={self.base_sequence})"


def build_change(
    view: LedgerView,
    kind: ChangeKind,
    profile: UserProfile,
    amount: int = 0,
    activity: Optional[Activity] = None,
    friend_ids: Optional[FrozenSet[str]] = None,
    description: str = "",
) -> PendingChange:
    """
    Build a PendingChange against the view's current sequence and time.

    This is the standard way to create pending changes.
    """
    return PendingChange(
        kind=kind,
        base_sequence=view.sequence,
        profile=profile,
        timestamp=view.current_time,
        amount=amount,
        activity=activity,
        friend_ids=frozenset(friend_ids) if friend_ids is not None else None,
        description=description,
    )


@dataclass(frozen=True, slots=True)
class JournalEntry:
    """
    An executed, immutable record of a change - represents FACT.

    Attributes:
        sequence_number: Monotonic position in the journal
        kind: Change kind
        amount: Points moved
        balance_delta: Change of spendable_balance
        experience_delta: Change of experience
        timestamp: When the pending change was built
        execution_time: Ledger time at execution
        intent_id: Content hash from the PendingChange
        activity_id: Id of the activity created, if any
        description: Human-readable note
    """
    sequence_number: int
    kind: ChangeKind
    amount: int
    balance_delta: int
    experience_delta: int
    timestamp: datetime
    execution_time: datetime
    intent_id: str
    activity_id: Optional[str] = None
    description: str = ""

    def __repr__(self) -> str:
        return (
            f"JournalEntry(#{self.sequence_number} {self.kind.value} "
            f"balance{self.balance_delta:+d} exp{self.experience_delta:+d})"
        )
