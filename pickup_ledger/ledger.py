"""
ledger.py - Stateful Reward Ledger

The Ledger class is the single source of truth for one user's reward state.
It is the only module that mutates state, ensuring controlled and auditable changes.

Key responsibilities:
    - Implements LedgerView protocol for safe read-only access by pure functions
    - Executes pending changes atomically (the whole change applies or nothing does)
    - Owns the profile, activity history, friend set and read-only roster
    - Tracks logical time for activity timestamps
    - Always validates and always journals - no exceptions
"""

from __future__ import annotations
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple, Any

from .core import (
    # Types
    UserProfile, Character, Activity, PendingChange, JournalEntry,
    ExecuteResult, ChangeKind, GameRules,
    # Constants
    DEFAULT_RULES,
    # Exceptions
    LedgerError,
)


def _activity_number(activity_id: str) -> Optional[int]:
    """N for an id of the form act_N, else None."""
    prefix, _, suffix = activity_id.partition("_")
    if prefix == "act" and suffix.isdigit():
        return int(suffix)
    return None


class Ledger:
    """
    In-memory reward ledger with full validation and a journal.

    Implements the LedgerView protocol, allowing the ledger to be passed to pure
    functions that access only read-only methods.

    Design Principles:
        - Always validates: every change is checked against the current
          sequence, balance and stat-point floors, and experience monotonicity.
        - Always journals: every applied change is recorded, so balances can be
          re-derived with verify_balances().

    Thread Safety:
        Not thread-safe. Callers must serialize calls against one ledger.
        A change computed from an outdated sequence is REJECTED.

    Example:
        ledger = Ledger("session", demo_profile(), roster=demo_roster())
        activity = log_activity(ledger, PickupEvent(Decimal("2.0"), True, "Pizza Hut"))
        ledger.get_profile().experience
    """

    def __init__(
        self,
        name: str,
        profile: UserProfile,
        roster: Iterable[UserProfile] = (),
        friend_ids: Iterable[str] = (),
        activities: Iterable[Activity] = (),
        initial_time: Optional[datetime] = None,
        rules: GameRules = DEFAULT_RULES,
        verbose: bool = True,
    ):
        """
        Create a ledger.

        Args:
            name: Ledger identifier
            profile: Initial profile of the current user
            roster: Other users available for ranking and friend lookup
            friend_ids: Initial friend set (ids from the roster)
            activities: Existing history, most recent first
            initial_time: Starting logical time (default: now)
            rules: Reward/progression/spending parameters
            verbose: Print one line per executed change (default: True)

        Raises:
            ValueError: If a roster user duplicates the current user's id,
                        a friend id is not in the roster, the opening
                        balance or stats are negative, or the history
                        repeats an activity id
        """
        self.name = name
        self.rules = rules
        self.verbose = verbose
        self._current_time: datetime = initial_time or datetime.now()
        self._profile: UserProfile = profile
        self._roster: Tuple[UserProfile, ...] = tuple(roster)
        self._activities: List[Activity] = list(activities)
        self.journal: List[JournalEntry] = []
        self.seen_intent_ids: Set[str] = set()
        self._next_sequence: int = 0

        roster_ids = [u.id for u in self._roster]
        if len(set(roster_ids)) != len(roster_ids):
            raise ValueError("Roster contains duplicate user ids")
        if profile.id in roster_ids:
            raise ValueError(f"User {profile.id} cannot also be in the roster")
        friends = frozenset(friend_ids)
        unknown = friends - set(roster_ids)
        if unknown:
            raise ValueError(f"Friend ids not in roster: {sorted(unknown)}")
        self._friend_ids: FrozenSet[str] = friends

        if profile.spendable_balance < 0:
            raise ValueError(f"Opening spendable_balance cannot be negative: {profile.spendable_balance}")
        character = profile.character
        if character.stat_points < 0 or character.attack < 0 or character.defense < 0:
            raise ValueError("Opening stat_points, attack and defense cannot be negative")

        activity_ids = [a.id for a in self._activities]
        if len(set(activity_ids)) != len(activity_ids):
            raise ValueError("Activity history contains duplicate ids")
        self._next_activity_number: int = 1 + max(
            [len(self._activities)]
            + [n for n in map(_activity_number, activity_ids) if n is not None]
        )

        # Opening balances for verify_balances()
        self._opening_balance = profile.spendable_balance
        self._opening_experience = profile.experience

    # ========================================================================
    # LedgerView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    @property
    def current_time(self) -> datetime:
        """Current logical time of the ledger."""
        return self._current_time

    @property
    def sequence(self) -> int:
        """Number of changes applied so far."""
        return self._next_sequence

    def get_profile(self) -> UserProfile:
        """Return the current profile (immutable snapshot)."""
        return self._profile

    def get_character(self) -> Character:
        return self._profile.character

    def get_activities(self) -> Tuple[Activity, ...]:
        """Return the activity history, most recent first."""
        return tuple(self._activities)

    def get_roster(self) -> Tuple[UserProfile, ...]:
        return self._roster

    def get_friend_ids(self) -> FrozenSet[str]:
        return self._friend_ids

    def find_user_by_name(self, name: str) -> Optional[UserProfile]:
        """Return the first roster user with this display name, or None."""
        for user in self._roster:
            if user.name == name:
                return user
        return None

    def next_activity_id(self) -> str:
        """Id for the next activity: one past the highest act_N seen so far."""
        return f"act_{self._next_activity_number}"

    def verify_balances(self) -> Dict[str, Any]:
        """
        Verify that the current counters equal the opening values plus the journal.

        Returns:
            Dict with keys:
            - 'valid': bool - True if both counters reconcile
            - 'expected_balance' / 'actual_balance'
            - 'expected_experience' / 'actual_experience'
        """
        expected_balance = self._opening_balance + sum(e.balance_delta for e in self.journal)
        expected_experience = self._opening_experience + sum(e.experience_delta for e in self.journal)
        return {
            'valid': (
                expected_balance == self._profile.spendable_balance
                and expected_experience == self._profile.experience
            ),
            'expected_balance': expected_balance,
            'actual_balance': self._profile.spendable_balance,
            'expected_experience': expected_experience,
            'actual_experience': self._profile.experience,
        }

    # ========================================================================
    # TIME MANAGEMENT
    # ========================================================================

    def advance_time(self, new_time: datetime) -> None:
        """
        Advance the ledger's logical clock. Time can only move forward.

        Raises:
            ValueError: If new_time is before the current time
        """
        if new_time < self._current_time:
            raise ValueError(
                f"Cannot move time backwards: {new_time} < {self._current_time}"
            )
        self._current_time = new_time

    # ========================================================================
    # EXECUTION (Mutating)
    # ========================================================================

    def execute(self, pending: PendingChange) -> ExecuteResult:
        """
        Execute a PendingChange atomically.

        Execution is idempotent: a change with the same intent_id is never
        applied twice.

        Returns:
            ExecuteResult.APPLIED if successful
            ExecuteResult.ALREADY_APPLIED if the change was already executed
            ExecuteResult.REJECTED if validation failed (nothing is changed)
        """
        if pending.intent_id in self.seen_intent_ids:
            if self.verbose:
                print(f"⚠️  ALREADY_APPLIED: intent_id={pending.intent_id}")
            return ExecuteResult.ALREADY_APPLIED

        valid, reason = self._validate_pending(pending)
        if not valid:
            if self.verbose:
                print(f"✗ REJECTED {pending.kind.value}: {reason}")
            return ExecuteResult.REJECTED

        old = self._profile
        new = pending.profile
        sequence = self._next_sequence
        entry = JournalEntry(
            sequence_number=sequence,
            kind=pending.kind,
            amount=pending.amount,
            balance_delta=new.spendable_balance - old.spendable_balance,
            experience_delta=new.experience - old.experience,
            timestamp=pending.timestamp,
            execution_time=self._current_time,
            intent_id=pending.intent_id,
            activity_id=pending.activity.id if pending.activity else None,
            description=pending.description,
        )

        # Validation passed - apply every part of the change
        self._profile = new
        if pending.activity is not None:
            self._activities.insert(0, pending.activity)
            number = _activity_number(pending.activity.id)
            if number is not None and number >= self._next_activity_number:
                self._next_activity_number = number + 1
        if pending.friend_ids is not None:
            self._friend_ids = pending.friend_ids
        self._next_sequence += 1
        self.journal.append(entry)
        self.seen_intent_ids.add(pending.intent_id)

        if self.verbose:
            self._print_result(entry, old, new)
        return ExecuteResult.APPLIED

    def _print_result(self, entry: JournalEntry, old: UserProfile, new: UserProfile) -> None:
        line = (
            f"✓ APPLIED #{entry.sequence_number} {entry.kind.value}: "
            f"balance {old.spendable_balance} → {new.spendable_balance}, "
            f"exp {old.experience} → {new.experience}"
        )
        if new.level != old.level:
            line += f", LEVEL UP {old.level} → {new.level}"
        if entry.description:
            line += f" ({entry.description})"
        print(line)

    def _validate_pending(self, pending: PendingChange) -> Tuple[bool, str]:
        """
        Validate a pending change against all constraints.

        Checks performed:
        1. Base sequence (the change was computed from the current state)
        2. Timestamp (must not be from the future)
        3. Identity (the change targets this ledger's user)
        4. Floors: spendable balance, stat points, attack and defense >= 0
        5. Monotonicity: experience and level never decrease
        6. Activity id is new; friend ids exist in the roster

        Returns:
            Tuple of (success: bool, reason: str)
        """
        old = self._profile
        new = pending.profile

        if pending.base_sequence != self._next_sequence:
            return False, (
                f"stale change: computed at sequence {pending.base_sequence}, "
                f"ledger is at {self._next_sequence}"
            )
        if pending.timestamp > self._current_time:
            return False, "future timestamp"
        if new.id != old.id:
            return False, f"profile id {new.id} does not match {old.id}"

        if new.spendable_balance < 0:
            return False, f"spendable_balance {new.spendable_balance} < 0"
        character = new.character
        if character.stat_points < 0:
            return False, f"stat_points {character.stat_points} < 0"
        if character.attack < 0 or character.defense < 0:
            return False, "attack and defense cannot be negative"

        if new.experience < old.experience:
            return False, f"experience would decrease: {old.experience} → {new.experience}"
        if new.level < old.level:
            return False, f"level would decrease: {old.level} → {new.level}"

        if pending.activity is not None:
            if any(a.id == pending.activity.id for a in self._activities):
                return False, f"duplicate activity id {pending.activity.id}"
        if pending.friend_ids is not None:
            roster_ids = {u.id for u in self._roster}
            unknown = pending.friend_ids - roster_ids
            if unknown:
                return False, f"friend ids not in roster: {sorted(unknown)}"

        return True, ""

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> Ledger:
        """
        Create an independent copy of this ledger.

        Profiles and activities are immutable, so sharing them is safe; the
        mutable containers are copied.
        """
        cloned = Ledger.__new__(Ledger)
        cloned.name = self.name
        cloned.rules = self.rules
        cloned.verbose = self.verbose
        cloned._current_time = self._current_time
        cloned._profile = self._profile
        cloned._roster = self._roster
        cloned._activities = list(self._activities)
        cloned._friend_ids = self._friend_ids
        cloned.journal = list(self.journal)
        cloned.seen_intent_ids = self.seen_intent_ids.copy()
        cloned._next_sequence = self._next_sequence
        cloned._next_activity_number = self._next_activity_number
        cloned._opening_balance = self._opening_balance
        cloned._opening_experience = self._opening_experience
        return cloned

    def entries_of_kind(self, kind: ChangeKind) -> List[JournalEntry]:
        """Return journal entries of one kind, in execution order."""
        return [e for e in self.journal if e.kind == kind]

    def require_applied(self, result: ExecuteResult, pending: PendingChange) -> None:
        """
        Raise if a change the caller computed from this ledger was not applied.

        Used by operations that build and execute in one call, where a
        rejection means the caller broke the single-writer contract.
        """
        if result != ExecuteResult.APPLIED:
            raise LedgerError(
                f"{pending.kind.value} change {pending.intent_id} was {result.value}"
            )
