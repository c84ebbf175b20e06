"""Value types for recurring items, statement entries and reconciliation results."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional
import re

from ..utils.exceptions import InvalidConfiguration


class FrequencyKind(Enum):
    """How often a recurring item repeats."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMIMONTHLY = "semimonthly"
    MONTHLY = "monthly"
    CUSTOM_INTERVAL = "custom-interval"
    MONTHLY_LAST_WORKING_DAY = "monthly-last-working-day"
    YEARLY = "yearly"


# Spellings found in stored records, keyed by lowercase with separators removed
_FREQUENCY_ALIASES: dict[str, FrequencyKind] = {
    "weekly": FrequencyKind.WEEKLY,
    "everyweek": FrequencyKind.WEEKLY,
    "1week": FrequencyKind.WEEKLY,
    "biweekly": FrequencyKind.BIWEEKLY,
    "2weeks": FrequencyKind.BIWEEKLY,
    "everytwoweeks": FrequencyKind.BIWEEKLY,
    "every2weeks": FrequencyKind.BIWEEKLY,
    "fortnightly": FrequencyKind.BIWEEKLY,
    "semimonthly": FrequencyKind.SEMIMONTHLY,
    "twicemonthly": FrequencyKind.SEMIMONTHLY,
    "monthly": FrequencyKind.MONTHLY,
    "custominterval": FrequencyKind.CUSTOM_INTERVAL,
    "custom": FrequencyKind.CUSTOM_INTERVAL,
    "monthlylastworkingday": FrequencyKind.MONTHLY_LAST_WORKING_DAY,
    "lastworkingday": FrequencyKind.MONTHLY_LAST_WORKING_DAY,
    "yearly": FrequencyKind.YEARLY,
    "annually": FrequencyKind.YEARLY,
}

_INTERVAL_PATTERN = re.compile(r"^(?:custom-?interval|custom|every)\s*[(:]?\s*(\d+)\s*(?:days?)?\s*\)?$")


@dataclass(frozen=True)
class FrequencyRule:
    """
    A frequency kind plus the parameters some kinds need.

    ``interval_days`` is only meaningful for ``custom-interval``;
    ``semimonthly_days`` optionally pins the two days of a semimonthly pair
    instead of deriving them from the anchor.
    """

    kind: FrequencyKind
    interval_days: Optional[int] = None
    semimonthly_days: Optional[tuple[int, int]] = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, FrequencyKind):
            raise InvalidConfiguration(f"Unrecognized frequency kind: {self.kind!r}")

        if self.kind is FrequencyKind.CUSTOM_INTERVAL:
            if (
                not isinstance(self.interval_days, int)
                or isinstance(self.interval_days, bool)
                or self.interval_days <= 0
            ):
                raise InvalidConfiguration(
                    f"custom-interval needs a positive whole number of days, got {self.interval_days!r}"
                )

        if self.semimonthly_days is not None:
            days = tuple(self.semimonthly_days)
            if len(days) != 2 or any(not isinstance(d, int) or not 1 <= d <= 31 for d in days):
                raise InvalidConfiguration(
                    f"semimonthly_days must be two days between 1 and 31, got {self.semimonthly_days!r}"
                )
            if days[0] == days[1]:
                raise InvalidConfiguration("semimonthly_days must name two different days")
            object.__setattr__(self, "semimonthly_days", tuple(sorted(days)))

    @property
    def step_days(self) -> Optional[int]:
        """Fixed step in days for interval-based kinds, None for calendar kinds."""
        if self.kind is FrequencyKind.WEEKLY:
            return 7
        if self.kind is FrequencyKind.BIWEEKLY:
            return 14
        if self.kind is FrequencyKind.CUSTOM_INTERVAL:
            return self.interval_days
        return None

    def describe(self) -> str:
        if self.kind is FrequencyKind.CUSTOM_INTERVAL:
            return f"every {self.interval_days} days"
        return self.kind.value

    @classmethod
    def parse(cls, value: Any) -> "FrequencyRule":
        """
        Build a rule from a stored value.

        Accepts an existing rule, a FrequencyKind, a string such as
        ``"biweekly"``, ``"2 Weeks"`` or ``"every 10 days"``, or a mapping with
        ``kind``/``interval_days``/``semimonthly_days`` keys.

        Raises:
            InvalidConfiguration: If the value names no known frequency
        """
        if isinstance(value, FrequencyRule):
            return value
        if isinstance(value, FrequencyKind):
            return cls(kind=value)

        if isinstance(value, Mapping):
            kind_value = value.get("kind") or value.get("frequency")
            if isinstance(kind_value, FrequencyKind):
                kind, interval = kind_value, None
            else:
                kind, interval = _kind_from_string(kind_value)
            interval = value.get("interval_days", value.get("intervalDays", interval))
            pair = value.get("semimonthly_days", value.get("semimonthlyDays"))
            try:
                return cls(
                    kind=kind,
                    interval_days=int(interval) if interval is not None else None,
                    semimonthly_days=tuple(int(d) for d in pair) if pair else None,
                )
            except (TypeError, ValueError) as e:
                raise InvalidConfiguration(f"Malformed frequency parameters: {e}") from e

        kind, interval = _kind_from_string(value)
        return cls(kind=kind, interval_days=interval)


def _kind_from_string(value: Any) -> tuple[FrequencyKind, Optional[int]]:
    """Resolve a stored frequency string to its kind and any embedded interval."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidConfiguration(f"Unrecognized frequency: {value!r}")

    text = value.strip().lower()
    interval_match = _INTERVAL_PATTERN.match(text)
    if interval_match:
        return FrequencyKind.CUSTOM_INTERVAL, int(interval_match.group(1))

    kind = _FREQUENCY_ALIASES.get(re.sub(r"[\s_\-]", "", text))
    if kind is None:
        raise InvalidConfiguration(f"Unrecognized frequency: {value!r}")
    return kind, None


class ItemKind(Enum):
    """What a recurring item represents in the household budget."""

    PAYCHECK = "paycheck"
    BILL = "bill"
    TRANSFER = "transfer"
    GOAL = "goal"


@dataclass(frozen=True)
class StatementEntry:
    """One bank transaction line. Positive amounts are deposits."""

    id: str
    date: date
    description: str
    amount: Decimal
    account: Optional[str] = None
    balance: Optional[Decimal] = None
    category: Optional[str] = None
    source_file: Optional[str] = None

    @property
    def is_deposit(self) -> bool:
        return self.amount > 0

    @property
    def is_withdrawal(self) -> bool:
        return self.amount < 0


@dataclass(frozen=True)
class RecurringItemConfig:
    """
    A configured bill, paycheck or transfer.

    ``anchor_date`` is a date the item is known to have happened on and fixes
    the phase of every projection. ``amount`` follows the statement sign
    convention, so bills are negative and paychecks positive.
    """

    id: str
    name: str
    amount: Decimal
    frequency: FrequencyRule
    anchor_date: date
    next_due: Optional[date] = None
    kind: ItemKind = ItemKind.BILL
    account: Optional[str] = None


@dataclass(frozen=True)
class Occurrence:
    """A single projected date for a recurring item."""

    item_id: str
    item_name: str
    amount: Decimal
    date: date


class MatchStatus(Enum):
    """Outcome of reconciling one occurrence against the ledger."""

    MATCHED = "matched"
    UNMATCHED = "unmatched"
    PARTIAL_AMOUNT_MISMATCH = "partial-amount-mismatch"


@dataclass(frozen=True)
class ReconciliationResult:
    """An occurrence paired with zero or one statement entry."""

    occurrence: Occurrence
    status: MatchStatus
    entry: Optional[StatementEntry] = None

    # Variance details (if any)
    amount_variance: Optional[Decimal] = None
    date_variance_days: Optional[int] = None

    @property
    def is_matched(self) -> bool:
        return self.status is MatchStatus.MATCHED

    @property
    def is_exact_match(self) -> bool:
        """Matched on the projected date for exactly the expected amount."""
        return (
            self.is_matched
            and not self.amount_variance
            and not self.date_variance_days
        )


@dataclass(frozen=True)
class ItemError:
    """A recurring item that could not be projected, reported next to the results."""

    item_id: str
    item_name: str
    message: str


@dataclass(frozen=True)
class AnchorSuggestion:
    """A proposed anchor correction for one item. Never applied automatically."""

    item_id: str
    item_name: str
    current_anchor: date
    suggested_anchor: date
    entry: StatementEntry

    @property
    def shift_days(self) -> int:
        return (self.suggested_anchor - self.current_anchor).days


@dataclass
class ReconciliationReport:
    """Everything one reconciliation run produced."""

    range_start: date
    range_end: date
    results: list[ReconciliationResult] = field(default_factory=list)
    errors: list[ItemError] = field(default_factory=list)

    # Monthly paycheck cross-check, keyed by the first day of each month
    actual_paycheck_totals: dict[date, Decimal] = field(default_factory=dict)
    projected_paycheck_totals: dict[date, Decimal] = field(default_factory=dict)

    # Proposed anchor corrections keyed by item id
    anchor_suggestions: dict[str, AnchorSuggestion] = field(default_factory=dict)

    processing_time_seconds: float = 0.0

    def _count(self, status: MatchStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def matched_count(self) -> int:
        return self._count(MatchStatus.MATCHED)

    @property
    def unmatched_count(self) -> int:
        return self._count(MatchStatus.UNMATCHED)

    @property
    def mismatch_count(self) -> int:
        return self._count(MatchStatus.PARTIAL_AMOUNT_MISMATCH)

    @property
    def match_rate(self) -> float:
        """Percentage of occurrences found on the statement (any amount)."""
        if not self.results:
            return 0.0
        found = self.matched_count + self.mismatch_count
        return (found / len(self.results)) * 100

    @property
    def actual_paycheck_total(self) -> Decimal:
        return sum(self.actual_paycheck_totals.values(), Decimal("0"))

    @property
    def projected_paycheck_total(self) -> Decimal:
        return sum(self.projected_paycheck_totals.values(), Decimal("0"))

    @property
    def paycheck_variance(self) -> Decimal:
        """Actual minus projected paycheck income over the whole range."""
        return self.actual_paycheck_total - self.projected_paycheck_total

    def results_for(self, item_id: str) -> list[ReconciliationResult]:
        return [r for r in self.results if r.occurrence.item_id == item_id]
