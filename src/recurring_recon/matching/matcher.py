"""
Statement matching for projected occurrences.
Pairs one expected occurrence with the ledger entry that best evidences it.
"""

from decimal import Decimal
from typing import Collection, Optional, Sequence

from ..ledger.names import name_tokens as tokens_for_name, tokens_match
from ..ledger.view import LedgerView
from ..models.records import (
    MatchStatus,
    Occurrence,
    ReconciliationResult,
    StatementEntry,
)


def sign_agrees(expected: Decimal, actual: Decimal) -> bool:
    """Deposits evidence positive amounts, withdrawals negative ones; zero accepts either."""
    if expected > 0:
        return actual > 0
    if expected < 0:
        return actual < 0
    return actual != 0


class StatementMatcher:
    """
    Match occurrences against a ledger by name, amount and date.

    Candidates are entries within ``date_window_days`` of the projected date
    whose description names the item and whose sign agrees with the expected
    amount. An entry within ``amount_tolerance_pct`` percent of the expected
    amount is a match; otherwise the best remaining candidate is attached as
    a partial amount mismatch.
    """

    def __init__(self, amount_tolerance_pct: float = 10.0, date_window_days: int = 3):
        """
        Initialize with tolerances.

        Args:
            amount_tolerance_pct: Allowed amount difference as a percentage of the expected amount
            date_window_days: Maximum days between projected and actual date
        """
        if amount_tolerance_pct < 0:
            raise ValueError("amount_tolerance_pct must not be negative")
        if date_window_days < 0:
            raise ValueError("date_window_days must not be negative")
        self.amount_tolerance_pct = Decimal(str(amount_tolerance_pct))
        self.date_window_days = date_window_days

    def within_tolerance(self, expected: Decimal, actual: Decimal) -> bool:
        """Whether an actual amount is close enough to the expected one."""
        if expected == 0:
            # No nominal amount configured, any amount evidences the occurrence
            return True
        allowed = abs(expected) * self.amount_tolerance_pct / Decimal("100")
        return abs(actual - expected) <= allowed

    def find_candidates(
        self,
        occurrence: Occurrence,
        ledger: LedgerView,
        name_tokens: Optional[Sequence[str]] = None,
        exclude_ids: Collection[str] = (),
    ) -> list[StatementEntry]:
        """
        Entries that could evidence the occurrence, best first.

        Args:
            occurrence: Projected occurrence
            ledger: Ledger to search
            name_tokens: Pre-computed item tokens; derived from the item name if omitted
            exclude_ids: Entry ids already claimed by other occurrences

        Returns:
            Candidates ordered by date distance, then amount distance
        """
        tokens = name_tokens if name_tokens is not None else tokens_for_name(occurrence.item_name)

        candidates = [
            entry
            for entry in ledger.entries_in_window(occurrence.date, self.date_window_days)
            if entry.id not in exclude_ids
            and sign_agrees(occurrence.amount, entry.amount)
            and tokens_match(tokens, entry.description)
        ]
        candidates.sort(key=lambda e: self._rank(occurrence, e))
        return candidates

    def match(
        self,
        occurrence: Occurrence,
        ledger: LedgerView,
        name_tokens: Optional[Sequence[str]] = None,
        exclude_ids: Collection[str] = (),
    ) -> ReconciliationResult:
        """
        Reconcile one occurrence against the ledger.

        Returns:
            Result with status matched, partial-amount-mismatch or unmatched
        """
        candidates = self.find_candidates(occurrence, ledger, name_tokens, exclude_ids)
        if not candidates:
            return ReconciliationResult(occurrence=occurrence, status=MatchStatus.UNMATCHED)

        in_tolerance = [
            e for e in candidates if self.within_tolerance(occurrence.amount, e.amount)
        ]
        if in_tolerance:
            return self._result(occurrence, in_tolerance[0], MatchStatus.MATCHED)

        return self._result(occurrence, candidates[0], MatchStatus.PARTIAL_AMOUNT_MISMATCH)

    @staticmethod
    def _rank(occurrence: Occurrence, entry: StatementEntry) -> tuple:
        return (
            abs((entry.date - occurrence.date).days),
            abs(entry.amount - occurrence.amount),
            entry.date,
            entry.id,
        )

    @staticmethod
    def _result(
        occurrence: Occurrence, entry: StatementEntry, status: MatchStatus
    ) -> ReconciliationResult:
        amount_variance: Optional[Decimal] = None
        date_variance: Optional[int] = None

        if entry.amount != occurrence.amount:
            amount_variance = entry.amount - occurrence.amount
        if entry.date != occurrence.date:
            # Positive when the entry posted after the projected date
            date_variance = (entry.date - occurrence.date).days

        return ReconciliationResult(
            occurrence=occurrence,
            status=status,
            entry=entry,
            amount_variance=amount_variance,
            date_variance_days=date_variance,
        )


def match(
    occurrence: Occurrence,
    ledger_view: LedgerView,
    name_tokens: Optional[Sequence[str]],
    amount_tolerance_pct: float,
    date_window_days: int,
) -> ReconciliationResult:
    """Reconcile one occurrence with the given tolerances."""
    matcher = StatementMatcher(amount_tolerance_pct, date_window_days)
    return matcher.match(occurrence, ledger_view, name_tokens)
