"""
Monthly paycheck totals.
Actual paycheck deposits for a calendar month, as a cross-check against the
paychecks the schedule projected for that month.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union
import logging
import re

from ..config import (
    DEFAULT_PAYCHECK_PATTERNS,
    DEFAULT_TRANSFER_EXCLUDE_PATTERNS,
    DEFAULT_TRANSFER_PATTERNS,
)
from ..ledger.names import name_tokens, tokens_match
from ..ledger.view import LedgerView
from ..models.records import ItemKind, RecurringItemConfig, StatementEntry
from ..schedule.frequency import (
    DEFAULT_SEMIMONTHLY_OFFSET,
    days_in_month,
    project_item,
)
from ..utils.exceptions import InvalidConfiguration

logger = logging.getLogger(__name__)

LedgerLike = Union[LedgerView, Iterable[StatementEntry], None]


def as_ledger_view(ledger: LedgerLike) -> LedgerView:
    """Wrap a plain entry list in a LedgerView; None becomes an empty ledger."""
    if isinstance(ledger, LedgerView):
        return ledger
    return LedgerView(ledger)


def month_bounds(reference_date: date) -> tuple[date, date]:
    """First and last day of the calendar month containing ``reference_date``."""
    year, month = reference_date.year, reference_date.month
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def is_paycheck_like(description: str, patterns: Optional[Sequence[str]] = None) -> bool:
    """Whether a deposit description looks like payroll."""
    for pattern in patterns if patterns is not None else DEFAULT_PAYCHECK_PATTERNS:
        if re.search(pattern, description or "", re.IGNORECASE):
            return True
    return False


def is_transfer_like(
    description: str,
    patterns: Optional[Sequence[str]] = None,
    exclude_patterns: Optional[Sequence[str]] = None,
) -> bool:
    """
    Whether a description looks like a transfer between the user's own accounts.

    Exclusions win, so peer payments such as "VENMO * J SMITH" stay expenses
    even when the bank labels them "TRANSFER AUTHORIZED ON ...".
    """
    description = (description or "").strip()
    if not description:
        return False

    excluded = exclude_patterns if exclude_patterns is not None else DEFAULT_TRANSFER_EXCLUDE_PATTERNS
    if any(re.search(p, description, re.IGNORECASE) for p in excluded):
        return False

    included = patterns if patterns is not None else DEFAULT_TRANSFER_PATTERNS
    return any(re.search(p, description, re.IGNORECASE) for p in included)


def paycheck_deposits_for_month(
    ledger: LedgerLike,
    reference_date: date,
    paycheck_names: Optional[Sequence[str]] = None,
    patterns: Optional[Sequence[str]] = None,
) -> Decimal:
    """
    Sum the paycheck deposits received in the month containing ``reference_date``.

    Deposits are recognized by the configured paycheck names. When none of
    those names matches a deposit in the month (or no names are given), the
    generic payroll patterns are used instead.

    Args:
        ledger: Statement entries or a LedgerView; None is an empty ledger
        reference_date: Any date in the target month
        paycheck_names: Display names of the configured paychecks
        patterns: Regexes for the generic payroll classifier

    Returns:
        Exact decimal total, zero when nothing matches
    """
    view = as_ledger_view(ledger)
    start, end = month_bounds(reference_date)
    deposits = [e for e in view.entries_in_range(start, end) if e.is_deposit]

    selected: list[StatementEntry] = []
    token_sets = [t for t in (name_tokens(n) for n in paycheck_names or ()) if t]
    if token_sets:
        selected = [
            e for e in deposits if any(tokens_match(t, e.description) for t in token_sets)
        ]

    if not selected:
        selected = [e for e in deposits if is_paycheck_like(e.description, patterns)]

    total = sum((e.amount for e in selected), Decimal("0"))
    logger.debug(
        f"{len(selected)} paycheck deposit(s) totalling {total} in {start:%Y-%m}"
    )
    return total


def projected_paycheck_total(
    items: Iterable[RecurringItemConfig],
    reference_date: date,
    semimonthly_offset_days: int = DEFAULT_SEMIMONTHLY_OFFSET,
) -> Decimal:
    """
    Sum the paycheck occurrences projected for the month containing ``reference_date``.

    Items that cannot be projected are skipped and logged; they are reported
    as item errors by the reconciliation engine.
    """
    start, end = month_bounds(reference_date)
    total = Decimal("0")

    for item in items:
        if item.kind is not ItemKind.PAYCHECK:
            continue
        try:
            occurrences = project_item(item, start, end, semimonthly_offset_days)
        except InvalidConfiguration as e:
            logger.warning(f"Skipping paycheck {item.id} in projected total: {e}")
            continue
        total += sum((o.amount for o in occurrences), Decimal("0"))

    return total
