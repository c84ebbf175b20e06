"""
Recurring item suggestions.
Groups statement entries by payee to propose paychecks, bills and transfers not
yet configured, with an inferred frequency and the latest date as anchor.
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Sequence

from ..ledger.names import CHANNEL_WORDS, significant_tokens
from ..models.records import FrequencyKind, ItemKind, StatementEntry
from .aggregator import LedgerLike, as_ledger_view, is_paycheck_like, is_transfer_like


@dataclass(frozen=True)
class SuggestedItem:
    """A recurring item inferred from the ledger."""

    name: str
    kind: ItemKind
    frequency: FrequencyKind
    anchor_date: date
    amount: Decimal
    count: int

    def to_record(self) -> dict[str, Any]:
        """Record shape accepted by the record store and parse_recurring_item."""
        return {
            "name": self.name,
            "kind": self.kind.value,
            "frequency": self.frequency.value,
            "anchorDate": self.anchor_date.isoformat(),
            "amount": str(self.amount),
        }


def infer_frequency(dates: Sequence[date]) -> FrequencyKind:
    """
    Guess a frequency from the average gap between dates.

    Fewer than two dates default to biweekly, the most common pay cycle.
    """
    ordered = sorted(set(dates))
    if len(ordered) < 2:
        return FrequencyKind.BIWEEKLY

    gaps = [(later - earlier).days for earlier, later in zip(ordered, ordered[1:])]
    average = sum(gaps) / len(gaps)

    if average >= 300:
        return FrequencyKind.YEARLY
    if 25 <= average <= 35:
        return FrequencyKind.MONTHLY
    if 13 <= average <= 17:
        return FrequencyKind.SEMIMONTHLY if average > 15 else FrequencyKind.BIWEEKLY
    if 6 <= average <= 8:
        return FrequencyKind.WEEKLY
    return FrequencyKind.BIWEEKLY


def payee_name(description: str) -> str:
    """Short display name for the payee in a statement description."""
    tokens = [t for t in significant_tokens(description) if t not in CHANNEL_WORDS]
    if not tokens:
        tokens = list(significant_tokens(description))
    if not tokens:
        return description.strip()[:40] or "Unknown"
    return " ".join(t.capitalize() for t in tokens[:3])


def _suggest(
    entries: list[StatementEntry], kind: ItemKind, min_count: int
) -> list[SuggestedItem]:
    groups: dict[str, list[StatementEntry]] = {}
    for entry in entries:
        groups.setdefault(payee_name(entry.description), []).append(entry)

    suggested: list[SuggestedItem] = []
    for name, rows in groups.items():
        if len(rows) < min_count:
            continue
        mean = sum((r.amount for r in rows), Decimal("0")) / len(rows)
        suggested.append(
            SuggestedItem(
                name=name,
                kind=kind,
                frequency=infer_frequency([r.date for r in rows]),
                anchor_date=max(r.date for r in rows),
                amount=mean.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
                count=len(rows),
            )
        )

    return sorted(suggested, key=lambda s: (-s.count, s.name))


def suggest_paychecks(
    ledger: LedgerLike,
    patterns: Optional[Sequence[str]] = None,
    min_count: int = 1,
) -> list[SuggestedItem]:
    """Paychecks inferred from payroll-like deposits, most frequent first."""
    view = as_ledger_view(ledger)
    deposits = [e for e in view if e.is_deposit and is_paycheck_like(e.description, patterns)]
    return _suggest(deposits, ItemKind.PAYCHECK, min_count)


def suggest_bills(
    ledger: LedgerLike,
    min_count: int = 2,
    transfer_patterns: Optional[Sequence[str]] = None,
    transfer_exclude_patterns: Optional[Sequence[str]] = None,
) -> list[SuggestedItem]:
    """
    Bills inferred from withdrawals repeating under the same payee, most frequent first.

    Transfers to the user's own accounts are not bills and are left out.
    """
    view = as_ledger_view(ledger)
    withdrawals = [
        e
        for e in view
        if e.is_withdrawal
        and not is_transfer_like(e.description, transfer_patterns, transfer_exclude_patterns)
    ]
    return _suggest(withdrawals, ItemKind.BILL, min_count)


def suggest_transfers(
    ledger: LedgerLike,
    min_count: int = 2,
    patterns: Optional[Sequence[str]] = None,
    exclude_patterns: Optional[Sequence[str]] = None,
) -> list[SuggestedItem]:
    """
    Recurring transfers between the user's own accounts, most frequent first.

    Incoming and outgoing transfers are grouped separately so a mean amount
    never mixes signs.
    """
    view = as_ledger_view(ledger)
    transfers = [e for e in view if is_transfer_like(e.description, patterns, exclude_patterns)]
    suggested = _suggest(
        [e for e in transfers if e.is_withdrawal], ItemKind.TRANSFER, min_count
    ) + _suggest([e for e in transfers if e.is_deposit], ItemKind.TRANSFER, min_count)
    return sorted(suggested, key=lambda s: (-s.count, s.name))
