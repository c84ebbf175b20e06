"""
Anchor drift resolution.
Proposes a corrected anchor date from the latest statement entry naming an item.
"""

from datetime import date
from typing import Iterable, Optional
import logging

from ..models.records import AnchorSuggestion, RecurringItemConfig, StatementEntry
from ..schedule.frequency import DEFAULT_SEMIMONTHLY_OFFSET, project_occurrences
from ..utils.exceptions import InvalidConfiguration
from .aggregator import LedgerLike, as_ledger_view

logger = logging.getLogger(__name__)


def latest_matching_entry(
    ledger: LedgerLike,
    item_name: str,
    direction: int = 0,
) -> Optional[StatementEntry]:
    """
    The most recent entry whose description names the item.

    Args:
        ledger: Statement entries or a LedgerView
        item_name: Item display name, account hints allowed
        direction: 1 for deposits only, -1 for withdrawals only, 0 for either
    """
    view = as_ledger_view(ledger)
    if direction == 0:
        return view.most_recent_matching(item_name)

    for entry in reversed(view.entries_matching_name(item_name)):
        if (entry.amount > 0 and direction > 0) or (entry.amount < 0 and direction < 0):
            return entry
    return None


def suggest_anchor(ledger: LedgerLike, item_name: str) -> Optional[date]:
    """
    Date of the latest entry naming the item, as a candidate anchor.

    Returns None when nothing matches; callers treat that as "cannot
    auto-correct", not as an error.
    """
    entry = latest_matching_entry(ledger, item_name)
    return entry.date if entry else None


def suggest_anchors(
    ledger: LedgerLike,
    items: Iterable[RecurringItemConfig],
    semimonthly_offset_days: int = DEFAULT_SEMIMONTHLY_OFFSET,
) -> list[AnchorSuggestion]:
    """
    Anchor corrections for every item whose schedule has drifted.

    An item has drifted when its latest matching entry does not fall on a
    date the current schedule projects. Matching is restricted to deposits or
    withdrawals according to the sign of the item's amount.
    """
    view = as_ledger_view(ledger)
    suggestions: list[AnchorSuggestion] = []

    for item in items:
        direction = (item.amount > 0) - (item.amount < 0)
        entry = latest_matching_entry(view, item.name, direction=direction)
        if entry is None:
            continue

        try:
            on_schedule = project_occurrences(
                item.anchor_date,
                item.frequency,
                entry.date,
                entry.date,
                semimonthly_offset_days,
            )
        except InvalidConfiguration as e:
            logger.warning(f"Cannot check drift for {item.id}: {e}")
            continue

        if on_schedule:
            continue

        suggestion = AnchorSuggestion(
            item_id=item.id,
            item_name=item.name,
            current_anchor=item.anchor_date,
            suggested_anchor=entry.date,
            entry=entry,
        )
        logger.debug(
            f"{item.name}: anchor {item.anchor_date} drifted, latest entry on {entry.date}"
        )
        suggestions.append(suggestion)

    return suggestions
