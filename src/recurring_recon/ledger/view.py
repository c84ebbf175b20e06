"""Read-only, date-sorted index over statement entries."""

from bisect import bisect_left, bisect_right
from datetime import date, timedelta
from typing import Iterable, Iterator, Optional
import logging

from .names import name_tokens, tokens_match
from ..models.records import StatementEntry

logger = logging.getLogger(__name__)


class LedgerView:
    """
    Statement entries sorted once by date, queried many times per run.

    Range queries use binary search over a parallel list of dates. The view
    copies the entries it is given and never modifies the caller's list.
    """

    def __init__(self, entries: Optional[Iterable[StatementEntry]] = None):
        """
        Build the index.

        Args:
            entries: Statement entries in any order; None is an empty ledger
        """
        self._entries: tuple[StatementEntry, ...] = tuple(
            sorted(entries or (), key=lambda e: (e.date, e.id))
        )
        self._dates: tuple[date, ...] = tuple(e.date for e in self._entries)
        logger.debug(f"Indexed {len(self._entries)} statement entries")

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[StatementEntry]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def first_date(self) -> Optional[date]:
        return self._dates[0] if self._dates else None

    @property
    def last_date(self) -> Optional[date]:
        return self._dates[-1] if self._dates else None

    def entries_in_range(self, start: date, end: date) -> list[StatementEntry]:
        """Entries dated from ``start`` through ``end`` inclusive, ascending."""
        if start > end:
            return []
        lo = bisect_left(self._dates, start)
        hi = bisect_right(self._dates, end)
        return list(self._entries[lo:hi])

    def entries_in_window(self, center_date: date, tolerance_days: int) -> list[StatementEntry]:
        """Entries within ``tolerance_days`` of ``center_date``, ascending by date."""
        window = timedelta(days=max(tolerance_days, 0))
        return self.entries_in_range(center_date - window, center_date + window)

    def entries_matching_name(
        self, name_fragment: str, case_insensitive: bool = True
    ) -> list[StatementEntry]:
        """Entries whose description names the item, ascending by date."""
        tokens = name_tokens(name_fragment, case_sensitive=not case_insensitive)
        return [
            e
            for e in self._entries
            if tokens_match(tokens, e.description, case_sensitive=not case_insensitive)
        ]

    def most_recent_matching(self, name_fragment: str) -> Optional[StatementEntry]:
        """The latest entry whose description names the item, or None."""
        tokens = name_tokens(name_fragment)
        if not tokens:
            return None
        for entry in reversed(self._entries):
            if tokens_match(tokens, entry.description):
                return entry
        return None
