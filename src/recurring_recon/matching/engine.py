"""
Reconciliation engine for recurring items.
Projects every configured item over a date range and matches each occurrence
against one shared ledger snapshot.
"""

from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional
import logging

from ..analysis.aggregator import (
    LedgerLike,
    as_ledger_view,
    month_bounds,
    paycheck_deposits_for_month,
    projected_paycheck_total,
)
from ..analysis.drift import suggest_anchors
from ..config import ReconConfig
from ..ledger.names import name_tokens
from ..models.records import (
    ItemError,
    ItemKind,
    Occurrence,
    ReconciliationReport,
    ReconciliationResult,
    RecurringItemConfig,
)
from ..parsers.records import parse_recurring_items
from ..schedule.frequency import add_months, project_item
from ..utils.exceptions import InvalidConfiguration
from .matcher import StatementMatcher

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """
    Orchestrates projection, matching, monthly totals and drift checks.

    The engine holds only configuration. Every call works on the snapshot it
    is given and returns fresh results, so one engine can serve concurrent
    callers.
    """

    def __init__(
        self,
        config: Optional[ReconConfig] = None,
        amount_tolerance_pct: Optional[float] = None,
        date_window_days: Optional[int] = None,
    ):
        """
        Initialize the reconciliation engine.

        Args:
            config: Application configuration; defaults when omitted
            amount_tolerance_pct: Override for matching.amount_tolerance_percent
            date_window_days: Override for matching.date_window_days
        """
        self.config = config or ReconConfig()
        matching = self.config.matching
        self.matcher = StatementMatcher(
            amount_tolerance_pct=(
                amount_tolerance_pct
                if amount_tolerance_pct is not None
                else matching.amount_tolerance_percent
            ),
            date_window_days=(
                date_window_days if date_window_days is not None else matching.date_window_days
            ),
        )
        self.semimonthly_offset_days = self.config.schedule.semimonthly_offset_days

    def project(
        self,
        items: Iterable[RecurringItemConfig],
        range_start: date,
        range_end: date,
    ) -> tuple[list[Occurrence], list[ItemError]]:
        """
        Project every item over the range.

        Returns:
            Tuple of (occurrences sorted by date then item id, per-item errors)
        """
        occurrences: list[Occurrence] = []
        errors: list[ItemError] = []

        for item in items:
            try:
                occurrences.extend(
                    project_item(item, range_start, range_end, self.semimonthly_offset_days)
                )
            except InvalidConfiguration as e:
                logger.warning(f"Cannot project {item.id}: {e}")
                errors.append(ItemError(item_id=item.id, item_name=item.name, message=str(e)))

        occurrences.sort(key=lambda o: (o.date, o.item_id))
        return occurrences, errors

    def reconcile(
        self,
        items: Iterable[RecurringItemConfig],
        entries: LedgerLike,
        range_start: date,
        range_end: date,
    ) -> ReconciliationReport:
        """
        Reconcile configured items against statement entries.

        Each statement entry evidences at most one occurrence; occurrences are
        matched in date order, so an earlier occurrence claims an entry first.

        Args:
            items: Recurring item configurations
            entries: Statement entries or a LedgerView; None is an empty ledger
            range_start: First projected date to reconcile (inclusive)
            range_end: Last projected date to reconcile (inclusive)

        Returns:
            Reconciliation report with per-item errors alongside the results
        """
        start_time = datetime.now()
        items = list(items)
        ledger = as_ledger_view(entries)
        logger.info(
            f"Starting reconciliation: {len(items)} items, {len(ledger)} statement "
            f"entries, {range_start.isoformat()}..{range_end.isoformat()}"
        )

        occurrences, errors = self.project(items, range_start, range_end)
        failed_ids = {e.item_id for e in errors}
        valid_items = [item for item in items if item.id not in failed_ids]

        tokens_by_item = {item.id: name_tokens(item.name) for item in valid_items}
        claimed: set[str] = set()
        results: list[ReconciliationResult] = []

        for occurrence in occurrences:
            result = self.matcher.match(
                occurrence,
                ledger,
                name_tokens=tokens_by_item.get(occurrence.item_id),
                exclude_ids=claimed,
            )
            if result.entry is not None:
                claimed.add(result.entry.id)
            results.append(result)

        report = ReconciliationReport(
            range_start=range_start,
            range_end=range_end,
            results=results,
            errors=errors,
        )
        self._add_paycheck_totals(report, valid_items, ledger)
        report.anchor_suggestions = {
            s.item_id: s
            for s in suggest_anchors(ledger, valid_items, self.semimonthly_offset_days)
        }

        report.processing_time_seconds = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {report.processing_time_seconds:.2f}s: "
            f"{report.matched_count} matched, {report.mismatch_count} amount mismatches, "
            f"{report.unmatched_count} unmatched, {len(errors)} item errors"
        )
        return report

    def reconcile_records(
        self,
        records: Iterable[Mapping[str, Any]],
        entries: LedgerLike,
        range_start: date,
        range_end: date,
        kind: Optional[ItemKind] = None,
    ) -> ReconciliationReport:
        """
        Reconcile stored item records, reporting malformed ones as item errors.

        Args:
            records: Recurring item records as returned by the record store
            entries: Statement entries or a LedgerView
            range_start: First projected date (inclusive)
            range_end: Last projected date (inclusive)
            kind: Item kind for records that do not carry one
        """
        items, parse_errors = parse_recurring_items(records, kind)
        report = self.reconcile(items, entries, range_start, range_end)
        report.errors = parse_errors + report.errors
        return report

    def _add_paycheck_totals(
        self,
        report: ReconciliationReport,
        items: list[RecurringItemConfig],
        ledger,
    ) -> None:
        """Fill in actual and projected paycheck totals for every month in the range."""
        paychecks = [item for item in items if item.kind is ItemKind.PAYCHECK]
        names = [item.name for item in paychecks] + list(self.config.paychecks.names)

        month_start, _ = month_bounds(report.range_start)
        while month_start <= report.range_end:
            report.actual_paycheck_totals[month_start] = paycheck_deposits_for_month(
                ledger,
                month_start,
                paycheck_names=names,
                patterns=self.config.paychecks.patterns,
            )
            report.projected_paycheck_totals[month_start] = projected_paycheck_total(
                paychecks, month_start, self.semimonthly_offset_days
            )
            month_start = add_months(month_start, 1)
