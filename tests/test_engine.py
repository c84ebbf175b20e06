"""Tests for the reconciliation engine."""

from datetime import date
from decimal import Decimal

import pytest

from recurring_recon.config import MatchingSettings, ReconConfig
from recurring_recon.matching.engine import ReconciliationEngine
from recurring_recon.models.records import ItemKind, MatchStatus, RecurringItemConfig


@pytest.fixture
def household_items(make_item):
    return [
        make_item("pay", "Acme Corp", "1200", "biweekly", date(2024, 1, 2), kind=ItemKind.PAYCHECK),
        make_item("netflix", "Netflix", "-15.49", "monthly", date(2024, 1, 10)),
        make_item("power", "City Power", "-80.00", "monthly", date(2023, 12, 5)),
        make_item("insurance", "State Farm", "-150.00", "monthly", date(2024, 1, 16)),
        make_item("hulu", "Hulu", "-7.99", "monthly", date(2024, 1, 3)),
    ]


class TestReconcile:
    """Tests for ReconciliationEngine.reconcile."""

    def test_statuses_and_counts(self, household_items, january_ledger):
        report = ReconciliationEngine().reconcile(
            household_items, january_ledger, date(2024, 1, 1), date(2024, 1, 31)
        )
        assert len(report.results) == 7
        assert report.matched_count == 5
        assert report.mismatch_count == 1
        assert report.unmatched_count == 1
        assert report.match_rate == pytest.approx(600 / 7)
        assert report.errors == []

        statuses = {item_id: [r.status for r in report.results_for(item_id)] for item_id in ("insurance", "hulu")}
        assert statuses == {
            "insurance": [MatchStatus.PARTIAL_AMOUNT_MISMATCH],
            "hulu": [MatchStatus.UNMATCHED],
        }

    def test_results_are_date_ascending(self, household_items, january_ledger):
        report = ReconciliationEngine().reconcile(
            household_items, january_ledger, date(2024, 1, 1), date(2024, 1, 31)
        )
        keys = [(r.occurrence.date, r.occurrence.item_id) for r in report.results]
        assert keys == sorted(keys)

    def test_paycheck_totals(self, household_items, january_ledger):
        report = ReconciliationEngine().reconcile(
            household_items, january_ledger, date(2024, 1, 1), date(2024, 2, 29)
        )
        assert report.actual_paycheck_totals == {
            date(2024, 1, 1): Decimal("3600.00"),
            date(2024, 2, 1): Decimal("0"),
        }
        assert report.projected_paycheck_totals == {
            date(2024, 1, 1): Decimal("3600"),
            date(2024, 2, 1): Decimal("2400"),
        }
        assert report.paycheck_variance == Decimal("-2400")

    def test_each_entry_claimed_once(self, make_item, january_ledger):
        """Two items describing the same charge cannot share one entry."""
        items = [
            make_item("n1", "Netflix", "-15.49", "monthly", date(2024, 1, 10)),
            make_item("n2", "Netflix", "-15.49", "monthly", date(2024, 1, 10)),
        ]
        report = ReconciliationEngine().reconcile(items, january_ledger, date(2024, 1, 1), date(2024, 1, 31))
        assert [r.status for r in report.results] == [MatchStatus.MATCHED, MatchStatus.UNMATCHED]

    def test_invalid_item_reported_not_raised(self, household_items, january_ledger):
        broken = RecurringItemConfig(
            id="broken",
            name="Mystery",
            amount=Decimal("-1"),
            frequency="sometimes",
            anchor_date=date(2024, 1, 1),
        )
        report = ReconciliationEngine().reconcile(
            household_items + [broken], january_ledger, date(2024, 1, 1), date(2024, 1, 31)
        )
        assert len(report.results) == 7
        assert [(e.item_id, e.item_name) for e in report.errors] == [("broken", "Mystery")]

    def test_anchor_off_schedule_is_an_item_error(self, make_item, january_ledger):
        """A last-working-day item anchored mid-month is reported, not silently re-anchored."""
        items = [make_item("rent", "Rent", "-900", "monthly-last-working-day", date(2024, 1, 12))]
        report = ReconciliationEngine().reconcile(items, january_ledger, date(2024, 1, 1), date(2024, 1, 31))
        assert report.results == []
        assert [e.item_id for e in report.errors] == ["rent"]
        assert "last working day" in report.errors[0].message

    def test_empty_ledger(self, household_items):
        report = ReconciliationEngine().reconcile(household_items, None, date(2024, 1, 1), date(2024, 1, 31))
        assert report.unmatched_count == len(report.results) == 7
        assert report.actual_paycheck_total == Decimal("0")
        assert report.anchor_suggestions == {}

    def test_drift_suggestion(self, make_item, january_ledger):
        items = [make_item("netflix", "Netflix", "-15.49", "monthly", date(2023, 12, 8))]
        report = ReconciliationEngine().reconcile(items, january_ledger, date(2024, 1, 1), date(2024, 1, 31))

        result = report.results[0]
        assert result.status is MatchStatus.MATCHED
        assert result.date_variance_days == 2

        suggestion = report.anchor_suggestions["netflix"]
        assert suggestion.suggested_anchor == date(2024, 1, 10)
        assert suggestion.current_anchor == date(2023, 12, 8)

    def test_on_schedule_items_have_no_suggestions(self, household_items, january_ledger):
        report = ReconciliationEngine().reconcile(
            household_items, january_ledger, date(2024, 1, 1), date(2024, 1, 31)
        )
        assert report.anchor_suggestions == {}

    def test_input_list_not_modified(self, household_items, january_ledger):
        entries = list(january_ledger)
        snapshot = list(entries)
        ReconciliationEngine().reconcile(household_items, entries, date(2024, 1, 1), date(2024, 1, 31))
        assert entries == snapshot


class TestEngineSettings:
    """Tests for configuration and overrides."""

    def test_config_thresholds(self, make_item, january_ledger):
        config = ReconConfig(matching=MatchingSettings(date_window_days=1))
        items = [make_item("netflix", "Netflix", "-15.49", "monthly", date(2024, 1, 8))]
        report = ReconciliationEngine(config).reconcile(items, january_ledger, date(2024, 1, 1), date(2024, 1, 31))
        assert report.unmatched_count == 1

    def test_overrides_win_over_config(self, make_item, january_ledger):
        config = ReconConfig(matching=MatchingSettings(date_window_days=1, amount_tolerance_percent=0))
        engine = ReconciliationEngine(config, amount_tolerance_pct=50.0, date_window_days=2)
        assert engine.matcher.date_window_days == 2
        assert engine.matcher.amount_tolerance_pct == Decimal("50.0")

    def test_project(self, household_items):
        occurrences, errors = ReconciliationEngine().project(household_items, date(2024, 1, 1), date(2024, 1, 7))
        assert [(o.date, o.item_id) for o in occurrences] == [
            (date(2024, 1, 2), "pay"),
            (date(2024, 1, 3), "hulu"),
            (date(2024, 1, 5), "power"),
        ]
        assert errors == []


class TestReconcileRecords:
    """Tests for reconciling raw stored records."""

    def test_parse_errors_listed_first(self, january_ledger):
        records = [
            {"id": "pay", "name": "Acme Corp", "kind": "paycheck", "amount": "1200", "frequency": "2 weeks",
             "anchorDate": "2024-01-02"},
            {"id": "netflix", "name": "Netflix", "amount": "15.49", "frequency": "monthly", "nextDue": "2024-02-10"},
            {"id": "bad", "name": "Nope", "frequency": "monthly"},
        ]
        report = ReconciliationEngine().reconcile_records(records, january_ledger, date(2024, 1, 1), date(2024, 1, 31))
        assert report.matched_count == 4
        assert [e.item_id for e in report.errors] == ["bad"]
