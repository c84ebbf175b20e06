"""Tests for record and statement CSV parsing."""

from datetime import date
from decimal import Decimal

import pytest

from recurring_recon.config import ReconConfig, StatementInputConfig, InputConfig
from recurring_recon.models.records import FrequencyKind, ItemKind
from recurring_recon.parsers.records import (
    parse_amount,
    parse_date,
    parse_recurring_item,
    parse_recurring_items,
    parse_statement_record,
    parse_statement_records,
)
from recurring_recon.parsers.statement_parser import StatementCSVParser
from recurring_recon.utils.exceptions import InvalidConfiguration, StatementParseError


class TestParseValues:
    """Tests for date and amount parsing."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2025-03-12", date(2025, 3, 12)),
            ("2025-03-12T00:00:00.000Z", date(2025, 3, 12)),
            ("3/12/2025", date(2025, 3, 12)),
            ("12 Mar 2025", date(2025, 3, 12)),
            (date(2025, 3, 12), date(2025, 3, 12)),
        ],
    )
    def test_parse_date(self, value, expected):
        assert parse_date(value) == expected

    def test_parse_date_with_format(self):
        assert parse_date("03/12/2025", "%d/%m/%Y") == date(2025, 12, 3)

    @pytest.mark.parametrize("value", ["", "yesterday", None, 20250312])
    def test_parse_date_rejects(self, value):
        with pytest.raises(ValueError):
            parse_date(value)

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("$1,234.56", Decimal("1234.56")),
            ("(12.50)", Decimal("-12.50")),
            ("-7", Decimal("-7")),
            (12.1, Decimal("12.1")),
            (5, Decimal("5")),
        ],
    )
    def test_parse_amount(self, value, expected):
        assert parse_amount(value) == expected

    @pytest.mark.parametrize("value", [True, "abc", "NaN", "Infinity", None])
    def test_parse_amount_rejects(self, value):
        with pytest.raises(ValueError):
            parse_amount(value)


class TestParseRecurringItem:
    """Tests for converting stored item records."""

    def test_bill_from_next_due(self):
        """Bills are stored positive and become withdrawals."""
        item = parse_recurring_item(
            {"id": "b1", "name": "Rent", "amount": "1500", "frequency": "monthly", "nextDue": "2024-02-01"}
        )
        assert item.kind is ItemKind.BILL
        assert item.amount == Decimal("-1500")
        assert item.anchor_date == date(2024, 2, 1)
        assert item.next_due == date(2024, 2, 1)

    def test_paycheck_with_anchor(self):
        item = parse_recurring_item(
            {
                "id": "p1",
                "name": "Acme Corp (Checking)",
                "amount": 2000,
                "frequency": "2weeks",
                "anchorDate": "2024-01-05T00:00:00.000Z",
            },
            kind=ItemKind.PAYCHECK,
        )
        assert item.kind is ItemKind.PAYCHECK
        assert item.amount == Decimal("2000")
        assert item.frequency.kind is FrequencyKind.BIWEEKLY
        assert item.anchor_date == date(2024, 1, 5)

    def test_transfer_with_interval(self):
        item = parse_recurring_item(
            {
                "id": "t1",
                "whatFor": "Savings",
                "kind": "transfer",
                "frequency": "custom-interval",
                "intervalDays": 10,
                "date": "1/3/2024",
                "amount": "-100",
            }
        )
        assert item.name == "Savings"
        assert item.kind is ItemKind.TRANSFER
        assert item.frequency.interval_days == 10
        assert item.anchor_date == date(2024, 1, 3)

    def test_missing_amount_is_zero(self):
        item = parse_recurring_item({"id": "x", "name": "Gym", "frequency": "monthly", "anchorDate": "2024-01-01"})
        assert item.amount == Decimal("0")

    @pytest.mark.parametrize(
        "record",
        [
            {"id": "x", "name": "Gym", "anchorDate": "2024-01-01"},
            {"id": "x", "name": "Gym", "frequency": "sometimes", "anchorDate": "2024-01-01"},
            {"id": "x", "name": "Gym", "frequency": "monthly"},
            {"id": "x", "name": "Gym", "frequency": "monthly", "anchorDate": "soon"},
            {"id": "x", "name": "Gym", "frequency": "monthly", "anchorDate": "2024-01-01", "kind": "loan"},
            {"id": "x", "frequency": "monthly", "anchorDate": "2024-01-01"},
        ],
    )
    def test_invalid_records_carry_item_id(self, record):
        with pytest.raises(InvalidConfiguration) as exc_info:
            parse_recurring_item(record)
        assert exc_info.value.item_id == "x"

    def test_parse_many_keeps_good_records(self):
        items, errors = parse_recurring_items(
            [
                {"id": "a", "name": "Rent", "frequency": "monthly", "nextDue": "2024-02-01", "amount": 1500},
                {"id": "b", "name": "Broken", "frequency": "every other blue moon", "nextDue": "2024-02-01"},
                {"name": "Anonymous", "frequency": "monthly"},
            ]
        )
        assert [i.id for i in items] == ["a"]
        assert [(e.item_id, e.item_name) for e in errors] == [("b", "Broken"), ("record-2", "Anonymous")]


class TestParseStatementRecord:
    """Tests for converting stored statement records."""

    def test_full_record(self):
        entry = parse_statement_record(
            {
                "id": "s1",
                "date": "2024-01-05",
                "description": "ACME PAYROLL",
                "amount": "1200.00",
                "balance": "3400.10",
                "account": "Checking",
            }
        )
        assert entry.id == "s1"
        assert entry.amount == Decimal("1200.00")
        assert entry.balance == Decimal("3400.10")
        assert entry.account == "Checking"
        assert entry.is_deposit

    @pytest.mark.parametrize(
        "record",
        [
            {"date": "2024-01-05", "amount": "1"},
            {"id": "s1", "date": "not a date", "amount": "1"},
            {"id": "s1", "date": "2024-01-05", "amount": "one"},
        ],
    )
    def test_malformed_records(self, record):
        with pytest.raises(StatementParseError):
            parse_statement_record(record)

    def test_parse_many_skips_malformed(self):
        entries = parse_statement_records(
            [
                {"id": "s1", "date": "2024-01-05", "amount": "-5"},
                {"id": "s2", "date": "", "amount": "-5"},
            ]
        )
        assert [e.id for e in entries] == ["s1"]


class TestStatementCSVParser:
    """Tests for StatementCSVParser."""

    def test_signed_amount_column(self, tmp_path, default_config):
        csv_file = tmp_path / "checking.csv"
        csv_file.write_text(
            "Date,Description,Amount,Balance\n"
            '01/05/2024,ACME PAYROLL,"1,200.00",1500.00\n'
            "01/06/2024,NETFLIX.COM,-15.49,1484.51\n"
        )
        entries = StatementCSVParser(default_config).parse_file(csv_file, account="Checking")

        assert [e.id for e in entries] == ["checking-00000", "checking-00001"]
        assert entries[0].date == date(2024, 1, 5)
        assert entries[0].amount == Decimal("1200.00")
        assert entries[1].amount == Decimal("-15.49")
        assert entries[1].balance == Decimal("1484.51")
        assert all(e.account == "Checking" for e in entries)
        assert entries[0].source_file == "checking"

    def test_debit_credit_columns(self, tmp_path, default_config):
        csv_file = tmp_path / "savings.csv"
        csv_file.write_text(
            "Posting Date,Memo,Debit,Credit\n"
            "2024-01-05,NETFLIX.COM,15.49,\n"
            "2024-01-06,ACME PAYROLL,,1200.00\n"
        )
        entries = StatementCSVParser(default_config).parse_file(csv_file)
        assert [e.amount for e in entries] == [Decimal("-15.49"), Decimal("1200.00")]
        assert entries[0].description == "NETFLIX.COM"

    def test_bad_rows_skipped(self, tmp_path, default_config):
        csv_file = tmp_path / "checking.csv"
        csv_file.write_text(
            "Date,Description,Amount\n"
            "2024-01-05,ACME PAYROLL,1200.00\n"
            "pending,NETFLIX.COM,-15.49\n"
            "2024-01-07,SPOTIFY,\n"
        )
        entries = StatementCSVParser(default_config).parse_file(csv_file)
        assert [e.description for e in entries] == ["ACME PAYROLL"]

    def test_day_first_format(self, tmp_path):
        config = ReconConfig(input=InputConfig(statements=StatementInputConfig(date_format="%d/%m/%Y")))
        csv_file = tmp_path / "uk.csv"
        csv_file.write_text("Date,Description,Amount\n03/12/2024,RENT,-900\n")
        entries = StatementCSVParser(config).parse_file(csv_file)
        assert entries[0].date == date(2024, 12, 3)

    def test_missing_date_column(self, tmp_path, default_config):
        csv_file = tmp_path / "broken.csv"
        csv_file.write_text("When,Description,Amount\n2024-01-05,X,1\n")
        with pytest.raises(StatementParseError):
            StatementCSVParser(default_config).parse_file(csv_file)

    def test_missing_amount_columns(self, tmp_path, default_config):
        csv_file = tmp_path / "broken.csv"
        csv_file.write_text("Date,Description\n2024-01-05,X\n")
        with pytest.raises(StatementParseError):
            StatementCSVParser(default_config).parse_file(csv_file)

    def test_unreadable_file(self, tmp_path, default_config):
        with pytest.raises(StatementParseError):
            StatementCSVParser(default_config).parse_file(tmp_path / "missing.csv")
