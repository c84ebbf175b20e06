"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner
from openpyxl import load_workbook

from recurring_recon.cli import main


STATEMENT_CSV = """Date,Description,Amount
2024-01-02,ACME CORP PAYROLL PPD 000111,1200.00
2024-01-05,CITY POWER & LIGHT ONLINE PMT,-84.20
2024-01-10,NETFLIX.COM 866-579-7172,-15.49
2024-01-16,ACME CORP PAYROLL PPD 000112,1200.00
2024-01-16,STATE FARM INSURANCE,-132.00
2024-01-30,ACME CORP PAYROLL PPD 000113,1200.00
"""

ITEMS_YAML = """paychecks:
  - id: pay
    name: Acme Corp
    amount: 1200
    frequency: biweekly
    anchorDate: "2024-01-02"
bills:
  - id: netflix
    name: Netflix
    amount: "15.49"
    frequency: monthly
    nextDue: "2024-02-10"
  - id: hulu
    name: Hulu
    amount: "7.99"
    frequency: monthly
    nextDue: "2024-02-03"
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def statement_file(tmp_path):
    path = tmp_path / "checking.csv"
    path.write_text(STATEMENT_CSV)
    return path


@pytest.fixture
def items_file(tmp_path):
    path = tmp_path / "items.yaml"
    path.write_text(ITEMS_YAML)
    return path


class TestReconcileCommand:
    """Tests for the reconcile command."""

    def test_dry_run(self, runner, statement_file, items_file):
        result = runner.invoke(
            main,
            ["reconcile", str(statement_file), "-i", str(items_file), "--start", "2024-01-01",
             "--end", "2024-01-31", "--dry-run"],
        )
        assert result.exit_code == 0, result.output
        assert "Reconciliation Summary" in result.output
        assert "Dry run" in result.output

    def test_writes_report(self, runner, tmp_path, statement_file, items_file):
        output = tmp_path / "report.xlsx"
        result = runner.invoke(
            main,
            ["reconcile", str(statement_file), "-i", str(items_file), "--start", "2024-01-01",
             "--end", "2024-01-31", "-o", str(output)],
        )
        assert result.exit_code == 0, result.output
        wb = load_workbook(output)
        matched = [cell.value for cell in wb["Matched"]["A"]][1:]
        assert sorted(matched) == ["Acme Corp", "Acme Corp", "Acme Corp", "Netflix"]

    def test_json_items_list(self, runner, tmp_path, statement_file):
        items = tmp_path / "items.json"
        items.write_text(
            json.dumps(
                [{"id": "netflix", "name": "Netflix", "amount": "-15.49", "frequency": "monthly",
                  "anchorDate": "2024-01-10"}]
            )
        )
        result = runner.invoke(
            main,
            ["reconcile", str(statement_file), "-i", str(items), "--start", "2024-01-01",
             "--end", "2024-01-31", "--dry-run"],
        )
        assert result.exit_code == 0, result.output

    def test_bad_config_exits_nonzero(self, runner, tmp_path, statement_file, items_file):
        config = tmp_path / "config.yaml"
        config.write_text("matching:\n  date_window_days: -3\n")
        result = runner.invoke(
            main, ["reconcile", str(statement_file), "-i", str(items_file), "-c", str(config), "--dry-run"]
        )
        assert result.exit_code == 1

    def test_bad_date_option(self, runner, statement_file, items_file):
        result = runner.invoke(
            main, ["reconcile", str(statement_file), "-i", str(items_file), "--start", "someday"]
        )
        assert result.exit_code == 2


class TestOtherCommands:
    """Tests for the project, month-total, suggest and init-config commands."""

    def test_project(self, runner, items_file):
        result = runner.invoke(main, ["project", str(items_file), "--start", "2024-01-01", "--end", "2024-01-31"])
        assert result.exit_code == 0, result.output
        for day in ("2024-01-02", "2024-01-03", "2024-01-10", "2024-01-16", "2024-01-30"):
            assert day in result.output

    def test_month_total(self, runner, statement_file):
        result = runner.invoke(main, ["month-total", str(statement_file), "--month", "2024-01"])
        assert result.exit_code == 0, result.output
        assert "3,600.00" in result.output

    def test_month_total_bad_month(self, runner, statement_file):
        result = runner.invoke(main, ["month-total", str(statement_file), "--month", "January"])
        assert result.exit_code == 2

    def test_suggest_anchor(self, runner, statement_file):
        result = runner.invoke(main, ["suggest-anchor", str(statement_file), "-n", "State Farm"])
        assert result.exit_code == 0, result.output
        assert "2024-01-16" in result.output

    def test_suggest_anchor_no_match(self, runner, statement_file):
        result = runner.invoke(main, ["suggest-anchor", str(statement_file), "-n", "Hulu"])
        assert result.exit_code == 0
        assert "No statement entry" in result.output

    def test_suggest_items(self, runner, statement_file):
        result = runner.invoke(main, ["suggest-items", str(statement_file)])
        assert result.exit_code == 0, result.output
        assert "Acme Corp Payroll" in result.output
        assert "biweekly" in result.output

    def test_init_config(self, runner, tmp_path):
        output = tmp_path / "config.yaml"
        result = runner.invoke(main, ["init-config", "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert "date_window_days: 3" in output.read_text()

    def test_suggest_items_transfers_and_bills(self, runner, tmp_path):
        statement = tmp_path / "savings.csv"
        statement.write_text(
            "Date,Description,Amount\n"
            "2024-01-05,ONLINE TRANSFER TO NEU C WAY2SAVE BILLS,-250.00\n"
            "2024-01-19,ONLINE TRANSFER TO NEU C WAY2SAVE BILLS,-250.00\n"
            "2024-01-06,NETFLIX.COM 866-579-7172,-15.49\n"
            "2024-02-06,NETFLIX.COM 866-579-7172,-15.49\n"
        )
        transfers = runner.invoke(main, ["suggest-items", str(statement), "--transfers"])
        assert transfers.exit_code == 0, transfers.output
        assert "Suggested transfers" in transfers.output
        assert "Way2save" in transfers.output

        bills = runner.invoke(main, ["suggest-items", str(statement), "--bills"])
        assert bills.exit_code == 0, bills.output
        assert "Netflix" in bills.output
        assert "Way2save" not in bills.output


class TestReportFilename:
    """Tests for the default report path taken from configuration."""

    def test_template_without_timestamp(self, runner, tmp_path, statement_file, items_file):
        config = tmp_path / "config.yaml"
        config.write_text(
            "output:\n"
            "  excel:\n"
            "    filename_template: household_{date}_{time}.xlsx\n"
            "    include_timestamp: false\n"
        )
        with runner.isolated_filesystem(temp_dir=tmp_path) as workdir:
            result = runner.invoke(
                main,
                ["reconcile", str(statement_file), "-i", str(items_file), "-c", str(config),
                 "--start", "2024-01-01", "--end", "2024-01-31"],
            )
            assert result.exit_code == 0, result.output
            assert (tmp_path / workdir / "household.xlsx").exists()
