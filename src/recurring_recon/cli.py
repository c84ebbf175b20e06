"""
Command-line interface for the recurring schedule reconciliation tool.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional
import json
import sys

import click
import yaml
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .analysis.aggregator import month_bounds, paycheck_deposits_for_month
from .analysis.drift import latest_matching_entry
from .analysis.suggestions import suggest_bills, suggest_paychecks, suggest_transfers
from .config import ReconConfig, generate_default_config, load_config
from .matching.engine import ReconciliationEngine
from .models.records import ItemKind, MatchStatus, ReconciliationReport, StatementEntry
from .parsers.records import parse_date, parse_recurring_items
from .parsers.statement_parser import StatementCSVParser
from .reports.excel_generator import ExcelReportGenerator
from .utils.exceptions import ReconciliationError
from .utils.logging_config import logging_from_config

console = Console()

STATUS_STYLES = {
    MatchStatus.MATCHED: "green",
    MatchStatus.PARTIAL_AMOUNT_MISMATCH: "yellow",
    MatchStatus.UNMATCHED: "red",
}


def _parse_date_option(ctx, param, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _parse_month_option(ctx, param, value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError as e:
        raise click.BadParameter("use YYYY-MM") from e


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Recurring bill and paycheck reconciliation against bank statements."""
    pass


@main.command()
@click.argument("statements", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option(
    "-i",
    "--items",
    "items_file",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="YAML or JSON file with recurring item records",
)
@click.option("--start", callback=_parse_date_option, help="First date to reconcile (default: first of this month)")
@click.option("--end", callback=_parse_date_option, help="Last date to reconcile (default: today)")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option("--date-window", type=int, default=None, help="Override matching date window in days")
@click.option(
    "--amount-tolerance",
    type=float,
    default=None,
    help="Override amount tolerance in percent",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--dry-run", is_flag=True, help="Show results without generating a report")
def reconcile(
    statements: tuple[Path, ...],
    items_file: Path,
    start: Optional[date],
    end: Optional[date],
    config: Optional[Path],
    output: Optional[Path],
    date_window: Optional[int],
    amount_tolerance: Optional[float],
    verbose: bool,
    dry_run: bool,
):
    """
    Reconcile recurring items against one or more statement CSV files.

    STATEMENTS: Paths to bank statement CSV exports
    """
    recon_config = _load_config(config)
    logging_from_config(recon_config.logging, verbose)

    today = date.today()
    range_start = start or month_bounds(today)[0]
    range_end = end or today

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Parsing statements...", total=None)
            entries = _read_statements(recon_config, statements)
            progress.update(task, completed=True)

            task = progress.add_task("Running reconciliation...", total=None)
            engine = ReconciliationEngine(
                recon_config,
                amount_tolerance_pct=amount_tolerance,
                date_window_days=date_window,
            )
            report = engine.reconcile_records(
                _read_item_records(items_file), entries, range_start, range_end
            )
            progress.update(task, completed=True)

        _display_results(report)
        _display_summary(report)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        if output is None:
            output = recon_config.output.excel.default_report_path()

        report_path = ExcelReportGenerator(recon_config).generate_report(report, output)
        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command()
@click.argument("items_file", type=click.Path(exists=True, path_type=Path))
@click.option("--start", required=True, callback=_parse_date_option, help="First date (inclusive)")
@click.option("--end", required=True, callback=_parse_date_option, help="Last date (inclusive)")
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def project(items_file: Path, start: date, end: date, config: Optional[Path]):
    """
    Show the projected occurrences of recurring items.

    ITEMS_FILE: YAML or JSON file with recurring item records
    """
    recon_config = _load_config(config)
    items, errors = parse_recurring_items(_read_item_records(items_file))
    occurrences, projection_errors = ReconciliationEngine(recon_config).project(items, start, end)

    table = Table(title=f"Projected occurrences {start} to {end}")
    table.add_column("Date")
    table.add_column("Item")
    table.add_column("Amount", justify="right")

    for occurrence in occurrences:
        table.add_row(str(occurrence.date), occurrence.item_name, f"${occurrence.amount:,.2f}")

    console.print(table)
    for error in errors + projection_errors:
        console.print(f"[red]{error.item_id}: {error.message}[/red]")


@main.command("month-total")
@click.argument("statements", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("--month", required=True, callback=_parse_month_option, help="Month as YYYY-MM")
@click.option("-n", "--name", "names", multiple=True, help="Configured paycheck name (repeatable)")
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def month_total(statements: tuple[Path, ...], month: date, names: tuple[str, ...], config: Optional[Path]):
    """
    Total the paycheck deposits received in a calendar month.

    STATEMENTS: Paths to bank statement CSV exports
    """
    recon_config = _load_config(config)
    entries = _read_statements(recon_config, statements)
    total = paycheck_deposits_for_month(
        entries,
        month,
        paycheck_names=list(names) + list(recon_config.paychecks.names),
        patterns=recon_config.paychecks.patterns,
    )
    console.print(f"Paycheck deposits for {month:%Y-%m}: [bold]${total:,.2f}[/bold]")


@main.command("suggest-anchor")
@click.argument("statements", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("-n", "--name", required=True, help="Recurring item display name")
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def suggest_anchor_command(statements: tuple[Path, ...], name: str, config: Optional[Path]):
    """
    Propose an anchor date from the latest statement entry naming an item.

    STATEMENTS: Paths to bank statement CSV exports
    """
    entries = _read_statements(_load_config(config), statements)
    entry = latest_matching_entry(entries, name)
    if entry is None:
        console.print(f"[yellow]No statement entry matches {name!r}; no suggestion available[/yellow]")
        return
    console.print(
        f"Suggested anchor for {name!r}: [bold]{entry.date.isoformat()}[/bold] "
        f"({entry.description}, ${entry.amount:,.2f})"
    )


@main.command("suggest-items")
@click.argument("statements", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("--paychecks", "kind", flag_value="paychecks", default=True, help="Suggest paychecks (default)")
@click.option("--bills", "kind", flag_value="bills", help="Suggest bills instead of paychecks")
@click.option("--transfers", "kind", flag_value="transfers", help="Suggest transfers between your own accounts")
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def suggest_items(statements: tuple[Path, ...], kind: str, config: Optional[Path]):
    """
    Suggest paychecks, bills or transfers that recur on the statements.

    STATEMENTS: Paths to bank statement CSV exports
    """
    recon_config = _load_config(config)
    entries = _read_statements(recon_config, statements)
    transfers = recon_config.transfers
    if kind == "bills":
        suggestions = suggest_bills(
            entries,
            transfer_patterns=transfers.patterns,
            transfer_exclude_patterns=transfers.exclude_patterns,
        )
    elif kind == "transfers":
        suggestions = suggest_transfers(
            entries, patterns=transfers.patterns, exclude_patterns=transfers.exclude_patterns
        )
    else:
        suggestions = suggest_paychecks(entries, recon_config.paychecks.patterns)

    table = Table(title=f"Suggested {kind}")
    table.add_column("Name")
    table.add_column("Frequency")
    table.add_column("Anchor")
    table.add_column("Amount", justify="right")
    table.add_column("Count", justify="right")

    for s in suggestions:
        table.add_row(s.name, s.frequency.value, str(s.anchor_date), f"${s.amount:,.2f}", str(s.count))

    console.print(table)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _load_config(config: Optional[Path]) -> ReconConfig:
    try:
        return load_config(config)
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


def _read_statements(config: ReconConfig, paths: tuple[Path, ...]) -> list[StatementEntry]:
    parser = StatementCSVParser(config)
    entries: list[StatementEntry] = []
    try:
        for path in paths:
            entries.extend(parser.parse_file(path))
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)
    return entries


def _read_item_records(path: Path) -> list[dict[str, Any]]:
    """Load recurring item records from YAML or JSON; a top-level "items" key is optional."""
    try:
        with open(path, "r") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error reading items file: {e}[/red]")
        sys.exit(1)

    if isinstance(data, dict):
        records = []
        for key, kind in (("paychecks", ItemKind.PAYCHECK), ("bills", ItemKind.BILL), ("transfers", ItemKind.TRANSFER)):
            for record in data.get(key) or []:
                records.append({"kind": kind.value, **record})
        records.extend(data.get("items") or [])
        return records
    return list(data or [])


def _display_results(report: ReconciliationReport) -> None:
    """Display each occurrence and what it matched."""
    table = Table(title="Occurrences")
    table.add_column("Projected")
    table.add_column("Item")
    table.add_column("Expected", justify="right")
    table.add_column("Status")
    table.add_column("Actual Date")
    table.add_column("Actual", justify="right")

    for result in report.results:
        entry = result.entry
        style = STATUS_STYLES[result.status]
        table.add_row(
            str(result.occurrence.date),
            result.occurrence.item_name,
            f"${result.occurrence.amount:,.2f}",
            f"[{style}]{result.status.value}[/{style}]",
            str(entry.date) if entry else "-",
            f"${entry.amount:,.2f}" if entry else "-",
        )

    console.print(table)


def _display_summary(report: ReconciliationReport) -> None:
    """Display reconciliation summary in console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Occurrences", str(len(report.results)))
    table.add_row("Matched", str(report.matched_count))
    table.add_row("Amount Mismatches", str(report.mismatch_count))
    table.add_row("Unmatched", str(report.unmatched_count))
    table.add_row("Item Errors", str(len(report.errors)))
    table.add_row("Match Rate", f"{report.match_rate:.1f}%")
    table.add_row("Actual Paychecks", f"${report.actual_paycheck_total:,.2f}")
    table.add_row("Projected Paychecks", f"${report.projected_paycheck_total:,.2f}")
    table.add_row("Anchor Suggestions", str(len(report.anchor_suggestions)))
    table.add_row("Processing Time", f"{report.processing_time_seconds:.2f}s")

    console.print(table)

    for error in report.errors:
        console.print(f"[red]{error.item_id} ({error.item_name}): {error.message}[/red]")
    for suggestion in report.anchor_suggestions.values():
        console.print(
            f"[yellow]{suggestion.item_name}: anchor {suggestion.current_anchor} -> "
            f"{suggestion.suggested_anchor} ({suggestion.shift_days:+d} days)[/yellow]"
        )


if __name__ == "__main__":
    main()
