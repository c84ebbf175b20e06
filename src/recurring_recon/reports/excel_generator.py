"""
Excel report generator for recurring-item reconciliation.
Creates a multi-sheet workbook from a ReconciliationReport.
"""

from datetime import datetime
from pathlib import Path
from typing import Any
import logging

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig, SheetConfig
from ..models.records import MatchStatus, ReconciliationReport, ReconciliationResult
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
VARIANCE_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

RESULT_HEADERS = [
    "Item",
    "Projected Date",
    "Expected Amount",
    "Status",
    "Statement Date",
    "Statement Amount",
    "Statement Description",
    "Account",
    "Amount Variance",
    "Date Variance (Days)",
]


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with one sheet per result group."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.sheet_config = config.output.sheets

    def generate_report(self, report: ReconciliationReport, output_path: Path) -> Path:
        """
        Generate the complete reconciliation workbook.

        Args:
            report: Result of a reconciliation run
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        sheets = self.sheet_config
        if sheets.summary.enabled:
            self._create_summary_sheet(wb, report, sheets.summary)
        if sheets.matched.enabled:
            self._create_results_sheet(wb, sheets.matched, report.results, MatchStatus.MATCHED)
        if sheets.unmatched.enabled:
            self._create_results_sheet(wb, sheets.unmatched, report.results, MatchStatus.UNMATCHED)
        if sheets.amount_mismatches.enabled:
            self._create_results_sheet(
                wb, sheets.amount_mismatches, report.results, MatchStatus.PARTIAL_AMOUNT_MISMATCH
            )
        if sheets.anchor_suggestions.enabled:
            self._create_anchor_sheet(wb, report, sheets.anchor_suggestions)
        if sheets.errors.enabled:
            self._create_errors_sheet(wb, report, sheets.errors)

        if not wb.sheetnames:
            # openpyxl cannot save a workbook without sheets
            wb.create_sheet("Summary")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self, wb: Workbook, report: ReconciliationReport, sheet: SheetConfig
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(sheet.name)

        ws["A1"] = "Recurring Item Reconciliation"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        rows: list[tuple[str, Any]] = [
            ("Period", f"{report.range_start} to {report.range_end}"),
            ("Generated At", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
            ("Config File", self.config.config_file_path or "Default"),
            ("", ""),
            ("Occurrences", len(report.results)),
            ("Matched", report.matched_count),
            ("Amount Mismatches", report.mismatch_count),
            ("Unmatched", report.unmatched_count),
            ("Item Errors", len(report.errors)),
            ("Match Rate", f"{report.match_rate:.1f}%"),
            ("", ""),
            ("Actual Paychecks", f"${report.actual_paycheck_total:,.2f}"),
            ("Projected Paychecks", f"${report.projected_paycheck_total:,.2f}"),
            ("Paycheck Variance", f"${report.paycheck_variance:,.2f}"),
        ]

        for i, (label, value) in enumerate(rows, start=3):
            ws[f"A{i}"] = label
            ws[f"A{i}"].font = Font(bold=True)
            ws[f"B{i}"] = value

        row = len(rows) + 4
        ws[f"A{row}"] = "Paychecks by Month"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1
        self._write_headers(ws, ["Month", "Actual", "Projected", "Variance"], row)
        for month, actual in sorted(report.actual_paycheck_totals.items()):
            row += 1
            projected = report.projected_paycheck_totals.get(month, 0)
            values = [month.strftime("%Y-%m"), float(actual), float(projected), float(actual - projected)]
            for col, value in enumerate(values, start=1):
                ws.cell(row=row, column=col, value=value).border = THIN_BORDER

        ws.column_dimensions["A"].width = 24
        ws.column_dimensions["B"].width = 30
        ws.column_dimensions["C"].width = 14
        ws.column_dimensions["D"].width = 14

    def _create_results_sheet(
        self,
        wb: Workbook,
        sheet: SheetConfig,
        results: list[ReconciliationResult],
        status: MatchStatus,
    ) -> None:
        """Create a sheet listing the results with one status."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, RESULT_HEADERS)

        fill = {
            MatchStatus.MATCHED: MATCH_FILL,
            MatchStatus.PARTIAL_AMOUNT_MISMATCH: VARIANCE_FILL,
            MatchStatus.UNMATCHED: UNMATCHED_FILL,
        }[status]

        row_num = 1
        for result in results:
            if result.status is not status:
                continue
            row_num += 1
            occurrence, entry = result.occurrence, result.entry
            row_data = [
                occurrence.item_name,
                occurrence.date,
                float(occurrence.amount),
                status.value,
                entry.date if entry else "",
                float(entry.amount) if entry else "",
                entry.description if entry else "",
                (entry.account or "") if entry else "",
                float(result.amount_variance) if result.amount_variance else "",
                result.date_variance_days if result.date_variance_days else "",
            ]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = fill

        self._auto_fit_columns(ws)

    def _create_anchor_sheet(
        self, wb: Workbook, report: ReconciliationReport, sheet: SheetConfig
    ) -> None:
        """Create the sheet of proposed anchor corrections."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, ["Item", "Current Anchor", "Suggested Anchor", "Shift (Days)"])

        suggestions = sorted(report.anchor_suggestions.values(), key=lambda s: s.item_name)
        for row_num, suggestion in enumerate(suggestions, start=2):
            row_data = [
                suggestion.item_name,
                suggestion.current_anchor,
                suggestion.suggested_anchor,
                suggestion.shift_days,
            ]
            for col, value in enumerate(row_data, start=1):
                ws.cell(row=row_num, column=col, value=value).border = THIN_BORDER

        self._auto_fit_columns(ws)

    def _create_errors_sheet(
        self, wb: Workbook, report: ReconciliationReport, sheet: SheetConfig
    ) -> None:
        """Create the sheet of items that could not be projected."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, ["Item ID", "Item", "Error"])

        for row_num, error in enumerate(report.errors, start=2):
            for col, value in enumerate([error.item_id, error.item_name, error.message], start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = UNMATCHED_FILL
                cell.alignment = Alignment(wrap_text=col == 3)

        self._auto_fit_columns(ws)

    @staticmethod
    def _write_headers(ws: Worksheet, headers: list[str], row: int = 1) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = 0
            column = column_cells[0].column_letter

            for cell in column_cells:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))

            ws.column_dimensions[column].width = min(max_length + 2, 50)
