"""
Bank statement CSV parser.
Reads exported statement files and converts rows to StatementEntry records.
"""

from decimal import Decimal
from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from ..config import ReconConfig
from ..models.records import StatementEntry
from ..utils.exceptions import StatementParseError
from .records import parse_amount, parse_date

logger = logging.getLogger(__name__)


def _normalize_header(header: str) -> str:
    return "".join(str(header).lower().split())


class StatementCSVParser:
    """
    Parser for bank statement CSV exports.

    Columns are found by header aliases, so exports from different banks
    work without per-bank mappings. The amount is either one signed column
    or a pair of debit/credit columns.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        self.input_config = config.input.statements

    def parse_file(self, file_path: Path, account: Optional[str] = None) -> list[StatementEntry]:
        """
        Parse a statement CSV file and return its entries.

        Args:
            file_path: Path to the CSV file
            account: Account label attached to every entry without one

        Returns:
            List of statement entries in file order

        Raises:
            StatementParseError: If the file cannot be read or has no date column
        """
        logger.info(f"Parsing statement CSV file: {file_path}")

        try:
            df = pd.read_csv(
                file_path,
                encoding=self.input_config.encoding,
                delimiter=self.input_config.delimiter,
                dtype=str,
                skipinitialspace=True,
            )
        except Exception as e:
            logger.error(f"Failed to read CSV file: {e}")
            raise StatementParseError(f"Failed to read CSV file: {e}") from e

        entries = self.parse_dataframe(df, source_name=Path(file_path).stem, account=account)
        logger.info(f"Extracted {len(entries)} entries from {Path(file_path).name}")
        return entries

    def parse_dataframe(
        self,
        df: pd.DataFrame,
        source_name: str = "statement",
        account: Optional[str] = None,
    ) -> list[StatementEntry]:
        """
        Convert DataFrame rows to statement entries.

        Rows without a usable date are skipped with a warning.
        """
        columns = self._resolve_columns(df)
        if "date" not in columns:
            raise StatementParseError(
                f"No date column found in {source_name}; headers: {list(df.columns)}"
            )
        if "amount" not in columns and "debit" not in columns and "credit" not in columns:
            raise StatementParseError(
                f"No amount, debit or credit column found in {source_name}"
            )

        entries: list[StatementEntry] = []
        for idx, row in df.iterrows():
            try:
                entry = self._normalize_row(row, int(idx), columns, source_name, account)
            except ValueError as e:
                logger.warning(f"Row {idx}: {e}, skipping")
                continue
            entries.append(entry)

        return entries

    def _resolve_columns(self, df: pd.DataFrame) -> dict[str, str]:
        """Map each field to the first matching header in the frame."""
        headers = {_normalize_header(h): h for h in df.columns}
        resolved: dict[str, str] = {}
        for field_name, aliases in self.input_config.column_aliases.items():
            for alias in aliases:
                header = headers.get(_normalize_header(alias))
                if header is not None and header not in resolved.values():
                    resolved[field_name] = header
                    break
        return resolved

    def _normalize_row(
        self,
        row: pd.Series,
        idx: int,
        columns: dict[str, str],
        source_name: str,
        account: Optional[str],
    ) -> StatementEntry:
        entry_date = parse_date(self._cell(row, columns, "date"), self.input_config.date_format)

        amount_cell = self._cell(row, columns, "amount")
        if amount_cell is not None:
            amount = parse_amount(amount_cell)
        else:
            debit = self._cell(row, columns, "debit")
            credit = self._cell(row, columns, "credit")
            if debit is None and credit is None:
                raise ValueError("no amount")
            amount = (parse_amount(credit) if credit is not None else Decimal("0")) - (
                abs(parse_amount(debit)) if debit is not None else Decimal("0")
            )

        balance_cell = self._cell(row, columns, "balance")
        balance: Optional[Decimal] = None
        if balance_cell is not None:
            try:
                balance = parse_amount(balance_cell)
            except ValueError:
                logger.debug(f"Row {idx}: ignoring unparseable balance {balance_cell!r}")

        return StatementEntry(
            id=f"{source_name}-{idx:05d}",
            date=entry_date,
            description=self._cell(row, columns, "description") or "",
            amount=amount,
            account=self._cell(row, columns, "account") or account,
            balance=balance,
            category=self._cell(row, columns, "category"),
            source_file=source_name,
        )

    @staticmethod
    def _cell(row: pd.Series, columns: dict[str, str], field_name: str) -> Optional[str]:
        column = columns.get(field_name)
        if column is None:
            return None
        value = row.get(column)
        if pd.isna(value):
            return None
        text = str(value).strip()
        return text or None
