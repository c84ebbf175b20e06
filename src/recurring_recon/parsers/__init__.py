"""Parsers for statement files and stored records."""

from .records import (
    parse_date,
    parse_amount,
    parse_statement_record,
    parse_statement_records,
    parse_recurring_item,
    parse_recurring_items,
)
from .statement_parser import StatementCSVParser

__all__ = [
    "StatementCSVParser",
    "parse_date",
    "parse_amount",
    "parse_statement_record",
    "parse_statement_records",
    "parse_recurring_item",
    "parse_recurring_items",
]
