"""
Conversion of loosely-typed stored records into validated value types.

The record store hands back dictionaries with camelCase keys, string or float
amounts and dates in several formats. Everything is checked here so the
schedule and matching code only ever sees well-formed values.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional
import logging
import re

from ..models.records import (
    FrequencyRule,
    ItemError,
    ItemKind,
    RecurringItemConfig,
    StatementEntry,
)
from ..utils.exceptions import InvalidConfiguration, StatementParseError

logger = logging.getLogger(__name__)

_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%Y/%m/%d", "%d %b %Y", "%b %d, %Y")


def parse_date(value: Any, date_format: Optional[str] = None) -> date:
    """
    Parse a stored date.

    ISO strings use only their date part, so a UTC-midnight timestamp such as
    ``2025-03-12T00:00:00.000Z`` stays on the 12th.

    Raises:
        ValueError: If the value is not a recognizable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"not a date: {value!r}")

    text = value.strip()
    if date_format:
        try:
            return datetime.strptime(text, date_format).date()
        except ValueError:
            pass

    iso = _ISO_PREFIX.match(text)
    if iso:
        return date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"not a date: {value!r}")


def parse_amount(value: Any) -> Decimal:
    """
    Parse a stored amount into an exact Decimal.

    Strips currency symbols and thousands separators; "(12.50)" is negative.

    Raises:
        ValueError: If the value is not a number
    """
    if isinstance(value, bool):
        raise ValueError(f"not an amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.replace("$", "").replace(",", "").strip()
        negative = text.startswith("(") and text.endswith(")")
        if negative:
            text = text[1:-1]
        try:
            amount = Decimal(text)
        except InvalidOperation as e:
            raise ValueError(f"not an amount: {value!r}") from e
        if negative:
            amount = -amount
    else:
        raise ValueError(f"not an amount: {value!r}")

    if not amount.is_finite():
        raise ValueError(f"not an amount: {value!r}")
    return amount


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def parse_statement_record(record: Mapping[str, Any]) -> StatementEntry:
    """
    Build a StatementEntry from a stored statement record.

    Raises:
        StatementParseError: If the id, date or amount is missing or malformed
    """
    entry_id = _first(record, "id")
    if entry_id is None:
        raise StatementParseError(f"Statement record has no id: {dict(record)!r}")

    try:
        entry_date = parse_date(_first(record, "date"))
        amount = parse_amount(_first(record, "amount"))
        balance_value = _first(record, "balance")
        balance = parse_amount(balance_value) if balance_value is not None else None
    except ValueError as e:
        raise StatementParseError(f"Statement {entry_id}: {e}") from e

    return StatementEntry(
        id=str(entry_id),
        date=entry_date,
        description=str(_first(record, "description") or ""),
        amount=amount,
        account=_first(record, "account"),
        balance=balance,
        category=_first(record, "category"),
        source_file=_first(record, "sourceFile", "source_file"),
    )


def parse_statement_records(records: Iterable[Mapping[str, Any]]) -> list[StatementEntry]:
    """Parse statement records, skipping and logging malformed ones."""
    entries: list[StatementEntry] = []
    for record in records:
        try:
            entries.append(parse_statement_record(record))
        except StatementParseError as e:
            logger.warning(f"Skipping statement record: {e}")
    return entries


def parse_recurring_item(
    record: Mapping[str, Any], kind: Optional[ItemKind] = None
) -> RecurringItemConfig:
    """
    Build a RecurringItemConfig from a stored bill, paycheck or transfer record.

    The anchor is taken from ``anchorDate``, then ``date`` (transfers), then
    ``nextDue`` (bills), all of which name a real or expected occurrence.
    Bills are stored with positive amounts and are turned into withdrawals.
    A missing amount becomes zero, meaning "any amount".

    Args:
        record: Stored record
        kind: Item kind when the record does not carry one

    Raises:
        InvalidConfiguration: If the id, name, frequency or anchor is unusable
    """
    item_id = _first(record, "id")
    if item_id is None:
        raise InvalidConfiguration(f"Recurring item has no id: {dict(record)!r}")
    item_id = str(item_id)

    name = _first(record, "name", "whatFor")
    if name is None:
        raise InvalidConfiguration("Recurring item has no name", item_id=item_id)

    kind_value = _first(record, "kind")
    try:
        item_kind = ItemKind(str(kind_value).lower()) if kind_value else (kind or ItemKind.BILL)
    except ValueError as e:
        raise InvalidConfiguration(f"Unknown item kind: {kind_value!r}", item_id=item_id) from e

    frequency_value: Any = _first(record, "frequency")
    parameters = {
        key: record[key]
        for key in ("interval_days", "intervalDays", "semimonthly_days", "semimonthlyDays")
        if record.get(key) is not None
    }
    if parameters and not isinstance(frequency_value, Mapping):
        frequency_value = {"kind": frequency_value, **parameters}

    try:
        frequency = FrequencyRule.parse(frequency_value)
    except InvalidConfiguration as e:
        raise InvalidConfiguration(f"{name}: {e}", item_id=item_id) from e

    anchor_value = _first(record, "anchorDate", "anchor_date", "date", "nextDue", "next_due")
    if anchor_value is None:
        raise InvalidConfiguration(f"{name}: no anchor date", item_id=item_id)

    try:
        anchor_date = parse_date(anchor_value)
        next_due_value = _first(record, "nextDue", "next_due")
        next_due = parse_date(next_due_value) if next_due_value is not None else None
        amount_value = _first(record, "amount")
        amount = parse_amount(amount_value) if amount_value is not None else Decimal("0")
    except ValueError as e:
        raise InvalidConfiguration(f"{name}: {e}", item_id=item_id) from e

    if item_kind is ItemKind.BILL and amount > 0:
        amount = -amount

    return RecurringItemConfig(
        id=item_id,
        name=str(name),
        amount=amount,
        frequency=frequency,
        anchor_date=anchor_date,
        next_due=next_due,
        kind=item_kind,
        account=_first(record, "account"),
    )


def parse_recurring_items(
    records: Iterable[Mapping[str, Any]], kind: Optional[ItemKind] = None
) -> tuple[list[RecurringItemConfig], list[ItemError]]:
    """
    Parse many recurring item records.

    A malformed record becomes an ItemError; the rest are still returned.
    """
    items: list[RecurringItemConfig] = []
    errors: list[ItemError] = []

    for index, record in enumerate(records):
        try:
            items.append(parse_recurring_item(record, kind))
        except InvalidConfiguration as e:
            item_id = e.item_id or str(record.get("id") or f"record-{index}")
            name = str(record.get("name") or record.get("whatFor") or "")
            logger.warning(f"Invalid recurring item {item_id}: {e}")
            errors.append(ItemError(item_id=item_id, item_name=name, message=str(e)))

    return items, errors
