"""
Frequency rule evaluation.
Projects the dates a recurring item is expected on, relative to its anchor date.
"""

from datetime import date, datetime, timedelta
from typing import Any, Optional
import calendar
import logging

from ..models.records import (
    FrequencyKind,
    FrequencyRule,
    Occurrence,
    RecurringItemConfig,
)
from ..utils.exceptions import InvalidConfiguration

logger = logging.getLogger(__name__)

DEFAULT_SEMIMONTHLY_OFFSET = 15


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def clamp_to_month(year: int, month: int, day: int) -> date:
    """The given day of the month, or the month's last day when it is shorter."""
    return date(year, month, min(day, days_in_month(year, month)))


def add_months(day: date, months: int, day_of_month: Optional[int] = None) -> date:
    """
    Shift a date by whole months, clamping to the target month's length.

    Args:
        day: Starting date
        months: Number of months to add (may be negative)
        day_of_month: Day to land on instead of ``day.day``

    Returns:
        Date in the target month
    """
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    return clamp_to_month(year, month + 1, day_of_month or day.day)


def last_working_day_of_month(year: int, month: int) -> date:
    """Last Monday-Friday of the given month."""
    last = date(year, month, days_in_month(year, month))
    weekday = last.weekday()
    if weekday == calendar.SATURDAY:
        return last - timedelta(days=1)
    if weekday == calendar.SUNDAY:
        return last - timedelta(days=2)
    return last


def semimonthly_pair(
    anchor_date: date,
    rule: FrequencyRule,
    offset_days: int = DEFAULT_SEMIMONTHLY_OFFSET,
) -> tuple[int, int]:
    """
    The two days of the month a semimonthly item falls on.

    An explicit ``rule.semimonthly_days`` wins. Otherwise the pair is derived
    from the anchor: an anchor on or before ``offset_days`` pairs with the day
    ``offset_days`` later, a later anchor with the day ``offset_days`` earlier.
    """
    if rule.semimonthly_days:
        first, second = rule.semimonthly_days
        return first, second

    anchor_day = anchor_date.day
    if anchor_day <= offset_days:
        return anchor_day, anchor_day + offset_days
    return anchor_day - offset_days, anchor_day


def _check_anchor_on_schedule(anchor: date, rule: FrequencyRule, offset_days: int) -> None:
    """Raise unless the anchor is itself one of the rule's dates."""
    if rule.kind is FrequencyKind.MONTHLY_LAST_WORKING_DAY:
        expected = last_working_day_of_month(anchor.year, anchor.month)
        if anchor != expected:
            raise InvalidConfiguration(
                f"anchor {anchor.isoformat()} is not the last working day of its month "
                f"({expected.isoformat()})"
            )
    elif rule.kind is FrequencyKind.SEMIMONTHLY and rule.semimonthly_days:
        days = {
            clamp_to_month(anchor.year, anchor.month, d)
            for d in semimonthly_pair(anchor, rule, offset_days)
        }
        if anchor not in days:
            raise InvalidConfiguration(
                f"anchor {anchor.isoformat()} is not on semimonthly days {rule.semimonthly_days}"
            )


def _as_date(value: Any, label: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidConfiguration(f"{label} must be a date, got {value!r}")


def _months_between(range_start: date, range_end: date):
    """Yield (year, month) for every calendar month touching the range."""
    year, month = range_start.year, range_start.month
    while (year, month) <= (range_end.year, range_end.month):
        yield year, month
        month += 1
        if month > 12:
            year, month = year + 1, 1


def _interval_dates(anchor: date, step: int, range_start: date, range_end: date) -> list[date]:
    # First step at or after range_start, reached from the anchor in either direction
    offset = (range_start - anchor).days
    steps = -(-offset // step)
    current = anchor + timedelta(days=steps * step)

    dates: list[date] = []
    while current <= range_end:
        dates.append(current)
        current += timedelta(days=step)
    return dates


def _calendar_dates(
    anchor: date,
    rule: FrequencyRule,
    range_start: date,
    range_end: date,
    semimonthly_offset_days: int,
) -> list[date]:
    candidates: list[date] = []

    if rule.kind is FrequencyKind.YEARLY:
        for year in range(range_start.year, range_end.year + 1):
            candidates.append(clamp_to_month(year, anchor.month, anchor.day))
        return candidates

    pair = None
    if rule.kind is FrequencyKind.SEMIMONTHLY:
        pair = semimonthly_pair(anchor, rule, semimonthly_offset_days)

    for year, month in _months_between(range_start, range_end):
        if rule.kind is FrequencyKind.MONTHLY:
            candidates.append(clamp_to_month(year, month, anchor.day))
        elif rule.kind is FrequencyKind.MONTHLY_LAST_WORKING_DAY:
            candidates.append(last_working_day_of_month(year, month))
        elif pair is not None:
            candidates.extend(clamp_to_month(year, month, day) for day in pair)

    return candidates


def project_occurrences(
    anchor_date: date,
    frequency: Any,
    range_start: date,
    range_end: date,
    semimonthly_offset_days: int = DEFAULT_SEMIMONTHLY_OFFSET,
) -> list[date]:
    """
    Project the dates a recurring item falls on within a range.

    The anchor does not need to lie inside the range; every in-range date
    reachable by stepping from it in either direction is returned.

    Args:
        anchor_date: A date the item is known to have occurred on
        frequency: FrequencyRule, or any value FrequencyRule.parse accepts
        range_start: First date of the range (inclusive)
        range_end: Last date of the range (inclusive)
        semimonthly_offset_days: Gap between the two days of a derived semimonthly pair

    Returns:
        Ascending list of unique dates within [range_start, range_end]

    Raises:
        InvalidConfiguration: If the frequency or anchor is unusable, or the anchor
            is not itself one of the rule's dates
    """
    rule = FrequencyRule.parse(frequency)
    anchor = _as_date(anchor_date, "anchor date")
    range_start = _as_date(range_start, "range start")
    range_end = _as_date(range_end, "range end")
    _check_anchor_on_schedule(anchor, rule, semimonthly_offset_days)

    if range_start > range_end:
        return []

    step = rule.step_days
    if step is not None:
        candidates = _interval_dates(anchor, step, range_start, range_end)
    else:
        candidates = _calendar_dates(anchor, rule, range_start, range_end, semimonthly_offset_days)

    dates = sorted({d for d in candidates if range_start <= d <= range_end})
    logger.debug(
        f"Projected {len(dates)} {rule.describe()} occurrence(s) from anchor "
        f"{anchor.isoformat()} in {range_start.isoformat()}..{range_end.isoformat()}"
    )
    return dates


def next_occurrence(
    anchor_date: date,
    frequency: Any,
    from_date: date,
    semimonthly_offset_days: int = DEFAULT_SEMIMONTHLY_OFFSET,
) -> date:
    """
    First occurrence on or after ``from_date``.

    Raises:
        InvalidConfiguration: If the frequency or anchor is unusable
    """
    rule = FrequencyRule.parse(frequency)
    anchor = _as_date(anchor_date, "anchor date")
    from_date = _as_date(from_date, "from date")

    step = rule.step_days
    if step is not None:
        return _interval_dates(anchor, step, from_date, from_date + timedelta(days=step))[0]

    # Every calendar kind repeats at least once a year
    horizon = add_months(from_date, 13)
    return project_occurrences(anchor, rule, from_date, horizon, semimonthly_offset_days)[0]


def add_cycle(
    day: date,
    frequency: Any,
    semimonthly_offset_days: int = DEFAULT_SEMIMONTHLY_OFFSET,
) -> date:
    """
    The occurrence one cycle after ``day``, treating ``day`` as the anchor.

    Used to decide whether the latest payment of a bill covers the current cycle.
    """
    return next_occurrence(day, frequency, day + timedelta(days=1), semimonthly_offset_days)


def project_item(
    item: RecurringItemConfig,
    range_start: date,
    range_end: date,
    semimonthly_offset_days: int = DEFAULT_SEMIMONTHLY_OFFSET,
) -> list[Occurrence]:
    """
    Project a configured item into Occurrence records.

    Raises:
        InvalidConfiguration: Tagged with the item id if its rule is unusable
    """
    try:
        dates = project_occurrences(
            item.anchor_date,
            item.frequency,
            range_start,
            range_end,
            semimonthly_offset_days,
        )
    except InvalidConfiguration as e:
        raise InvalidConfiguration(f"{item.name}: {e}", item_id=item.id) from e

    return [
        Occurrence(item_id=item.id, item_name=item.name, amount=item.amount, date=d)
        for d in dates
    ]
