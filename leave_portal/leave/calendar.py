"""Working-day arithmetic shared by request day-counts and earned-leave tenure.

A chargeable day is any Monday-Friday inside an inclusive date range.
Saturdays and Sundays are never charged; there is no holiday calendar.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Union

from leave_portal.common.exceptions import InvalidDateRange

DateLike = Union[date, datetime, str]

# date.weekday(): Monday=0 … Sunday=6
WEEKEND_DAYS = frozenset({5, 6})


def parse_date(value: DateLike, field: str = "dates") -> date:
    """Coerce a date, datetime or ISO-8601 string to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            raise InvalidDateRange(f"'{value}' is not a valid ISO-8601 date.", field=field)
    raise InvalidDateRange(f"Unsupported date value: {value!r}.", field=field)


def _count_weekdays(start: date, end: date) -> int:
    total = 0
    current = start
    while current <= end:
        if current.weekday() not in WEEKEND_DAYS:
            total += 1
        current += timedelta(days=1)
    return total


def chargeable_days(from_date: DateLike, to_date: DateLike) -> int:
    """Number of weekdays in ``[from_date, to_date]``.

    Raises:
        InvalidDateRange: a date is unparseable or ``to_date < from_date``.
    """
    start = parse_date(from_date, "fromDate")
    end = parse_date(to_date, "toDate")
    if end < start:
        raise InvalidDateRange("To date cannot be before from date.", field="toDate")
    return _count_weekdays(start, end)


def working_days_since(date_of_joining: date, today: date) -> int:
    """Weekdays from the joining date through ``today`` inclusive."""
    if date_of_joining > today:
        return 0
    return _count_weekdays(date_of_joining, today)
