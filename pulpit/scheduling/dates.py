"""Calendar-day helpers.

All values are naive local datetimes; comparisons happen at calendar-day
granularity wherever a helper takes a plain ``date``.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

SUNDAY = 1
SATURDAY = 7


def as_date(value: date | datetime) -> date:
    """Return the calendar day of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def start_of_day(value: date | datetime) -> datetime:
    """Midnight at the start of the value's calendar day."""
    return datetime.combine(as_date(value), time.min)


def end_of_day(value: date | datetime) -> datetime:
    """Last representable instant of the value's calendar day."""
    return start_of_day(value) + timedelta(days=1) - timedelta(microseconds=1)


def weekday_number(value: date | datetime) -> int:
    """Weekday number with 1 = Sunday, 2 = Monday ... 7 = Saturday."""
    return as_date(value).isoweekday() % 7 + 1
