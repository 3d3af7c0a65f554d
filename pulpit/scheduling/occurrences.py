"""Occurrence expansion for recurrence rules.

Expands an anchor datetime and a rule into a finite, strictly increasing list
of datetimes. Each call materializes a full list; there is no cursor state
between calls.

Generation clamps where matching does not: a ``Monthly(31)`` rule steps from
January 31 to February 28/29, which ``Monthly.matches`` would reject. The two
operations deliberately differ here.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from pulpit.scheduling.dates import end_of_day
from pulpit.scheduling.recurrence import Monthly, Once, Weekly, Yearly

# A non-empty weekday set always matches within one week
_MAX_WEEKLY_STEPS = 7


def next_occurrence(current: datetime, recurrence: Once | Weekly | Monthly | Yearly) -> datetime | None:
    """Compute the occurrence that follows ``current``.

    Args:
        current: The current occurrence
        recurrence: Rule governing the repetition

    Returns:
        The next occurrence, preserving the time-of-day of ``current``,
        or None for ``Once``.
    """
    if isinstance(recurrence, Weekly):
        candidate = current
        for _ in range(_MAX_WEEKLY_STEPS):
            candidate += timedelta(days=1)
            if recurrence.matches(candidate):
                return candidate
        raise ValueError(f"Weekly rule has no usable weekdays: {sorted(recurrence.days_of_week)}")

    # relativedelta clamps an absolute day to the length of the target month
    if isinstance(recurrence, Monthly):
        return current + relativedelta(months=1, day=recurrence.day_of_month)

    if isinstance(recurrence, Yearly):
        return current + relativedelta(years=1, month=recurrence.month, day=recurrence.day)

    return None


def _upper_bound(until: date | datetime) -> datetime:
    if isinstance(until, datetime):
        return until
    return end_of_day(until)


def generate_occurrences(
    anchor: datetime,
    recurrence: Once | Weekly | Monthly | Yearly | None,
    until: date | datetime,
) -> list[datetime]:
    """Expand a rule into concrete occurrences up to ``until``.

    Args:
        anchor: First occurrence
        recurrence: Rule to expand; None or ``Once`` yields the anchor only
        until: Inclusive bound. A plain date covers that whole calendar day.

    Returns:
        Occurrences in strictly increasing order
    """
    if recurrence is None or not recurrence.is_recurring:
        return [anchor]

    bound = _upper_bound(until)
    occurrences: list[datetime] = []
    current: datetime | None = anchor
    while current is not None and current <= bound:
        occurrences.append(current)
        current = next_occurrence(current, recurrence)

    return occurrences
