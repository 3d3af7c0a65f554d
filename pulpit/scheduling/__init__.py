"""Recurrence rules, schedule entries and occurrence expansion."""

from pulpit.scheduling.occurrences import generate_occurrences, next_occurrence
from pulpit.scheduling.recurrence import (
    Monthly,
    Once,
    RecurrenceRule,
    Weekly,
    Yearly,
    parse_recurrence,
)
from pulpit.scheduling.schedule_entry import ScheduleBook, ScheduleEntry, ServiceLabel

__all__ = [
    "Monthly",
    "Once",
    "RecurrenceRule",
    "ScheduleBook",
    "ScheduleEntry",
    "ServiceLabel",
    "Weekly",
    "Yearly",
    "generate_occurrences",
    "next_occurrence",
    "parse_recurrence",
]
