"""Pulpit schedule: recurring schedules and presentation history for documents."""

__version__ = "0.1.0"
