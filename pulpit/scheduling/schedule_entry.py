"""Schedule entries and the per-document schedule book.

A schedule entry binds a document to a recurrence rule inside an inclusive
validity window. Entries are immutable; updating one means replacing it by id.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import date, datetime
from enum import StrEnum

from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from pulpit.scheduling.dates import as_date
from pulpit.scheduling.recurrence import Monthly, Once, RecurrenceRule, Weekly, Yearly, parse_recurrence


class ServiceLabel(StrEnum):
    """Service a document is scheduled for."""

    SUNDAY_MORNING = "Sunday Morning"
    SUNDAY_EVENING = "Sunday Evening"
    WEDNESDAY_NIGHT = "Wednesday Night"
    SPECIAL = "Special Service"


class ScheduleEntry(BaseModel):
    """A document attached to a one-off or recurring schedule.

    Attributes:
        id: Unique identifier generated at creation
        document_id: Owning document (referenced, not owned)
        service_label: Service classification, opaque to scheduling
        start_date: First day the entry is active
        end_date: Last day the entry is active (inclusive), or None for open-ended
        recurrence: Rule deciding which days inside the window match
        notes: Free text
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    document_id: str
    service_label: ServiceLabel = Field(validation_alias=AliasChoices("serviceLabel", "serviceType", "service_label"))
    start_date: datetime
    end_date: datetime | None = None
    recurrence: RecurrenceRule = Field(default_factory=Once)
    notes: str | None = None

    @field_validator("recurrence", mode="before")
    @classmethod
    def _decode_recurrence(cls, value: object) -> Once | Weekly | Monthly | Yearly:
        return parse_recurrence(value)

    @model_validator(mode="after")
    def _check_window(self) -> ScheduleEntry:
        if self.end_date is not None and as_date(self.end_date) < as_date(self.start_date):
            raise ValueError(f"end_date {self.end_date.date()} is before start_date {self.start_date.date()}")
        return self

    def is_scheduled_for(self, day: date | datetime) -> bool:
        """Check whether this entry is active on a calendar day.

        Args:
            day: Day to test; time-of-day is ignored

        Returns:
            True if the day lies inside the window and matches the recurrence
        """
        target = as_date(day)
        if target < as_date(self.start_date):
            return False
        if self.end_date is not None and target > as_date(self.end_date):
            return False
        return self.recurrence.matches(target, self.start_date)


class ScheduleBook:
    """Schedule entries attached to one document."""

    def __init__(self, document_id: str, entries: Iterable[ScheduleEntry] = ()):
        self.document_id = document_id
        self._entries: list[ScheduleEntry] = []
        for entry in entries:
            self.add(entry)

    def _check_document(self, entry: ScheduleEntry) -> None:
        if entry.document_id != self.document_id:
            raise ValueError(f"Schedule entry {entry.id} belongs to document {entry.document_id}, not {self.document_id}")

    @property
    def entries(self) -> list[ScheduleEntry]:
        return list(self._entries)

    def add(self, entry: ScheduleEntry) -> ScheduleEntry:
        self._check_document(entry)
        if any(e.id == entry.id for e in self._entries):
            raise ValueError(f"Schedule entry {entry.id} already exists")
        self._entries.append(entry)
        logger.bind(document_id=self.document_id, entry_id=entry.id).debug("Added schedule entry")
        return entry

    def remove(self, entry_id: str) -> bool:
        remaining = [e for e in self._entries if e.id != entry_id]
        removed = len(remaining) != len(self._entries)
        self._entries = remaining
        return removed

    def update(self, entry: ScheduleEntry) -> bool:
        """Replace the entry with the same id. Unknown ids are a no-op."""
        self._check_document(entry)
        for index, existing in enumerate(self._entries):
            if existing.id == entry.id:
                self._entries[index] = entry
                return True
        logger.bind(document_id=self.document_id, entry_id=entry.id).debug("Schedule entry not found, nothing updated")
        return False

    def schedules_for(self, day: date | datetime) -> list[ScheduleEntry]:
        """Entries active on the given calendar day, in insertion order."""
        return [e for e in self._entries if e.is_scheduled_for(day)]
