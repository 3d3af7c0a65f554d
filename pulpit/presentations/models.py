"""Presentation records.

A presentation is one real-world delivery of a document, past or planned.
Records carry their status, when they happen, optional recurrence/service
metadata and the links that tie a rescheduled record to its replacement.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from datetime import datetime as datetime_type
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from pulpit.scheduling.occurrences import generate_occurrences
from pulpit.scheduling.recurrence import (
    Monthly,
    Once,
    RecurrenceRule,
    Weekly,
    Yearly,
    parse_recurrence,
    recurrence_to_payload,
)
from pulpit.scheduling.schedule_entry import ServiceLabel


class PresentationStatus(StrEnum):
    """Status of a presentation."""

    PRESENTED = "Presented"
    SCHEDULED = "Scheduled"
    CANCELED = "Canceled"
    RESCHEDULED = "Rescheduled"

    @property
    def is_past(self) -> bool:
        return self in (PresentationStatus.PRESENTED, PresentationStatus.CANCELED)

    @property
    def is_future(self) -> bool:
        return self is PresentationStatus.SCHEDULED

    @property
    def color(self) -> str:
        """Display colour as a hex string."""
        return _STATUS_COLORS[self]


_STATUS_COLORS: dict[PresentationStatus, str] = {
    PresentationStatus.PRESENTED: "#22c27d",
    PresentationStatus.SCHEDULED: "#007AFF",
    PresentationStatus.CANCELED: "#FF3B30",
    PresentationStatus.RESCHEDULED: "#FF9500",
}


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, validate_assignment=True)


class TodoItem(_Payload):
    """Checklist entry attached to a presentation."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    text: str
    completed: bool = False


class PresentationRecord(_Payload):
    """One concrete occurrence of a document being presented.

    Attributes:
        id: Unique identifier
        document_id: Owning document
        status: Lifecycle status
        datetime: When the presentation happens or happened
        location: Where it takes place
        notes: Free text
        todo_items: Ordered checklist
        recurrence: Template for further occurrences (scheduled records only)
        service_label: Service classification
        rescheduled_to: Id of the record that replaced this one
        rescheduled_from: Id of the record this one replaced
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    document_id: str
    status: PresentationStatus
    datetime: datetime_type
    location: str | None = None
    notes: str | None = None
    todo_items: list[TodoItem] | None = None
    recurrence: RecurrenceRule | None = None
    service_label: ServiceLabel | None = Field(
        default=None,
        validation_alias=AliasChoices("serviceLabel", "serviceType", "service_label"),
    )
    rescheduled_to: str | None = None
    rescheduled_from: str | None = None

    @field_validator("recurrence", mode="before")
    @classmethod
    def _decode_recurrence(cls, value: Any) -> Once | Weekly | Monthly | Yearly | None:
        if value is None:
            return None
        return parse_recurrence(value)

    @field_serializer("recurrence")
    def _encode_recurrence(self, rule: Once | Weekly | Monthly | Yearly | None) -> dict[str, Any] | None:
        return None if rule is None else recurrence_to_payload(rule)

    @classmethod
    def presented(
        cls,
        document_id: str,
        when: datetime,
        location: str | None = None,
        notes: str | None = None,
        todo_items: list[TodoItem] | None = None,
    ) -> PresentationRecord:
        """Build a record of a presentation that already happened."""
        return cls(
            document_id=document_id,
            status=PresentationStatus.PRESENTED,
            datetime=when,
            location=location,
            notes=notes,
            todo_items=todo_items,
        )

    @classmethod
    def scheduled(
        cls,
        document_id: str,
        when: datetime,
        location: str | None = None,
        service_label: ServiceLabel | None = None,
        recurrence: Once | Weekly | Monthly | Yearly | None = None,
        notes: str | None = None,
        todo_items: list[TodoItem] | None = None,
    ) -> PresentationRecord:
        """Build a record of a planned presentation."""
        return cls(
            document_id=document_id,
            status=PresentationStatus.SCHEDULED,
            datetime=when,
            location=location,
            service_label=service_label,
            recurrence=recurrence,
            notes=notes,
            todo_items=todo_items,
        )

    def generate_occurrences(self, until: date | datetime) -> list[datetime]:
        """Expand this record's recurrence from its datetime up to ``until``."""
        return generate_occurrences(self.datetime, self.recurrence, until)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase record shape used by storage."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> PresentationRecord:
        return cls.model_validate(payload)
