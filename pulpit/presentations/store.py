"""Presentation store.

Single entry point for reading and changing the presentations of one
document. The collection is loaded once when the store is created and saved
through the repository after every mutation (write-through). A failed save
raises ``PersistenceError`` and leaves the in-memory change in place.

Operations addressing an unknown id change nothing and report it through
their return value instead of raising.
"""

from __future__ import annotations

from datetime import date, datetime

from loguru import logger

from pulpit.presentations.migration import LegacyDocument, upgrade_legacy_records
from pulpit.presentations.models import PresentationRecord, PresentationStatus, TodoItem
from pulpit.presentations.repository import PresentationRepository
from pulpit.scheduling.dates import end_of_day, start_of_day
from pulpit.scheduling.recurrence import Monthly, Once, Weekly, Yearly
from pulpit.scheduling.schedule_entry import ServiceLabel


def _sorted(records: list[PresentationRecord]) -> list[PresentationRecord]:
    """Copies of the records sorted by datetime."""
    return [r.model_copy(deep=True) for r in sorted(records, key=lambda r: r.datetime)]


class PresentationStore:
    """Presentations of a single document."""

    def __init__(
        self,
        document_id: str,
        repository: PresentationRepository,
        legacy: LegacyDocument | None = None,
    ):
        """Load the document's presentations, upgrading legacy data if needed.

        Args:
            document_id: Document this store is scoped to
            repository: Persistence used for the initial load and every save
            legacy: Legacy scheduling data, converted only when nothing is stored yet

        Raises:
            PersistenceError: If loading, or saving upgraded legacy data, fails
            ValueError: If ``legacy`` belongs to another document
        """
        self.document_id = document_id
        self._repository = repository
        self._log = logger.bind(document_id=document_id)
        self._records: list[PresentationRecord] = list(repository.load(document_id))

        if not self._records and legacy is not None and not legacy.is_empty:
            if legacy.document_id != document_id:
                raise ValueError(f"Legacy data for {legacy.document_id} passed to store for {document_id}")
            self._records = upgrade_legacy_records(legacy)
            self._save()

        self._log.debug(f"Loaded {len(self._records)} presentations")

    def _save(self) -> None:
        self._repository.save(self.document_id, list(self._records))

    def _index_of(self, record_id: str) -> int | None:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return None

    def _check_document(self, record: PresentationRecord) -> None:
        if record.document_id != self.document_id:
            raise ValueError(f"Presentation {record.id} belongs to document {record.document_id}, not {self.document_id}")

    def _find(self, record_id: str) -> PresentationRecord | None:
        index = self._index_of(record_id)
        return None if index is None else self._records[index]

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    @property
    def records(self) -> list[PresentationRecord]:
        """All records sorted by datetime."""
        return _sorted(self._records)

    def get(self, record_id: str) -> PresentationRecord | None:
        record = self._find(record_id)
        return None if record is None else record.model_copy(deep=True)

    def add(self, record: PresentationRecord) -> PresentationRecord:
        """Append a new record.

        Raises:
            ValueError: If the record belongs to another document or its id is already stored
        """
        self._check_document(record)
        if self._index_of(record.id) is not None:
            raise ValueError(f"Presentation {record.id} already exists")
        self._records.append(record.model_copy(deep=True))
        self._log.bind(presentation_id=record.id, status=record.status.value).info("Added presentation")
        self._save()
        return record

    def remove(self, record_id: str) -> bool:
        index = self._index_of(record_id)
        if index is None:
            self._log.bind(presentation_id=record_id).debug("Presentation not found, nothing removed")
            return False
        del self._records[index]
        self._log.bind(presentation_id=record_id).info("Removed presentation")
        self._save()
        return True

    def update(self, record: PresentationRecord) -> bool:
        """Replace the record with the same id. Unknown ids are a no-op.

        Raises:
            ValueError: If the record belongs to another document
        """
        self._check_document(record)
        index = self._index_of(record.id)
        if index is None:
            self._log.bind(presentation_id=record.id).debug("Presentation not found, nothing updated")
            return False
        self._records[index] = record.model_copy(deep=True)
        self._save()
        return True

    def record_presentation(
        self,
        when: datetime,
        location: str | None = None,
        notes: str | None = None,
        todo_items: list[TodoItem] | None = None,
    ) -> PresentationRecord:
        """Record a presentation that already happened."""
        record = PresentationRecord.presented(
            document_id=self.document_id,
            when=when,
            location=location,
            notes=notes,
            todo_items=todo_items,
        )
        return self.add(record)

    def schedule_presentation(
        self,
        when: datetime,
        location: str | None = None,
        service_label: ServiceLabel | None = None,
        recurrence: Once | Weekly | Monthly | Yearly | None = None,
        notes: str | None = None,
        todo_items: list[TodoItem] | None = None,
    ) -> PresentationRecord:
        """Schedule a future presentation."""
        record = PresentationRecord.scheduled(
            document_id=self.document_id,
            when=when,
            location=location,
            service_label=service_label,
            recurrence=recurrence,
            notes=notes,
            todo_items=todo_items,
        )
        return self.add(record)

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def _scheduled_record(self, record_id: str, action: str) -> PresentationRecord | None:
        record = self._find(record_id)
        if record is None:
            self._log.bind(presentation_id=record_id).debug(f"Presentation not found, cannot {action}")
            return None
        if record.status is not PresentationStatus.SCHEDULED:
            self._log.bind(presentation_id=record_id, status=record.status.value).debug(
                f"Only scheduled presentations can {action}"
            )
            return None
        return record

    def cancel_presentation(self, record_id: str) -> bool:
        """Cancel a scheduled presentation.

        Returns:
            True if the record changed; False if it is missing or not scheduled,
            which includes a second cancel of the same record
        """
        record = self._scheduled_record(record_id, "cancel")
        if record is None:
            return False
        record.status = PresentationStatus.CANCELED
        self._log.bind(presentation_id=record_id).info("Canceled presentation")
        self._save()
        return True

    def mark_presented(self, record_id: str) -> bool:
        """Mark a scheduled presentation as delivered."""
        record = self._scheduled_record(record_id, "be marked presented")
        if record is None:
            return False
        record.status = PresentationStatus.PRESENTED
        self._log.bind(presentation_id=record_id).info("Marked presentation as presented")
        self._save()
        return True

    def reschedule_presentation(self, record_id: str, new_datetime: datetime) -> PresentationRecord | None:
        """Move a scheduled presentation to a new datetime.

        The source record is kept with status Rescheduled and linked to a new
        Scheduled record carrying the same location, service, recurrence,
        notes and checklist.

        Args:
            record_id: Id of the scheduled record to move
            new_datetime: When the replacement takes place

        Returns:
            The new record, or None if nothing changed
        """
        source = self._scheduled_record(record_id, "be rescheduled")
        if source is None:
            return None

        replacement = PresentationRecord.scheduled(
            document_id=source.document_id,
            when=new_datetime,
            location=source.location,
            service_label=source.service_label,
            recurrence=source.recurrence,
            notes=source.notes,
            todo_items=[item.model_copy() for item in source.todo_items] if source.todo_items is not None else None,
        )
        replacement.rescheduled_from = source.id
        source.status = PresentationStatus.RESCHEDULED
        source.rescheduled_to = replacement.id

        self._records.append(replacement)
        self._log.bind(presentation_id=record_id, rescheduled_to=replacement.id).info(
            f"Rescheduled presentation to {new_datetime.isoformat()}"
        )
        self._save()
        return replacement.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def presentations_for(self, day: date | datetime) -> list[PresentationRecord]:
        """Records whose datetime falls anywhere on the given calendar day."""
        first, last = start_of_day(day), end_of_day(day)
        return _sorted([r for r in self._records if first <= r.datetime <= last])

    @property
    def past_presentations(self) -> list[PresentationRecord]:
        """Presented and canceled records."""
        return _sorted([r for r in self._records if r.status.is_past])

    @property
    def future_presentations(self) -> list[PresentationRecord]:
        """Scheduled records."""
        return _sorted([r for r in self._records if r.status.is_future])

    def upcoming_presentations(self, now: datetime | None = None) -> list[PresentationRecord]:
        """Scheduled records that have not started yet."""
        reference = now or datetime.now()
        return [r for r in self.future_presentations if r.datetime >= reference]

    def generate_occurrences(self, record_id: str, until: date | datetime) -> list[datetime]:
        """Expand a record's recurrence up to ``until``; empty for unknown ids."""
        record = self.get(record_id)
        if record is None:
            return []
        return record.generate_occurrences(until)
