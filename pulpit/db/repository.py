"""SQLAlchemy-backed presentation repository."""

from __future__ import annotations

from typing import Any

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from pulpit.db.models import PresentationRow
from pulpit.db.session import get_session_factory
from pulpit.presentations.errors import PersistenceError
from pulpit.presentations.models import PresentationRecord
from pulpit.scheduling.recurrence import recurrence_to_payload


def _row_to_payload(row: PresentationRow) -> dict[str, Any]:
    return {
        "id": row.id,
        "documentId": row.document_id,
        "status": row.status,
        "datetime": row.occurs_at,
        "location": row.location,
        "notes": row.notes,
        "todoItems": row.todo_items,
        "recurrence": row.recurrence,
        "serviceLabel": row.service_label,
        "rescheduledTo": row.rescheduled_to,
        "rescheduledFrom": row.rescheduled_from,
    }


def _record_to_row(record: PresentationRecord, position: int) -> PresentationRow:
    payload = record.to_payload()
    return PresentationRow(
        id=record.id,
        document_id=record.document_id,
        position=position,
        status=record.status.value,
        occurs_at=record.datetime,
        location=record.location,
        notes=record.notes,
        todo_items=payload["todoItems"],
        recurrence=recurrence_to_payload(record.recurrence) if record.recurrence is not None else None,
        service_label=record.service_label.value if record.service_label else None,
        rescheduled_to=record.rescheduled_to,
        rescheduled_from=record.rescheduled_from,
    )


class SqlPresentationRepository:
    """Stores each document's presentations as ordered rows.

    ``save`` replaces all rows of the document inside one transaction, so a
    failed save leaves the previously stored list untouched.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory or get_session_factory()

    def load(self, document_id: str) -> list[PresentationRecord]:
        try:
            with self._session_factory() as session:
                rows = session.execute(
                    select(PresentationRow)
                    .where(PresentationRow.document_id == document_id)
                    .order_by(PresentationRow.position)
                ).scalars().all()
                payloads = [_row_to_payload(row) for row in rows]
        except SQLAlchemyError as e:
            logger.bind(document_id=document_id).error(f"Failed to load presentations: {e}")
            raise PersistenceError(document_id, f"Failed to load presentations: {e}") from e

        return [PresentationRecord.from_payload(p) for p in payloads]

    def save(self, document_id: str, records: list[PresentationRecord]) -> None:
        try:
            with self._session_factory.begin() as session:
                session.execute(delete(PresentationRow).where(PresentationRow.document_id == document_id))
                session.add_all([_record_to_row(record, position) for position, record in enumerate(records)])
        except SQLAlchemyError as e:
            logger.bind(document_id=document_id).error(f"Failed to save presentations: {e}")
            raise PersistenceError(document_id, f"Failed to save presentations: {e}") from e

        logger.bind(document_id=document_id, count=len(records)).debug("Saved presentations")
