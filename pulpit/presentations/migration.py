"""One-time upgrade of legacy scheduling data into presentation records.

Documents created before presentation records existed carry either a single
"date presented" value (with an optional location) or a list of schedule
entries. The first time such a document is opened with no stored records,
both sources are converted into presentation records and written back.
The legacy data is never read again after that.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from loguru import logger
from pydantic import ValidationError

from pulpit.presentations.models import PresentationRecord
from pulpit.scheduling.schedule_entry import ScheduleEntry


@dataclass(frozen=True)
class LegacyDocument:
    """Legacy scheduling data attached to a document.

    Attributes:
        document_id: Document the data belongs to
        date_presented: Presentation date stored on the document's first variation
        location: Location stored alongside ``date_presented``
        schedules: Schedule entries, as models or raw payload dicts
    """

    document_id: str
    date_presented: datetime | None = None
    location: str | None = None
    schedules: list[ScheduleEntry | dict[str, Any]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.date_presented is None and not self.schedules


def _coerce_entry(document_id: str, raw: ScheduleEntry | dict[str, Any]) -> ScheduleEntry | None:
    if isinstance(raw, ScheduleEntry):
        return raw
    try:
        return ScheduleEntry.model_validate({"documentId": document_id, **raw})
    except ValidationError as e:
        logger.bind(document_id=document_id, error_count=e.error_count()).warning("Skipping unreadable legacy schedule entry")
        return None


def upgrade_legacy_records(legacy: LegacyDocument) -> list[PresentationRecord]:
    """Convert legacy scheduling data into presentation records.

    Args:
        legacy: Legacy data of one document

    Returns:
        Records sorted by datetime: a Presented record for ``date_presented``
        and one Scheduled record per readable schedule entry
    """
    records: list[PresentationRecord] = []

    if legacy.date_presented is not None:
        records.append(
            PresentationRecord.presented(
                document_id=legacy.document_id,
                when=legacy.date_presented,
                location=legacy.location,
            )
        )

    for raw in legacy.schedules:
        entry = _coerce_entry(legacy.document_id, raw)
        if entry is None:
            continue
        records.append(
            PresentationRecord.scheduled(
                document_id=legacy.document_id,
                when=entry.start_date,
                service_label=entry.service_label,
                recurrence=entry.recurrence,
                notes=entry.notes,
            )
        )

    records.sort(key=lambda r: r.datetime)
    logger.bind(document_id=legacy.document_id, count=len(records)).info("Upgraded legacy scheduling data")
    return records
