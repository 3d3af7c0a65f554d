"""Persistence contract for presentation records.

The store loads a document's records once and saves the full ordered list
after every mutation. Implementations raise ``PersistenceError`` on failure.
"""

from __future__ import annotations

from typing import Any, Protocol

from loguru import logger

from pulpit.presentations.models import PresentationRecord


class PresentationRepository(Protocol):
    """Load and save the ordered presentation list of one document."""

    def load(self, document_id: str) -> list[PresentationRecord]: ...

    def save(self, document_id: str, records: list[PresentationRecord]) -> None: ...


class InMemoryPresentationRepository:
    """Repository keeping serialized payloads in a dict.

    Records are stored in their payload shape so that loading always returns
    fresh objects, the same way a real storage round-trip would.
    """

    def __init__(self) -> None:
        self._payloads: dict[str, list[dict[str, Any]]] = {}
        self.save_count = 0

    def load(self, document_id: str) -> list[PresentationRecord]:
        return [PresentationRecord.from_payload(p) for p in self._payloads.get(document_id, [])]

    def save(self, document_id: str, records: list[PresentationRecord]) -> None:
        self._payloads[document_id] = [r.to_payload() for r in records]
        self.save_count += 1
        logger.bind(document_id=document_id, count=len(records)).debug("Saved presentations in memory")

    def payloads(self, document_id: str) -> list[dict[str, Any]]:
        return list(self._payloads.get(document_id, []))
