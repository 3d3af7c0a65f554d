"""Presentation records and the per-document presentation store."""

from pulpit.presentations.errors import PersistenceError, PresentationError
from pulpit.presentations.migration import LegacyDocument, upgrade_legacy_records
from pulpit.presentations.models import PresentationRecord, PresentationStatus, TodoItem
from pulpit.presentations.repository import InMemoryPresentationRepository, PresentationRepository
from pulpit.presentations.store import PresentationStore

__all__ = [
    "InMemoryPresentationRepository",
    "LegacyDocument",
    "PersistenceError",
    "PresentationError",
    "PresentationRecord",
    "PresentationRepository",
    "PresentationStatus",
    "PresentationStore",
    "TodoItem",
    "upgrade_legacy_records",
]
