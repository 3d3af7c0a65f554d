"""Root conftest for all tests.

Shared fixtures for stores, repositories and SQLite-backed persistence.
"""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pulpit.db.models import Base
from pulpit.presentations.repository import InMemoryPresentationRepository
from pulpit.presentations.store import PresentationStore

DOCUMENT_ID = "doc-1"


@pytest.fixture
def repository() -> InMemoryPresentationRepository:
    return InMemoryPresentationRepository()


@pytest.fixture
def store(repository: InMemoryPresentationRepository) -> PresentationStore:
    return PresentationStore(DOCUMENT_ID, repository)


@pytest.fixture
def sqlite_session_factory():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def sunday_morning() -> datetime:
    """2024-01-07 is a Sunday."""
    return datetime(2024, 1, 7, 10, 30)
