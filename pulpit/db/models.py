from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class PresentationRow(Base):
    """Stored presentation record.

    One row per presentation. ``position`` keeps the document's collection
    order stable across load/save cycles.
    """

    __tablename__ = "document_presentations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    document_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[str] = mapped_column(String, nullable=False)  # Presented, Scheduled, Canceled, Rescheduled
    occurs_at: Mapped[datetime] = mapped_column("datetime", DateTime, nullable=False)
    location: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    todo_items: Mapped[list | None] = mapped_column(JSON, nullable=True)
    recurrence: Mapped[dict | None] = mapped_column(JSON, nullable=True)  # {"kind": ...}
    service_label: Mapped[str | None] = mapped_column(String, nullable=True)

    rescheduled_to: Mapped[str | None] = mapped_column(String, nullable=True)
    rescheduled_from: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index("idx_document_presentations_document_position", "document_id", "position"),
    )
