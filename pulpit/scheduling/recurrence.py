"""Recurrence rules.

A recurrence rule is a closed tagged union keyed by ``kind``:

- ``Once``: no repetition
- ``Weekly``: on a set of weekdays (1 = Sunday ... 7 = Saturday)
- ``Monthly``: on a fixed day of the month
- ``Yearly``: on a fixed month and day

Rules are immutable pydantic models, so equality and hashing are structural.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_serializer
from pydantic.alias_generators import to_camel

from pulpit.scheduling.dates import SATURDAY, SUNDAY, as_date, weekday_number

WeekdayNumber = Annotated[int, Field(ge=SUNDAY, le=SATURDAY)]


class _Rule(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    @property
    def is_recurring(self) -> bool:
        return True


class Once(_Rule):
    """Single occurrence on the anchor day."""

    kind: Literal["once"] = "once"

    @property
    def is_recurring(self) -> bool:
        return False

    def matches(self, day: date | datetime, anchor: date | datetime) -> bool:
        """Compare calendar days only, ignoring time-of-day."""
        return as_date(day) == as_date(anchor)


class Weekly(_Rule):
    """Repeat on every listed weekday."""

    kind: Literal["weekly"] = "weekly"
    days_of_week: frozenset[WeekdayNumber] = Field(..., min_length=1, description="Weekday numbers, 1 = Sunday")

    @field_serializer("days_of_week")
    def _serialize_days(self, days: frozenset[int]) -> list[int]:
        return sorted(days)

    def matches(self, day: date | datetime, anchor: date | datetime | None = None) -> bool:
        return weekday_number(day) in self.days_of_week


class Monthly(_Rule):
    """Repeat on the same day of every month."""

    kind: Literal["monthly"] = "monthly"
    day_of_month: int = Field(..., ge=1, le=31)

    def matches(self, day: date | datetime, anchor: date | datetime | None = None) -> bool:
        # No clamping here: a 31st rule never matches a 30-day month
        return as_date(day).day == self.day_of_month


class Yearly(_Rule):
    """Repeat on the same month and day every year."""

    kind: Literal["yearly"] = "yearly"
    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)

    def matches(self, day: date | datetime, anchor: date | datetime | None = None) -> bool:
        value = as_date(day)
        return value.month == self.month and value.day == self.day


RecurrenceRule = Annotated[Once | Weekly | Monthly | Yearly, Field(discriminator="kind")]

_RULE_ADAPTER: TypeAdapter[Once | Weekly | Monthly | Yearly] = TypeAdapter(RecurrenceRule)
_KINDS = ("once", "weekly", "monthly", "yearly")


def _unwrap_keyed_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Convert the older ``{"weekly": {"daysOfWeek": [1]}}`` shape to the tagged shape."""
    if "kind" in payload or len(payload) != 1:
        return payload
    key, body = next(iter(payload.items()))
    if key not in _KINDS:
        return payload
    fields = body if isinstance(body, dict) else {}
    return {"kind": key, **fields}


def parse_recurrence(payload: Any) -> Once | Weekly | Monthly | Yearly:
    """Decode a recurrence payload, degrading to ``Once`` when it is unusable.

    Args:
        payload: A rule instance, a tagged dict, the older keyed dict, or None

    Returns:
        The decoded rule. Missing or malformed payloads yield ``Once()``.
    """
    if isinstance(payload, (Once, Weekly, Monthly, Yearly)):
        return payload
    if payload is None:
        return Once()
    if not isinstance(payload, dict):
        logger.bind(payload=repr(payload)).warning("Recurrence payload is not a mapping, treating as once")
        return Once()

    try:
        return _RULE_ADAPTER.validate_python(_unwrap_keyed_payload(payload))
    except ValidationError as e:
        logger.bind(payload=payload, error_count=e.error_count()).warning("Malformed recurrence payload, treating as once")
        return Once()


def recurrence_to_payload(rule: Once | Weekly | Monthly | Yearly) -> dict[str, Any]:
    """Serialize a rule to its tagged ``{"kind": ...}`` dict."""
    return rule.model_dump(mode="json", by_alias=True)
