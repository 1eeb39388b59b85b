"""Domain models for the household calendar engine."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Frequency(StrEnum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class ConflictType(StrEnum):
    OVERLAP = "overlap"
    ADJACENT = "adjacent"


class ExpansionKind(StrEnum):
    PARSED = "parsed"
    FALLBACK = "fallback"


class TemplateCategory(StrEnum):
    FAMILY = "family"
    WORK = "work"
    HEALTH = "health"
    SOCIAL = "social"
    MAINTENANCE = "maintenance"
    SHOPPING = "shopping"
    MEAL = "meal"
    CHORE = "chore"


def _new_id() -> str:
    return str(uuid.uuid4())


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalise aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Events and occurrences
# ---------------------------------------------------------------------------


class CalendarEvent(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    description: str | None = None
    start_at: datetime
    end_at: datetime
    timezone: str = "UTC"
    is_all_day: bool = False
    rrule: str | None = None
    exdates: list[datetime] = Field(default_factory=list)
    rdates: list[datetime] = Field(default_factory=list)
    location: str | None = None

    @field_validator("start_at", "end_at")
    @classmethod
    def _utc_instant(cls, value: datetime) -> datetime:
        return as_utc(value)

    @field_validator("exdates", "rdates")
    @classmethod
    def _utc_instants(cls, values: list[datetime]) -> list[datetime]:
        return [as_utc(v) for v in values]

    @model_validator(mode="after")
    def _end_after_start(self) -> CalendarEvent:
        if self.end_at <= self.start_at:
            raise ValueError("end_at must be after start_at")
        return self


class Occurrence(BaseModel):
    """One concrete instance of a CalendarEvent inside a query window."""

    id: str
    event_id: str
    title: str
    description: str = ""
    start_at: datetime
    end_at: datetime
    is_all_day: bool = False
    timezone: str = "UTC"
    location: str = ""
    is_exception: bool = False


class Expansion(BaseModel):
    """Result of expanding one event: rule enumeration or the degraded path."""

    kind: ExpansionKind
    occurrences: list[Occurrence] = Field(default_factory=list)
    error: str | None = None


class ConflictPair(BaseModel):
    first: Occurrence
    second: Occurrence
    conflict_type: ConflictType


# ---------------------------------------------------------------------------
# Recurrence rules
# ---------------------------------------------------------------------------


class RecurrenceRule(BaseModel):
    """Structured form of an RRULE string.

    ``by_day`` keeps the raw BYDAY tokens (``MO``, ``1SA``, ``-1FR``) and
    ``extras`` keeps any other parts verbatim so stored rules survive a
    parse/format round trip.
    """

    freq: Frequency
    interval: int = 1
    by_day: list[str] = Field(default_factory=list)
    count: int | None = None
    until: datetime | None = None
    extras: list[tuple[str, str]] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class TemplateReminder(BaseModel):
    model_config = ConfigDict(frozen=True)

    minutes_before: int
    method: str = "push"


class EventTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: TemplateCategory
    duration: int  # minutes
    rrule: str | None = None
    location: str | None = None
    reminders: tuple[TemplateReminder, ...] = ()
    color: str | None = None
    is_all_day: bool = False


class TemplateEventData(BaseModel):
    """Pre-filled event fields produced from a template."""

    title: str
    description: str
    start_time: datetime
    end_time: datetime
    event_type: TemplateCategory
    priority: str = "medium"
    location: str | None = None
    rrule: str | None = None
    is_all_day: bool = False


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class RuleRequest(BaseModel):
    frequency: Frequency
    interval: int = 1
    by_day: list[str] | None = None
    count: int | None = None
    until: datetime | None = None


class RuleResponse(BaseModel):
    rule: str
    description: str


class EventCreateRequest(BaseModel):
    title: str
    description: str | None = None
    start_at: datetime
    end_at: datetime
    timezone: str | None = None
    is_all_day: bool = False
    location: str | None = None
    rrule: str | None = None
    recurrence: RuleRequest | None = None
    exdates: list[datetime] = Field(default_factory=list)
    rdates: list[datetime] = Field(default_factory=list)

    @model_validator(mode="after")
    def _single_rule_source(self) -> EventCreateRequest:
        if self.rrule and self.recurrence:
            raise ValueError("give either rrule or recurrence, not both")
        return self


class ExdateRequest(BaseModel):
    at: datetime


class OffsetResponse(BaseModel):
    zone: str
    at: datetime
    offset_minutes: int
    is_dst: bool
