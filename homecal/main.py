"""FastAPI application — entry point for the household calendar service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException

from homecal.config import settings
from homecal.domain.models import (
    CalendarEvent,
    ConflictPair,
    EventCreateRequest,
    EventTemplate,
    ExdateRequest,
    OffsetResponse,
    Occurrence,
    RuleRequest,
    RuleResponse,
    TemplateCategory,
    TemplateEventData,
    as_utc,
)
from homecal.repos.memory import EventRepository
from homecal.services import templates
from homecal.services.conflicts import find_conflicts
from homecal.services.recurrence import expand_all
from homecal.services.rrule import (
    RRULE_PRESETS,
    RecurrenceRuleError,
    create_rule,
    describe_rule,
    format_rule,
    parse_rule,
)
from homecal.services.timezones import is_dst, known_timezones, offset_minutes

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_title)

# ── Singletons (created at import time for simplicity) ────────────────
event_repo = EventRepository()


def _window(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    start, end = as_utc(start), as_utc(end)
    if end <= start:
        raise HTTPException(status_code=400, detail="end must be after start")
    return start, end


def _rule_from_request(rule: RuleRequest) -> str:
    return create_rule(rule.frequency, rule.interval, rule.by_day, rule.count, rule.until)


# ── Events ────────────────────────────────────────────────────────────


@app.post("/events", response_model=CalendarEvent, status_code=201)
def create_event(body: EventCreateRequest) -> CalendarEvent:
    """Store a new event; the rule is normalised through the rule grammar."""
    rrule: str | None = None
    if body.recurrence is not None:
        rrule = _rule_from_request(body.recurrence)
    elif body.rrule:
        try:
            rrule = format_rule(parse_rule(body.rrule))
        except RecurrenceRuleError as exc:
            raise HTTPException(status_code=422, detail=f"Invalid rrule: {exc}") from exc

    try:
        event = CalendarEvent(
            title=body.title,
            description=body.description,
            start_at=body.start_at,
            end_at=body.end_at,
            timezone=body.timezone or settings.default_timezone,
            is_all_day=body.is_all_day,
            location=body.location,
            rrule=rrule,
            exdates=body.exdates,
            rdates=body.rdates,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    event_repo.add(event)
    logger.info("Created event %s (%s) rrule=%r", event.id, event.title, event.rrule)
    return event


@app.get("/events", response_model=list[CalendarEvent])
def list_events() -> list[CalendarEvent]:
    """Return all stored events."""
    return event_repo.list_all()


@app.get("/events/{event_id}", response_model=CalendarEvent)
def get_event(event_id: str) -> CalendarEvent:
    """Return a single event by id."""
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@app.delete("/events/{event_id}", status_code=200)
def delete_event(event_id: str) -> dict:
    if not event_repo.delete(event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    logger.info("Deleted event %s", event_id)
    return {"status": "deleted"}


@app.post("/events/{event_id}/exdates", response_model=CalendarEvent)
def add_exdate(event_id: str, body: ExdateRequest) -> CalendarEvent:
    """Exclude one instance of a recurring event."""
    event = event_repo.add_exdate(event_id, body.at)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


# ── Calendar view ─────────────────────────────────────────────────────


@app.get("/occurrences", response_model=list[Occurrence])
def list_occurrences(start: datetime, end: datetime) -> list[Occurrence]:
    """Expand every stored event into the occurrences starting in [start, end]."""
    start, end = _window(start, end)
    return expand_all(event_repo.list_all(), start, end)


@app.get("/conflicts", response_model=list[ConflictPair])
def list_conflicts(start: datetime, end: datetime) -> list[ConflictPair]:
    """Return overlapping and adjacent occurrence pairs in [start, end]."""
    start, end = _window(start, end)
    return find_conflicts(expand_all(event_repo.list_all(), start, end))


# ── Recurrence rules ──────────────────────────────────────────────────


@app.post("/rrule", response_model=RuleResponse)
def build_rule(body: RuleRequest) -> RuleResponse:
    rule = _rule_from_request(body)
    return RuleResponse(rule=rule, description=describe_rule(rule))


@app.get("/rrule/describe", response_model=RuleResponse)
def describe(rule: str) -> RuleResponse:
    return RuleResponse(rule=rule, description=describe_rule(rule))


@app.get("/rrule/presets")
def list_presets() -> dict[str, str]:
    return dict(RRULE_PRESETS)


# ── Templates ─────────────────────────────────────────────────────────


@app.get("/templates", response_model=list[EventTemplate])
def list_templates(category: TemplateCategory | None = None) -> list[EventTemplate]:
    if category is None:
        return list(templates.EVENT_TEMPLATES)
    return templates.by_category(category)


@app.get("/templates/categories", response_model=list[TemplateCategory])
def list_categories() -> list[TemplateCategory]:
    return templates.categories()


@app.get("/templates/suggestions", response_model=list[EventTemplate])
def suggest_templates(at: datetime | None = None) -> list[EventTemplate]:
    """Suggest templates for a moment in time (defaults to now, UTC)."""
    return templates.suggest(at or datetime.now(timezone.utc))


@app.get("/templates/{template_id}", response_model=EventTemplate)
def get_template(template_id: str) -> EventTemplate:
    template = templates.by_id(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


@app.get("/templates/{template_id}/draft", response_model=TemplateEventData)
def template_draft(template_id: str, start: datetime) -> TemplateEventData:
    """Return event fields pre-filled from a template."""
    template = templates.by_id(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return templates.template_to_event(template, start)


# ── Timezones ─────────────────────────────────────────────────────────


@app.get("/timezones", response_model=list[str])
def list_timezones() -> list[str]:
    return known_timezones()


@app.get("/timezones/offset", response_model=OffsetResponse)
def timezone_offset(zone: str, at: datetime | None = None) -> OffsetResponse:
    """Resolve the offset of a zone; unknown zones resolve to UTC."""
    moment = at or datetime.now(timezone.utc)
    return OffsetResponse(
        zone=zone,
        at=moment,
        offset_minutes=offset_minutes(zone, moment),
        is_dst=is_dst(zone, moment),
    )
