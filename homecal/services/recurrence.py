"""Service for expanding calendar events into concrete occurrences.

An event with an RRULE is enumerated with ``dateutil`` inside a query
window, with exception dates removed and added dates merged in. A rule
that cannot be parsed or enumerated degrades the event to a one-shot
occurrence instead of failing the whole calendar view.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from dateutil.rrule import rruleset, rrulestr

from homecal.domain.models import (
    CalendarEvent,
    Expansion,
    ExpansionKind,
    Occurrence,
    as_utc,
)
from homecal.services.rrule import format_rule, parse_rule

logger = logging.getLogger(__name__)


def expand_event(
    event: CalendarEvent,
    window_start: datetime,
    window_end: datetime,
) -> Expansion:
    """Expand *event* into the occurrences starting inside the closed window.

    Returns an ``Expansion`` whose ``kind`` is ``parsed`` when the rule was
    enumerated (or there was no rule) and ``fallback`` when the rule was
    rejected and only the event's own instant was considered.
    """
    window_start = as_utc(window_start)
    window_end = as_utc(window_end)

    if not event.rrule:
        occurrences = []
        if _in_window(event.start_at, window_start, window_end):
            occurrences.append(_occurrence(event, event.start_at, f"{event.id}-single"))
        return Expansion(kind=ExpansionKind.PARSED, occurrences=occurrences)

    try:
        starts = _build_ruleset(event).between(window_start, window_end, inc=True)
    except (ValueError, TypeError, OverflowError) as exc:
        logger.warning(
            "Falling back to single occurrence for event %s (rrule=%r): %s",
            event.id,
            event.rrule,
            exc,
        )
        return fallback_expansion(event, window_start, window_end, error=str(exc))

    return Expansion(
        kind=ExpansionKind.PARSED,
        occurrences=[
            _occurrence(event, start, f"{event.id}-{index}")
            for index, start in enumerate(starts)
        ],
    )


def fallback_expansion(
    event: CalendarEvent,
    window_start: datetime,
    window_end: datetime,
    error: str | None = None,
) -> Expansion:
    """Treat *event* as a one-shot: its own instant if in the window, else nothing."""
    occurrences = []
    if _in_window(event.start_at, as_utc(window_start), as_utc(window_end)):
        occurrences.append(_occurrence(event, event.start_at, f"{event.id}-fallback"))
    return Expansion(kind=ExpansionKind.FALLBACK, occurrences=occurrences, error=error)


def expand(
    event: CalendarEvent,
    window_start: datetime,
    window_end: datetime,
) -> list[Occurrence]:
    """Return the occurrences of *event* whose start lies in the window."""
    return expand_event(event, window_start, window_end).occurrences


def expand_all(
    events: Iterable[CalendarEvent],
    window_start: datetime,
    window_end: datetime,
) -> list[Occurrence]:
    """Expand every event and return all occurrences sorted by start time."""
    occurrences: list[Occurrence] = []
    for event in events:
        occurrences.extend(expand(event, window_start, window_end))
    occurrences.sort(key=lambda o: o.start_at)
    return occurrences


def next_occurrence(event: CalendarEvent, after: datetime) -> datetime | None:
    """Return the first start strictly after *after*, or None when there is none.

    A malformed rule degrades the same way ``expand`` does: the event's own
    start is used if it is still ahead.
    """
    after = as_utc(after)
    if event.rrule:
        try:
            return _build_ruleset(event).after(after, inc=False)
        except (ValueError, TypeError, OverflowError) as exc:
            logger.warning(
                "Cannot compute next occurrence for event %s (rrule=%r): %s",
                event.id,
                event.rrule,
                exc,
            )
    return event.start_at if event.start_at > after else None


def _build_ruleset(event: CalendarEvent) -> rruleset:
    # Re-format through the shared grammar so UNTIL is always UTC, matching
    # the timezone-aware dtstart dateutil is given.
    rule_text = format_rule(parse_rule(event.rrule))
    rules = rruleset()
    rules.rrule(rrulestr(rule_text, dtstart=event.start_at))
    for exdate in event.exdates:
        rules.exdate(exdate)
    for rdate in event.rdates:
        rules.rdate(rdate)
    return rules


def _in_window(start: datetime, window_start: datetime, window_end: datetime) -> bool:
    return window_start <= start <= window_end


def _occurrence(event: CalendarEvent, start: datetime, occurrence_id: str) -> Occurrence:
    return Occurrence(
        id=occurrence_id,
        event_id=event.id,
        title=event.title,
        description=event.description or "",
        start_at=start,
        end_at=start + (event.end_at - event.start_at),
        is_all_day=event.is_all_day,
        timezone=event.timezone,
        location=event.location or "",
    )
