"""In-memory repository for calendar events."""

from __future__ import annotations

from datetime import datetime

from homecal.domain.models import CalendarEvent, as_utc


class EventRepository:
    """Dict-backed store for CalendarEvent instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, CalendarEvent] = {}

    def add(self, event: CalendarEvent) -> None:
        self._store[event.id] = event

    def get(self, event_id: str) -> CalendarEvent | None:
        return self._store.get(event_id)

    def list_all(self) -> list[CalendarEvent]:
        return list(self._store.values())

    def delete(self, event_id: str) -> bool:
        return self._store.pop(event_id, None) is not None

    def add_exdate(self, event_id: str, at: datetime) -> CalendarEvent | None:
        """Append an exception instant to a stored event, ignoring duplicates."""
        event = self._store.get(event_id)
        if event is None:
            return None
        at = as_utc(at)
        if at not in event.exdates:
            event.exdates.append(at)
        return event
