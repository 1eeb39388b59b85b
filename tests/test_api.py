"""End-to-end tests for the calendar HTTP routes."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from homecal.config import settings
from homecal.main import app, event_repo


@pytest.fixture(autouse=True)
def _clear_repo():
    """Reset the in-memory event store before each test."""
    event_repo._store.clear()
    yield
    event_repo._store.clear()


@pytest.fixture()
def client():
    return TestClient(app)


_WINDOW = {"start": "2024-01-01T00:00:00Z", "end": "2024-01-22T00:00:00Z"}


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _create_standup(client: TestClient, **overrides) -> dict:
    body = {
        "title": "Family standup",
        "start_at": "2024-01-01T09:00:00Z",
        "end_at": "2024-01-01T10:00:00Z",
        "recurrence": {"frequency": "WEEKLY", "by_day": ["MO"]},
    }
    body.update(overrides)
    resp = client.post("/events", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def test_create_event_from_structured_recurrence(client):
    event = _create_standup(client)

    assert event["rrule"] == "FREQ=WEEKLY;BYDAY=MO"
    assert event["timezone"] == settings.default_timezone
    assert client.get(f"/events/{event['id']}").json()["title"] == "Family standup"


def test_create_event_normalises_rrule_text(client):
    event = _create_standup(
        client, recurrence=None, rrule="RRULE:freq=weekly;interval=1;byday=mo"
    )
    assert event["rrule"] == "FREQ=WEEKLY;BYDAY=MO"


def test_create_event_rejects_malformed_rrule(client):
    resp = client.post(
        "/events",
        json={
            "title": "Broken",
            "start_at": "2024-01-01T09:00:00Z",
            "end_at": "2024-01-01T10:00:00Z",
            "rrule": "FREQ=WHENEVER",
        },
    )
    assert resp.status_code == 422
    assert event_repo.list_all() == []


def test_create_event_keeps_non_positive_count_out_of_store(client):
    resp = client.post(
        "/events",
        json={
            "title": "Never",
            "start_at": "2024-01-01T09:00:00Z",
            "end_at": "2024-01-01T10:00:00Z",
            "rrule": "FREQ=DAILY;COUNT=0",
        },
    )
    assert resp.status_code == 422
    assert event_repo.list_all() == []


def test_create_event_rejects_end_before_start(client):
    resp = client.post(
        "/events",
        json={
            "title": "Backwards",
            "start_at": "2024-01-01T10:00:00Z",
            "end_at": "2024-01-01T09:00:00Z",
        },
    )
    assert resp.status_code == 422


def test_create_event_rejects_both_rule_sources(client):
    resp = client.post(
        "/events",
        json={
            "title": "Ambiguous",
            "start_at": "2024-01-01T09:00:00Z",
            "end_at": "2024-01-01T10:00:00Z",
            "rrule": "FREQ=DAILY",
            "recurrence": {"frequency": "DAILY"},
        },
    )
    assert resp.status_code == 422


def test_get_and_delete_missing_event(client):
    assert client.get("/events/nope").status_code == 404
    assert client.delete("/events/nope").status_code == 404


def test_delete_event(client):
    event = _create_standup(client)
    assert client.delete(f"/events/{event['id']}").json() == {"status": "deleted"}
    assert client.get("/events").json() == []


# ---------------------------------------------------------------------------
# Occurrences and conflicts
# ---------------------------------------------------------------------------


def test_occurrences_for_window(client):
    event = _create_standup(client)

    occurrences = client.get("/occurrences", params=_WINDOW).json()

    assert [o["id"] for o in occurrences] == [
        f"{event['id']}-0",
        f"{event['id']}-1",
        f"{event['id']}-2",
    ]
    assert [_parse(o["start_at"]).day for o in occurrences] == [1, 8, 15]


def test_exdate_endpoint_removes_occurrence(client):
    event = _create_standup(client)

    resp = client.post(
        f"/events/{event['id']}/exdates", json={"at": "2024-01-08T09:00:00Z"}
    )
    assert resp.status_code == 200

    occurrences = client.get("/occurrences", params=_WINDOW).json()
    assert [_parse(o["start_at"]).day for o in occurrences] == [1, 15]


def test_exdate_for_missing_event(client):
    resp = client.post("/events/nope/exdates", json={"at": "2024-01-08T09:00:00Z"})
    assert resp.status_code == 404


def test_occurrences_rejects_empty_window(client):
    resp = client.get(
        "/occurrences",
        params={"start": "2024-01-22T00:00:00Z", "end": "2024-01-01T00:00:00Z"},
    )
    assert resp.status_code == 400


def test_conflicts_endpoint(client):
    _create_standup(client)
    dentist = client.post(
        "/events",
        json={
            "title": "Dentist",
            "start_at": "2024-01-08T09:30:00Z",
            "end_at": "2024-01-08T10:30:00Z",
        },
    ).json()
    client.post(
        "/events",
        json={
            "title": "School run",
            "start_at": "2024-01-15T08:00:00Z",
            "end_at": "2024-01-15T09:00:00Z",
        },
    )

    conflicts = client.get("/conflicts", params=_WINDOW).json()

    assert len(conflicts) == 2
    by_type = {c["conflict_type"]: c for c in conflicts}
    assert by_type["overlap"]["second"]["event_id"] == dentist["id"]
    assert by_type["adjacent"]["first"]["title"] == "School run"
    assert by_type["adjacent"]["second"]["title"] == "Family standup"


# ---------------------------------------------------------------------------
# Rules, templates, timezones
# ---------------------------------------------------------------------------


def test_build_rule(client):
    resp = client.post(
        "/rrule",
        json={"frequency": "WEEKLY", "interval": 2, "by_day": ["MO", "WE"], "count": 5},
    )
    assert resp.json() == {
        "rule": "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE;COUNT=5",
        "description": "Every 2 weekly on Mon, Wed (5 times)",
    }


def test_describe_malformed_rule(client):
    resp = client.get("/rrule/describe", params={"rule": "garbage"})
    assert resp.json()["description"] == "Custom recurrence"


def test_presets(client):
    assert client.get("/rrule/presets").json()["WEEKDAYS"] == "FREQ=WEEKLY;BYDAY=MO,TU,WE,TH,FR"


def test_template_routes(client):
    assert client.get("/templates").status_code == 200
    assert len(client.get("/templates", params={"category": "work"}).json()) == 2
    assert client.get("/templates/categories").json()[0] == "family"
    assert client.get("/templates/meal-prep").json()["duration"] == 180
    assert client.get("/templates/nope").status_code == 404


def test_template_draft(client):
    resp = client.get(
        "/templates/date-night/draft", params={"start": "2024-01-05T19:00:00Z"}
    )
    draft = resp.json()
    assert draft["title"] == "Date Night"
    assert _parse(draft["end_time"]) == datetime(2024, 1, 5, 22, 0, tzinfo=timezone.utc)


def test_template_suggestions(client):
    resp = client.get("/templates/suggestions", params={"at": "2024-01-03T07:00:00"})
    assert [t["id"] for t in resp.json()] == [
        "gym-session",
        "doctor-appointment",
        "project-review",
    ]


def test_timezone_offset(client):
    resp = client.get(
        "/timezones/offset",
        params={"zone": "Australia/Perth", "at": "2024-01-01T00:00:00Z"},
    )
    body = resp.json()
    assert body["offset_minutes"] == 480
    assert body["is_dst"] is False

    unknown = client.get("/timezones/offset", params={"zone": "Moon/Base"}).json()
    assert unknown["offset_minutes"] == 0
    assert "UTC" in client.get("/timezones").json()
