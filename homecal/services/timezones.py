"""Static timezone offset table used to shift instants for display.

This is deliberately not a tz database: a handful of zones map to a fixed
offset in minutes, unknown zones behave as UTC, and south-east Australia
gets a simplified daylight-saving check.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import MappingProxyType

from dateutil.relativedelta import SU, relativedelta

from homecal.domain.models import as_utc

TIMEZONE_OFFSETS = MappingProxyType(
    {
        "Australia/Melbourne": 600,
        "Australia/Sydney": 600,
        "Australia/Brisbane": 600,
        "Australia/Perth": 480,
        "Australia/Adelaide": 570,
        "America/New_York": -300,
        "America/Los_Angeles": -480,
        "America/Chicago": -360,
        "Europe/London": 0,
        "Europe/Paris": 60,
        "Asia/Tokyo": 540,
        "UTC": 0,
    }
)

DST_ZONES = frozenset({"Australia/Melbourne", "Australia/Sydney"})
DST_OFFSET_MINUTES = 660


def known_timezones() -> list[str]:
    return list(TIMEZONE_OFFSETS)


def base_offset_minutes(zone: str) -> int:
    """Return the table offset for *zone*, or 0 when the zone is unknown."""
    return TIMEZONE_OFFSETS.get(zone, 0)


def dst_window(year: int) -> tuple[datetime, datetime]:
    """Return the (start, end) wall-clock bounds of daylight saving for *year*.

    Start is 02:00 on the first Sunday after 1 October and end is 02:00 on
    the first Sunday after 1 April, both in the same numeric year. A month
    that begins on a Sunday therefore starts its window on the 8th. Because the end
    precedes the start, no instant ever falls inside the window.
    """
    start = datetime(year, 10, 1, 2) + relativedelta(days=+1, weekday=SU(+1))
    end = datetime(year, 4, 1, 2) + relativedelta(days=+1, weekday=SU(+1))
    return start, end


def is_dst(zone: str, at: datetime) -> bool:
    if zone not in DST_ZONES:
        return False
    # Compare in the zone's standard-time wall clock, as naive datetimes.
    local = (as_utc(at) + timedelta(minutes=base_offset_minutes(zone))).replace(
        tzinfo=None
    )
    start, end = dst_window(local.year)
    return start <= local < end


def offset_minutes(zone: str, at: datetime | None = None) -> int:
    """Return the UTC offset of *zone* in minutes at instant *at* (default: now)."""
    if at is None:
        at = datetime.now(timezone.utc)
    if is_dst(zone, at):
        return DST_OFFSET_MINUTES
    return base_offset_minutes(zone)


def to_utc(local: datetime, zone: str) -> datetime:
    """Shift a zone-local instant to storage time by adding the zone's base offset."""
    return local + timedelta(minutes=base_offset_minutes(zone))


def from_utc(utc: datetime, zone: str) -> datetime:
    """Inverse of ``to_utc``: subtract the zone's base offset."""
    return utc - timedelta(minutes=base_offset_minutes(zone))
