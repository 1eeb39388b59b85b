"""Service for building, parsing and describing RRULE strings.

Rules are persisted verbatim on calendar events, so ``parse_rule`` and
``format_rule`` are the single grammar every other module goes through.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime
from types import MappingProxyType

from dateutil.parser import isoparse

from homecal.domain.models import Frequency, RecurrenceRule, as_utc

logger = logging.getLogger(__name__)

FALLBACK_DESCRIPTION = "Custom recurrence"

RRULE_PRESETS = MappingProxyType(
    {
        "DAILY": "FREQ=DAILY",
        "WEEKDAYS": "FREQ=WEEKLY;BYDAY=MO,TU,WE,TH,FR",
        "WEEKLY": "FREQ=WEEKLY",
        "MONTHLY": "FREQ=MONTHLY",
        "YEARLY": "FREQ=YEARLY",
        "MON_WED_FRI": "FREQ=WEEKLY;BYDAY=MO,WE,FR",
        "TUES_THURS": "FREQ=WEEKLY;BYDAY=TU,TH",
        "FIRST_MONDAY": "FREQ=MONTHLY;BYDAY=1MO",
        "LAST_DAY": "FREQ=MONTHLY;BYMONTHDAY=-1",
    }
)

# Monday-first, matching datetime.weekday()
_DAY_LABELS = {
    "MO": "Mon",
    "TU": "Tue",
    "WE": "Wed",
    "TH": "Thu",
    "FR": "Fri",
    "SA": "Sat",
    "SU": "Sun",
}

_WEEKDAY_TOKEN = re.compile(r"^([+-]?\d{1,2})?(MO|TU|WE|TH|FR|SA|SU)$")


class RecurrenceRuleError(ValueError):
    """Raised when RRULE text does not follow the rule grammar."""


def create_rule(
    frequency: Frequency | str,
    interval: int = 1,
    by_day: Iterable[str] | None = None,
    count: int | None = None,
    until: datetime | None = None,
) -> str:
    """Build an RRULE string from structured recurrence parameters.

    Fields are emitted in ``FREQ;INTERVAL;BYDAY;COUNT;UNTIL`` order and only
    when they differ from the default. ``count`` and ``until`` are not
    checked against each other.
    """
    rule = RecurrenceRule(
        freq=Frequency(str(frequency).upper()),
        interval=interval,
        by_day=[day.upper() for day in by_day or ()],
        count=count,
        until=until,
    )
    return format_rule(rule)


def parse_rule(text: str) -> RecurrenceRule:
    """Parse RRULE text into a RecurrenceRule.

    Raises ``RecurrenceRuleError`` for anything outside the grammar.
    """
    if not text or not text.strip():
        raise RecurrenceRuleError("empty recurrence rule")

    body = text.strip()
    if body.upper().startswith("RRULE:"):
        body = body[len("RRULE:"):]

    freq: Frequency | None = None
    interval = 1
    by_day: list[str] = []
    count: int | None = None
    until: datetime | None = None
    extras: list[tuple[str, str]] = []

    for part in body.split(";"):
        part = part.strip()
        if not part:
            continue
        name, sep, value = part.partition("=")
        if not sep:
            raise RecurrenceRuleError(f"malformed rule part {part!r}")
        name = name.strip().upper()
        value = value.strip()

        if name == "FREQ":
            try:
                freq = Frequency(value.upper())
            except ValueError:
                raise RecurrenceRuleError(f"unsupported frequency {value!r}") from None
        elif name == "INTERVAL":
            interval = _parse_positive_int(name, value)
        elif name == "BYDAY":
            by_day = [t.strip().upper() for t in value.split(",") if t.strip()]
            if not by_day:
                raise RecurrenceRuleError("BYDAY has no weekdays")
        elif name == "COUNT":
            count = _parse_positive_int(name, value)
        elif name == "UNTIL":
            until = _parse_until(value)
        else:
            extras.append((name, value))

    if freq is None:
        raise RecurrenceRuleError("rule has no FREQ")

    return RecurrenceRule(
        freq=freq,
        interval=interval,
        by_day=by_day,
        count=count,
        until=until,
        extras=extras,
    )


def format_rule(rule: RecurrenceRule) -> str:
    """Render a RecurrenceRule back into RRULE text."""
    parts = [f"FREQ={rule.freq.value}"]
    if rule.interval > 1:
        parts.append(f"INTERVAL={rule.interval}")
    if rule.by_day:
        parts.append("BYDAY=" + ",".join(rule.by_day))
    if rule.count:
        parts.append(f"COUNT={rule.count}")
    if rule.until is not None:
        parts.append(f"UNTIL={_format_until(rule.until)}")
    parts.extend(f"{name}={value}" for name, value in rule.extras)
    return ";".join(parts)


def describe_rule(text: str) -> str:
    """Render RRULE text as a short human-readable phrase.

    Never raises: text that does not parse is described as
    ``"Custom recurrence"``.
    """
    try:
        rule = parse_rule(text)
    except RecurrenceRuleError as exc:
        logger.warning("Cannot describe recurrence rule %r: %s", text, exc)
        return FALLBACK_DESCRIPTION

    every = f"{rule.interval} " if rule.interval > 1 else ""
    description = f"Every {every}{rule.freq.value.lower()}"

    if rule.by_day:
        description += " on " + ", ".join(_day_label(token) for token in rule.by_day)

    if rule.count:
        description += f" ({rule.count} times)"

    if rule.until is not None:
        description += f" until {rule.until.date().isoformat()}"

    return description


def _day_label(token: str) -> str:
    m = _WEEKDAY_TOKEN.match(token)
    if not m:
        return "Custom"
    return _DAY_LABELS[m.group(2)]


def _parse_positive_int(name: str, value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise RecurrenceRuleError(f"{name} must be an integer, got {value!r}") from None
    if number < 1:
        raise RecurrenceRuleError(f"{name} must be at least 1, got {number}")
    return number


def _parse_until(value: str) -> datetime:
    try:
        return as_utc(isoparse(value))
    except (ValueError, OverflowError):
        raise RecurrenceRuleError(f"invalid UNTIL {value!r}") from None


def _format_until(until: datetime) -> str:
    return as_utc(until).strftime("%Y%m%dT%H%M%SZ")
