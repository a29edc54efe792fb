"""Day and time-label parsing shared by the scheduling services."""

import re
from datetime import date, datetime

from app.core.errors import InvalidDate

_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def parse_day(value) -> date:
    """Return the calendar day for ``value``.

    Accepts a ``date``, a ``datetime`` (time of day dropped) or a strict
    ``YYYY-MM-DD`` string. Raises ``InvalidDate`` for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _DAY_RE.match(value.strip()):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise InvalidDate(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def ensure_not_past(day: date, today: date | None = None) -> date:
    """Reject days before today."""
    today = today or date.today()
    if day < today:
        raise InvalidDate(f"Date {day.isoformat()} is in the past; it must be today or later")
    return day


def normalize_time_label(label) -> str | None:
    """Zero-pad an ``H:MM`` label to ``HH:MM``; ``None`` when malformed."""
    if not isinstance(label, str):
        return None
    match = _TIME_RE.match(label.strip())
    if not match:
        return None
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def label_to_minutes(label: str) -> int:
    """Convert HH:MM string to minutes since midnight."""
    h, m = map(int, label.split(":"))
    return h * 60 + m


def minutes_to_label(minutes: int) -> str:
    """Convert minutes since midnight to HH:MM string."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def slot_datetime(day: date, label: str) -> datetime:
    """Combine a day and an HH:MM label into a naive datetime."""
    minutes = label_to_minutes(label)
    return datetime(day.year, day.month, day.day, minutes // 60, minutes % 60)
