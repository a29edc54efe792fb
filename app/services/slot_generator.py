"""Daily slot layout generation.

Pure functions only: no database access and no clock reads, so the layout for
a given (day, blocked labels) pair is always the same.
"""

import logging
from dataclasses import dataclass
from datetime import date

from app.models.creneau import SlotStatus
from app.utils.dates import parse_day, normalize_time_label, label_to_minutes, minutes_to_label

logger = logging.getLogger(__name__)

DEFAULT_DAY_START = "08:00"
DEFAULT_DAY_END = "17:30"
DEFAULT_INTERVAL_MINUTES = 30


@dataclass(frozen=True)
class SlotTemplate:
    """One entry of a generated layout, before it is persisted."""

    position: int
    time: str
    status: SlotStatus


def time_labels(
    start: str = DEFAULT_DAY_START,
    end: str = DEFAULT_DAY_END,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> list[str]:
    """All HH:MM labels from ``start`` to ``end`` inclusive."""
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")

    start_minutes = label_to_minutes(normalize_time_label(start) or start)
    end_minutes = label_to_minutes(normalize_time_label(end) or end)

    labels = []
    current = start_minutes
    while current <= end_minutes:
        labels.append(minutes_to_label(current))
        current += interval_minutes
    return labels


def normalize_blocked(blocked) -> set[str]:
    """Normalise blocked labels; malformed entries are dropped."""
    normalized = set()
    for label in blocked or []:
        value = normalize_time_label(label)
        if value is None:
            logger.warning("Ignoring malformed blocked time label: %r", label)
            continue
        normalized.add(value)
    return normalized


def generate_time_slots(
    day,
    blocked=None,
    start: str = DEFAULT_DAY_START,
    end: str = DEFAULT_DAY_END,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> list[SlotTemplate]:
    """Build the canonical slot layout for one calendar day.

    Every label starts ``available``; labels listed in ``blocked`` are
    ``unavailable``. Blocked labels outside the layout are ignored.

    Raises:
        InvalidDate: ``day`` cannot be read as a calendar day.
    """
    target: date = parse_day(day)
    blocked_labels = normalize_blocked(blocked)
    labels = time_labels(start, end, interval_minutes)

    unknown = blocked_labels.difference(labels)
    if unknown:
        logger.debug("Blocked labels outside the %s layout ignored: %s", target, sorted(unknown))

    return [
        SlotTemplate(
            position=index,
            time=label,
            status=SlotStatus.UNAVAILABLE if label in blocked_labels else SlotStatus.AVAILABLE,
        )
        for index, label in enumerate(labels)
    ]
