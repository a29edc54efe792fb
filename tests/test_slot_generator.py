"""Tests for the pure slot layout generator and date helpers."""

from datetime import date, datetime

import pytest

from app.core.errors import InvalidDate
from app.models.creneau import SlotStatus
from app.services.slot_generator import generate_time_slots, time_labels
from app.utils.dates import ensure_not_past, normalize_time_label, parse_day


def test_default_layout_has_twenty_labels():
    slots = generate_time_slots("2030-03-04")
    assert len(slots) == 20
    assert slots[0].time == "08:00"
    assert slots[-1].time == "17:30"
    assert [s.position for s in slots] == list(range(20))


def test_all_available_without_blocked_labels():
    slots = generate_time_slots(date(2030, 3, 4))
    assert {s.status for s in slots} == {SlotStatus.AVAILABLE}


def test_blocked_labels_marked_unavailable():
    slots = generate_time_slots("2030-03-04", ["12:00", "12:30"])
    unavailable = [s.time for s in slots if s.status == SlotStatus.UNAVAILABLE]
    assert unavailable == ["12:00", "12:30"]
    assert sum(1 for s in slots if s.status == SlotStatus.AVAILABLE) == 18


def test_blocked_labels_normalized_and_deduplicated():
    slots = generate_time_slots("2030-03-04", ["9:00", "09:00", " 9:30 "])
    unavailable = [s.time for s in slots if s.status == SlotStatus.UNAVAILABLE]
    assert unavailable == ["09:00", "09:30"]


def test_malformed_and_out_of_layout_labels_ignored():
    slots = generate_time_slots("2030-03-04", ["lunch", "25:00", "07:00", "18:00", None])
    assert all(s.status == SlotStatus.AVAILABLE for s in slots)
    assert len(slots) == 20


def test_datetime_day_drops_time_of_day():
    a = generate_time_slots(datetime(2030, 3, 4, 15, 45))
    b = generate_time_slots("2030-03-04")
    assert a == b


@pytest.mark.parametrize("bad", ["04/03/2030", "2030-13-01", "tomorrow", "", 20300304, None])
def test_unparseable_day_raises_invalid_date(bad):
    with pytest.raises(InvalidDate):
        generate_time_slots(bad)


def test_custom_layout_bounds_inclusive():
    assert time_labels("09:00", "10:00", 15) == ["09:00", "09:15", "09:30", "09:45", "10:00"]


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        time_labels("09:00", "10:00", 0)


def test_normalize_time_label():
    assert normalize_time_label("9:05") == "09:05"
    assert normalize_time_label("17:30") == "17:30"
    assert normalize_time_label("24:00") is None
    assert normalize_time_label("9h00") is None


def test_parse_day_accepts_date_and_string():
    assert parse_day("2030-03-04") == date(2030, 3, 4)
    assert parse_day(date(2030, 3, 4)) == date(2030, 3, 4)


def test_ensure_not_past():
    today = date(2030, 3, 4)
    assert ensure_not_past(today, today=today) == today
    with pytest.raises(InvalidDate):
        ensure_not_past(date(2030, 3, 3), today=today)
