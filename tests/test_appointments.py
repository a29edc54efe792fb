"""Tests for the appointment projection over reserved slots."""

from datetime import date, datetime, timedelta

import pytest

from app.core.errors import NotFound, ValidationFailed
from app.services.appointments import get_appointment, list_appointments
from app.services.booking import book_slot, cancel_slot

FUTURE_DAY = date.today() + timedelta(days=7)


@pytest.mark.asyncio
async def test_only_reserved_slots_are_appointments(db, creneau, patient):
    assert await list_appointments(db) == []

    slot = await book_slot(db, creneau.id, patient.id, motif="Back pain", time="09:00")
    views = await list_appointments(db)
    assert len(views) == 1
    view = views[0]
    assert view.time_slot_id == slot.id
    assert view.patient_id == patient.id
    assert view.day == FUTURE_DAY
    assert view.motif == "Back pain"
    assert view.status == "confirmed"

    await cancel_slot(db, creneau.id, patient.id, "patient", time="09:00")
    assert await list_appointments(db) == []


@pytest.mark.asyncio
async def test_past_and_future_windows(db, creneau, patient):
    await book_slot(db, creneau.id, patient.id, time="09:00")
    await book_slot(db, creneau.id, patient.id, time="17:00")

    # pretend it is 10:00 on the appointment day
    now = datetime(FUTURE_DAY.year, FUTURE_DAY.month, FUTURE_DAY.day, 10, 0)
    past = await list_appointments(db, when="passe", now=now)
    future = await list_appointments(db, when="future", now=now)
    assert [v.time for v in past] == ["09:00"]
    assert [v.time for v in future] == ["17:00"]

    later = now + timedelta(days=1)
    assert len(await list_appointments(db, when="past", now=later)) == 2


@pytest.mark.asyncio
async def test_filter_by_doctor_and_patient(db, creneau, patient, other_patient, doctor):
    await book_slot(db, creneau.id, patient.id, time="09:00")
    await book_slot(db, creneau.id, other_patient.id, time="09:30")

    assert len(await list_appointments(db, doctor_id=doctor.id)) == 2
    assert [v.time for v in await list_appointments(db, patient_id=other_patient.id)] == ["09:30"]


@pytest.mark.asyncio
async def test_unknown_window(db):
    with pytest.raises(ValidationFailed):
        await list_appointments(db, when="soon")


@pytest.mark.asyncio
async def test_get_appointment(db, creneau, patient):
    # booking refreshes the day, which resets its loaded slot list
    free_id = next(s.id for s in creneau.time_slots if s.time == "10:00")

    slot = await book_slot(db, creneau.id, patient.id, time="09:00")
    view = await get_appointment(db, slot.id)
    assert view.creneau_id == creneau.id

    with pytest.raises(NotFound):
        await get_appointment(db, free_id)
