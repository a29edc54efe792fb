"""Tests for slot-bearing day generation, retrieval, filtering and deletion."""

import uuid
from datetime import date, timedelta

import pytest

from app.core.errors import InvalidDate, InvalidReference, NotFound, ValidationFailed
from app.models.creneau import SlotStatus
from app.services import creneau_service
from app.services.booking import book_slot

FUTURE_DAY = date.today() + timedelta(days=7)
BLOCKED = ["12:00", "12:30"]


@pytest.mark.asyncio
async def test_generate_creates_day(db, agenda):
    creneau, operation = await creneau_service.generate_and_store(db, agenda.id, FUTURE_DAY, ["9:00"])
    assert operation == "create"
    assert creneau.agenda_id == agenda.id
    assert len(creneau.time_slots) == 20
    statuses = {s.time: s.status for s in creneau.time_slots}
    assert statuses["09:00"] == SlotStatus.UNAVAILABLE
    assert statuses["09:30"] == SlotStatus.AVAILABLE


@pytest.mark.asyncio
async def test_generate_unknown_agenda(db):
    with pytest.raises(InvalidReference):
        await creneau_service.generate_and_store(db, uuid.uuid4(), FUTURE_DAY)


@pytest.mark.asyncio
async def test_generate_past_day_rejected(db, agenda):
    with pytest.raises(InvalidDate):
        await creneau_service.generate_and_store(db, agenda.id, date.today() - timedelta(days=2))


@pytest.mark.asyncio
async def test_regenerate_overwrites_reservations(db, creneau, patient, caplog):
    """Re-generating an existing day discards its reservations."""
    await book_slot(db, creneau.id, patient.id, time="10:00")

    with caplog.at_level("WARNING"):
        updated, operation = await creneau_service.generate_and_store(db, creneau.agenda_id, FUTURE_DAY, [])

    assert operation == "update"
    assert updated.id == creneau.id
    assert all(s.status == SlotStatus.AVAILABLE for s in updated.time_slots)
    assert all(s.patient_id is None for s in updated.time_slots)
    assert "discards 1 reservation" in caplog.text


@pytest.mark.asyncio
async def test_retrieve_or_create_is_idempotent(db, agenda):
    first = await creneau_service.retrieve_or_create(db, agenda.id, FUTURE_DAY)
    second = await creneau_service.retrieve_or_create(db, agenda.id, FUTURE_DAY)
    assert first.id == second.id
    assert [s.id for s in first.time_slots] == [s.id for s in second.time_slots]
    assert all(s.status == SlotStatus.AVAILABLE for s in second.time_slots)


@pytest.mark.asyncio
async def test_retrieve_or_create_leaves_existing_day_untouched(db, creneau, patient):
    await book_slot(db, creneau.id, patient.id, time="10:00")

    again = await creneau_service.retrieve_or_create(db, creneau.agenda_id, FUTURE_DAY)
    statuses = {s.time: s.status for s in again.time_slots}
    assert statuses["10:00"] == SlotStatus.RESERVED
    assert statuses["12:00"] == SlotStatus.UNAVAILABLE


@pytest.mark.asyncio
async def test_retrieve_or_create_unknown_agenda(db):
    with pytest.raises(InvalidReference):
        await creneau_service.retrieve_or_create(db, uuid.uuid4(), FUTURE_DAY)


@pytest.mark.asyncio
async def test_get_by_date_missing(db, agenda):
    with pytest.raises(NotFound):
        await creneau_service.get_by_date(db, agenda.id, FUTURE_DAY)


@pytest.mark.asyncio
async def test_filter_keeps_layout_order(db, creneau, patient):
    await book_slot(db, creneau.id, patient.id, time="15:00")

    _, unavailable = await creneau_service.filter_by_status(db, creneau.agenda_id, FUTURE_DAY, "unavailable")
    assert [s.time for s in unavailable] == BLOCKED

    _, reserved = await creneau_service.filter_by_status(db, creneau.agenda_id, FUTURE_DAY, SlotStatus.RESERVED)
    assert [s.time for s in reserved] == ["15:00"]

    _, available = await creneau_service.filter_by_status(db, creneau.agenda_id, FUTURE_DAY, "disponible")
    assert len(available) == 17
    assert [s.position for s in available] == sorted(s.position for s in available)


@pytest.mark.asyncio
async def test_filter_unknown_status(db, creneau):
    with pytest.raises(ValidationFailed):
        await creneau_service.filter_by_status(db, creneau.agenda_id, FUTURE_DAY, "busy")


@pytest.mark.asyncio
async def test_filter_missing_day(db, agenda):
    with pytest.raises(NotFound):
        await creneau_service.filter_by_status(db, agenda.id, FUTURE_DAY, "available")


@pytest.mark.asyncio
async def test_delete_day(db, creneau):
    await creneau_service.delete_creneau(db, creneau.agenda_id, FUTURE_DAY)
    with pytest.raises(NotFound):
        await creneau_service.get_by_date(db, creneau.agenda_id, FUTURE_DAY)
    with pytest.raises(NotFound):
        await creneau_service.delete_creneau(db, creneau.agenda_id, FUTURE_DAY)


# ============================================================================
# HTTP
# ============================================================================

@pytest.mark.asyncio
async def test_generate_route(client, agenda):
    body = {"agendaId": str(agenda.id), "date": FUTURE_DAY.isoformat(), "heuresIndisponibles": BLOCKED}

    created = await client.post("/api/v1/creneaux/genererEtEnregistrer", json=body)
    assert created.status_code == 201
    slots = created.json()["data"]["timeSlots"]
    assert len(slots) == 20
    assert [s["time"] for s in slots if s["status"] == "unavailable"] == BLOCKED

    updated = await client.post("/api/v1/creneaux/genererEtEnregistrer", json=body)
    assert updated.status_code == 200
    assert updated.json()["message"] == "Slots updated"


@pytest.mark.asyncio
async def test_retrieve_or_create_route(client, agenda):
    body = {"agendaId": str(agenda.id), "date": FUTURE_DAY.isoformat()}
    first = await client.post("/api/v1/creneaux/recupererOuCreer", json=body)
    second = await client.post("/api/v1/creneaux/recupererOuCreer", json=body)
    assert first.status_code == second.status_code == 200
    assert first.json()["data"]["id"] == second.json()["data"]["id"]


@pytest.mark.asyncio
async def test_by_date_and_filter_routes(client, creneau):
    day = FUTURE_DAY.isoformat()

    resp = await client.get(f"/api/v1/creneaux/parDate/{creneau.agenda_id}/{day}")
    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == str(creneau.id)

    resp = await client.get(f"/api/v1/creneaux/filtrer/{creneau.agenda_id}/{day}/indisponible")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["statut"] == "unavailable"
    assert [s["time"] for s in data["timeSlots"]] == BLOCKED


@pytest.mark.asyncio
async def test_by_date_route_bad_date(client, agenda):
    resp = await client.get(f"/api/v1/creneaux/parDate/{agenda.id}/2030-02-30")
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidDate"


@pytest.mark.asyncio
async def test_delete_route(client, creneau):
    body = {"agendaId": str(creneau.agenda_id), "date": FUTURE_DAY.isoformat()}
    resp = await client.request("DELETE", "/api/v1/creneaux/supprimer", json=body)
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    again = await client.request("DELETE", "/api/v1/creneaux/supprimer", json=body)
    assert again.status_code == 404
