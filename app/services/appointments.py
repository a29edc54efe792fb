"""Read-time appointment views.

Appointments are not stored separately: a reserved time slot IS the
appointment. These helpers flatten reserved slots with their day and agenda.
"""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound, ValidationFailed
from app.models.agenda import Agenda
from app.models.creneau import Creneau, SlotStatus, TimeSlot
from app.utils.dates import slot_datetime

# Legacy query-string values map onto the English ones
WHEN_ALIASES = {"passe": "past", "futur": "future", "past": "past", "future": "future"}


@dataclass
class AppointmentView:
    time_slot_id: UUID
    creneau_id: UUID
    agenda_id: UUID
    doctor_id: UUID
    patient_id: UUID
    day: date
    time: str
    motif: str | None
    reserved_at: datetime | None
    status: str = "confirmed"


def _to_view(slot: TimeSlot, creneau: Creneau, agenda: Agenda) -> AppointmentView:
    return AppointmentView(
        time_slot_id=slot.id,
        creneau_id=creneau.id,
        agenda_id=agenda.id,
        doctor_id=agenda.doctor_id,
        patient_id=slot.patient_id,
        day=creneau.day,
        time=slot.time,
        motif=slot.motif,
        reserved_at=slot.reserved_at,
    )


def _reserved_query():
    return (
        select(TimeSlot, Creneau, Agenda)
        .join(Creneau, TimeSlot.creneau_id == Creneau.id)
        .join(Agenda, Creneau.agenda_id == Agenda.id)
        .where(TimeSlot.status == SlotStatus.RESERVED)
    )


async def list_appointments(
    db: AsyncSession,
    doctor_id: UUID | None = None,
    patient_id: UUID | None = None,
    when: str | None = None,
    now: datetime | None = None,
) -> list[AppointmentView]:
    """Reserved slots, newest first, optionally filtered by doctor, patient
    and ``when`` (``past`` / ``future``, legacy ``passe`` / ``futur``)."""
    window = None
    if when:
        window = WHEN_ALIASES.get(when.lower())
        if window is None:
            raise ValidationFailed(f"Unknown filter {when!r}; expected past or future")

    query = _reserved_query()
    if doctor_id is not None:
        query = query.where(Agenda.doctor_id == doctor_id)
    if patient_id is not None:
        query = query.where(TimeSlot.patient_id == patient_id)
    query = query.order_by(Creneau.day.desc(), TimeSlot.time.desc())

    result = await db.execute(query)
    views = [_to_view(slot, creneau, agenda) for slot, creneau, agenda in result.all()]

    if window is None:
        return views

    now = now or datetime.utcnow()
    if window == "past":
        return [v for v in views if slot_datetime(v.day, v.time) < now]
    return [v for v in views if slot_datetime(v.day, v.time) >= now]


async def get_appointment(db: AsyncSession, time_slot_id: UUID) -> AppointmentView:
    result = await db.execute(_reserved_query().where(TimeSlot.id == time_slot_id))
    row = result.first()
    if row is None:
        raise NotFound(f"Appointment {time_slot_id} not found")
    return _to_view(*row)
