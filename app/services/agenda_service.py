"""Calendar (agenda) lookup, creation and cleanup."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import InvalidReference, NotFound
from app.models.agenda import Agenda, AgendaStatus, AgendaLocation
from app.models.creneau import Creneau, TimeSlot
from app.models.doctor import Doctor
from app.utils.dates import parse_day, ensure_not_past

logger = logging.getLogger(__name__)


async def _find_agenda(db: AsyncSession, doctor_id: UUID, day) -> Agenda | None:
    result = await db.execute(
        select(Agenda)
        .where(Agenda.doctor_id == doctor_id, Agenda.day == day)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_or_create_agenda(
    db: AsyncSession,
    doctor_id: UUID,
    day,
    location: AgendaLocation | None = None,
) -> tuple[Agenda, bool]:
    """Return the doctor's agenda for ``day``, creating it when absent.

    An existing agenda is returned unchanged; its slots are never regenerated
    here. Returns ``(agenda, created)``.

    Raises:
        InvalidDate: unparseable day, or a new agenda for a past day.
        InvalidReference: the doctor does not exist.
    """
    target = parse_day(day)

    doctor = await db.get(Doctor, doctor_id)
    if doctor is None:
        raise InvalidReference(f"Doctor {doctor_id} not found")

    existing = await _find_agenda(db, doctor_id, target)
    if existing is not None:
        return existing, False

    ensure_not_past(target)

    agenda = Agenda(
        doctor_id=doctor_id,
        day=target,
        status=AgendaStatus.ACTIVE,
        location=location,
    )
    db.add(agenda)
    try:
        await db.commit()
    except IntegrityError:
        # Another request created it between our lookup and insert.
        await db.rollback()
        existing = await _find_agenda(db, doctor_id, target)
        if existing is None:
            raise
        return existing, False

    await db.refresh(agenda)
    logger.info("Created agenda %s for doctor %s on %s", agenda.id, doctor_id, target)
    return agenda, True


async def get_agenda(db: AsyncSession, agenda_id: UUID) -> Agenda:
    """Fetch an agenda with its days and their time slots."""
    result = await db.execute(
        select(Agenda)
        .where(Agenda.id == agenda_id)
        .options(selectinload(Agenda.creneaux).selectinload(Creneau.time_slots))
        .execution_options(populate_existing=True)
    )
    agenda = result.scalar_one_or_none()
    if agenda is None:
        raise NotFound(f"Agenda {agenda_id} not found")
    return agenda


async def set_agenda_status(db: AsyncSession, agenda_id: UUID, status: AgendaStatus) -> Agenda:
    """Activate or deactivate an agenda. Inactive agendas refuse bookings."""
    agenda = await db.get(Agenda, agenda_id)
    if agenda is None:
        raise NotFound(f"Agenda {agenda_id} not found")

    agenda.status = status
    agenda.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(agenda)

    logger.info("Agenda %s set to %s", agenda_id, status.value)
    return agenda


async def delete_agenda(db: AsyncSession, agenda_id: UUID) -> int:
    """Admin cleanup: delete an agenda with all its days and time slots.

    Returns the number of days removed.
    """
    agenda = await db.get(Agenda, agenda_id)
    if agenda is None:
        raise NotFound(f"Agenda {agenda_id} not found")

    creneau_ids = select(Creneau.id).where(Creneau.agenda_id == agenda_id)
    await db.execute(
        delete(TimeSlot)
        .where(TimeSlot.creneau_id.in_(creneau_ids))
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(
        delete(Creneau)
        .where(Creneau.agenda_id == agenda_id)
        .execution_options(synchronize_session=False)
    )
    await db.delete(agenda)
    await db.commit()

    logger.warning("Deleted agenda %s and %d day(s)", agenda_id, result.rowcount)
    return result.rowcount
