"""Booking engine: exclusive state transitions on time-slot entries.

State machine per entry::

    available --book--> reserved --cancel--> available
    unavailable  (set by slot generation only)

Every transition is ONE conditional UPDATE whose WHERE clause carries the
expected prior state, so the database row is the only concurrency primitive.
Of N concurrent bookers on the same entry exactly one matches a row; the
others match zero and get ``SlotUnavailable``. Never replace these with a
read, an in-memory status check and a write.

Notifications run after the commit and are best-effort: a failing notifier
is logged and the committed state stands.
"""

import logging
from datetime import datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import (
    InvalidReference,
    NotFound,
    NotReserved,
    SlotUnavailable,
    Unauthorized,
    ValidationFailed,
)
from app.models.admin import Admin
from app.models.agenda import Agenda, AgendaStatus
from app.models.creneau import ActorType, Creneau, SlotStatus, TimeSlot
from app.models.patient import Patient
from app.utils.dates import normalize_time_label

logger = logging.getLogger(__name__)


class BookingNotifier(Protocol):
    """Side channel invoked after a transition commits."""

    async def on_booked(self, creneau_id: UUID, time_slot_id: UUID) -> None:
        ...

    async def on_cancelled(
        self,
        creneau_id: UUID,
        time_slot_id: UUID,
        patient_id: UUID,
        reason: str | None = None,
    ) -> None:
        ...


def _slot_criteria(creneau_id: UUID, time_slot_id: UUID | None = None, time: str | None = None) -> list:
    """WHERE criteria that pin one entry of a day, by id and/or time label."""
    if time_slot_id is None and time is None:
        raise ValidationFailed("Either a time slot id or a time label is required")

    criteria = [TimeSlot.creneau_id == creneau_id]
    if time_slot_id is not None:
        criteria.append(TimeSlot.id == time_slot_id)
    if time is not None:
        label = normalize_time_label(time)
        if label is None:
            raise ValidationFailed(f"Invalid time label {time!r} (expected HH:MM)")
        criteria.append(TimeSlot.time == label)
    return criteria


def _parse_actor_type(actor_type) -> ActorType:
    try:
        return ActorType(actor_type.lower() if isinstance(actor_type, str) else actor_type)
    except ValueError:
        raise ValidationFailed(f"Unknown actor type {actor_type!r}")


def _active_day(creneau_id: UUID):
    """Subquery matching ``creneau_id`` only while its agenda is active."""
    return (
        select(Creneau.id)
        .join(Agenda, Agenda.id == Creneau.agenda_id)
        .where(Creneau.id == creneau_id, Agenda.status == AgendaStatus.ACTIVE)
    )


async def _load_slot(db: AsyncSession, *criteria) -> TimeSlot | None:
    result = await db.execute(
        select(TimeSlot)
        .where(*criteria)
        .options(selectinload(TimeSlot.creneau).selectinload(Creneau.agenda))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _unavailable_reason(db: AsyncSession, criteria: list) -> str:
    """Human-readable reason for a booking that matched no row."""
    slot = await _load_slot(db, *criteria)
    if slot is None:
        return "Time slot not found"
    if slot.creneau.agenda.status != AgendaStatus.ACTIVE:
        return "This agenda is not accepting bookings"
    return f"Time slot {slot.time} is {slot.status.value}"


async def _authorize(db: AsyncSession, slot: TimeSlot, actor_id: UUID, actor_type: ActorType) -> None:
    """Only the occupant, the agenda's doctor or an active admin may act."""
    if actor_type == ActorType.PATIENT:
        allowed = slot.patient_id == actor_id
    elif actor_type == ActorType.DOCTOR:
        allowed = slot.creneau.agenda.doctor_id == actor_id
    else:
        admin = await db.get(Admin, actor_id)
        allowed = admin is not None and bool(admin.is_active)

    if not allowed:
        logger.warning(
            "Refused change on slot %s by %s %s",
            slot.id,
            actor_type.value,
            actor_id,
        )
        raise Unauthorized("Not allowed to change this appointment")


async def _notify(notifier: BookingNotifier | None, event: str, *args, **kwargs) -> None:
    if notifier is None:
        return
    try:
        await getattr(notifier, event)(*args, **kwargs)
    except Exception:
        # committed state stands; no retry
        logger.exception("Notification hook %s failed for slot %s", event, args[1] if len(args) > 1 else None)


async def locate_slot(db: AsyncSession, time_slot_id: UUID) -> TimeSlot:
    """Find an entry by its own id, whatever day it belongs to."""
    slot = await _load_slot(db, TimeSlot.id == time_slot_id)
    if slot is None:
        raise NotFound(f"Time slot {time_slot_id} not found")
    return slot


async def book_slot(
    db: AsyncSession,
    creneau_id: UUID,
    patient_id: UUID,
    motif: str | None = None,
    time_slot_id: UUID | None = None,
    time: str | None = None,
    notifier: BookingNotifier | None = None,
) -> TimeSlot:
    """Reserve an available entry for a patient.

    Raises:
        ValidationFailed: neither ``time_slot_id`` nor a valid ``time`` given.
        InvalidReference: the patient does not exist.
        SlotUnavailable: the entry is taken, blocked, missing, or its agenda
            is inactive.
    """
    criteria = _slot_criteria(creneau_id, time_slot_id, time)

    patient = await db.get(Patient, patient_id)
    if patient is None:
        raise InvalidReference(f"Patient {patient_id} not found")

    now = datetime.utcnow()
    result = await db.execute(
        update(TimeSlot)
        .where(
            *criteria,
            TimeSlot.status == SlotStatus.AVAILABLE,
            TimeSlot.creneau_id.in_(_active_day(creneau_id)),
        )
        .values(
            status=SlotStatus.RESERVED,
            patient_id=patient_id,
            motif=motif,
            reserved_at=now,
            cancelled_at=None,
            cancellation_reason=None,
            cancelled_by_id=None,
            cancelled_by_type=None,
        )
        .returning(TimeSlot.id)
        .execution_options(synchronize_session=False)
    )
    slot_id = result.scalar_one_or_none()

    if slot_id is None:
        await db.rollback()
        reason = await _unavailable_reason(db, criteria)
        logger.info("Booking refused on day %s for patient %s: %s", creneau_id, patient_id, reason)
        raise SlotUnavailable(reason)

    await db.commit()

    slot = await _load_slot(db, TimeSlot.id == slot_id)
    logger.info("Slot %s (%s) on day %s booked by patient %s", slot_id, slot.time, creneau_id, patient_id)

    await _notify(notifier, "on_booked", creneau_id, slot_id)
    return slot


async def cancel_slot(
    db: AsyncSession,
    creneau_id: UUID,
    actor_id: UUID,
    actor_type: ActorType | str,
    reason: str | None = None,
    time_slot_id: UUID | None = None,
    time: str | None = None,
    notifier: BookingNotifier | None = None,
) -> TimeSlot:
    """Release a reserved entry.

    The write is a compare-and-swap on (reserved, observed occupant): if the
    entry changed since it was read, nothing is written and ``NotReserved``
    is raised.

    Raises:
        NotFound: no such entry on that day.
        NotReserved: the entry is not reserved.
        Unauthorized: the actor is not the occupant, the agenda's doctor or
            an active admin.
    """
    criteria = _slot_criteria(creneau_id, time_slot_id, time)
    actor = _parse_actor_type(actor_type)

    slot = await _load_slot(db, *criteria)
    if slot is None:
        raise NotFound("Time slot not found")
    if slot.status != SlotStatus.RESERVED:
        raise NotReserved(f"Time slot {slot.time} is not reserved")

    await _authorize(db, slot, actor_id, actor)

    slot_id, label, occupant = slot.id, slot.time, slot.patient_id
    now = datetime.utcnow()
    result = await db.execute(
        update(TimeSlot)
        .where(
            TimeSlot.id == slot_id,
            TimeSlot.status == SlotStatus.RESERVED,
            TimeSlot.patient_id == occupant,
        )
        .values(
            status=SlotStatus.AVAILABLE,
            patient_id=None,
            motif=None,
            reserved_at=None,
            cancelled_at=now,
            cancellation_reason=reason,
            cancelled_by_id=actor_id,
            cancelled_by_type=actor,
        )
        .returning(TimeSlot.id)
        .execution_options(synchronize_session=False)
    )
    if result.scalar_one_or_none() is None:
        await db.rollback()
        raise NotReserved(f"Time slot {label} is no longer reserved")

    await db.commit()

    cancelled = await _load_slot(db, TimeSlot.id == slot_id)
    logger.info(
        "Slot %s (%s) on day %s cancelled by %s %s",
        slot_id,
        label,
        creneau_id,
        actor.value,
        actor_id,
    )

    await _notify(notifier, "on_cancelled", creneau_id, slot_id, occupant, reason)
    return cancelled


async def reschedule_slot(
    db: AsyncSession,
    creneau_id: UUID,
    actor_id: UUID,
    actor_type: ActorType | str,
    new_time: str,
    time_slot_id: UUID | None = None,
    time: str | None = None,
    motif: str | None = None,
    notifier: BookingNotifier | None = None,
) -> TimeSlot:
    """Move a reservation to another label of the same day.

    The target is claimed with the booking update and the source released
    with the cancellation compare-and-swap, in one transaction. If either
    matches no row, both are rolled back.
    """
    criteria = _slot_criteria(creneau_id, time_slot_id, time)
    actor = _parse_actor_type(actor_type)
    target_label = normalize_time_label(new_time)
    if target_label is None:
        raise ValidationFailed(f"Invalid time label {new_time!r} (expected HH:MM)")

    source = await _load_slot(db, *criteria)
    if source is None:
        raise NotFound("Time slot not found")
    if source.status != SlotStatus.RESERVED:
        raise NotReserved(f"Time slot {source.time} is not reserved")
    if source.time == target_label:
        raise ValidationFailed(f"Appointment is already at {target_label}")

    await _authorize(db, source, actor_id, actor)

    source_id, source_label, source_creneau_id = source.id, source.time, source.creneau_id
    occupant = source.patient_id
    new_motif = motif if motif is not None else source.motif
    now = datetime.utcnow()

    claimed = await db.execute(
        update(TimeSlot)
        .where(
            TimeSlot.creneau_id == source_creneau_id,
            TimeSlot.time == target_label,
            TimeSlot.status == SlotStatus.AVAILABLE,
            TimeSlot.creneau_id.in_(_active_day(source_creneau_id)),
        )
        .values(
            status=SlotStatus.RESERVED,
            patient_id=occupant,
            motif=new_motif,
            reserved_at=now,
            cancelled_at=None,
            cancellation_reason=None,
            cancelled_by_id=None,
            cancelled_by_type=None,
        )
        .returning(TimeSlot.id)
        .execution_options(synchronize_session=False)
    )
    target_id = claimed.scalar_one_or_none()
    if target_id is None:
        await db.rollback()
        raise SlotUnavailable(f"Time slot {target_label} is not available")

    released = await db.execute(
        update(TimeSlot)
        .where(
            TimeSlot.id == source_id,
            TimeSlot.status == SlotStatus.RESERVED,
            TimeSlot.patient_id == occupant,
        )
        .values(
            status=SlotStatus.AVAILABLE,
            patient_id=None,
            motif=None,
            reserved_at=None,
            cancelled_at=now,
            cancellation_reason=f"Rescheduled to {target_label}",
            cancelled_by_id=actor_id,
            cancelled_by_type=actor,
        )
        .returning(TimeSlot.id)
        .execution_options(synchronize_session=False)
    )
    if released.scalar_one_or_none() is None:
        await db.rollback()
        raise NotReserved(f"Time slot {source_label} is no longer reserved")

    await db.commit()

    moved = await _load_slot(db, TimeSlot.id == target_id)
    logger.info(
        "Reservation of patient %s on day %s moved from %s to %s by %s %s",
        occupant,
        creneau_id,
        source_label,
        target_label,
        actor.value,
        actor_id,
    )

    await _notify(notifier, "on_booked", source_creneau_id, target_id)
    return moved
