"""Slot-bearing day (creneau) generation, retrieval and deletion.

Two ways to materialise a day:

* ``generate_and_store`` re-templates the day and OVERWRITES any existing
  entries, reservations included. Meant for setting up a day before patients
  book.
* ``retrieve_or_create`` never touches an existing day; it only fills in the
  default layout when nothing exists yet.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.errors import InvalidReference, NotFound, ValidationFailed
from app.models.agenda import Agenda
from app.models.creneau import Creneau, TimeSlot, SlotStatus
from app.services.slot_generator import SlotTemplate, generate_time_slots
from app.utils.dates import parse_day, ensure_not_past

logger = logging.getLogger(__name__)

# Status labels used by the legacy front-end
LEGACY_STATUS_LABELS = {
    "disponible": SlotStatus.AVAILABLE,
    "reserve": SlotStatus.RESERVED,
    "réservé": SlotStatus.RESERVED,
    "indisponible": SlotStatus.UNAVAILABLE,
}


def parse_slot_status(value) -> SlotStatus:
    """Read a slot status, accepting the legacy French labels."""
    if isinstance(value, SlotStatus):
        return value
    label = str(value).strip().lower()
    if label in LEGACY_STATUS_LABELS:
        return LEGACY_STATUS_LABELS[label]
    try:
        return SlotStatus(label)
    except ValueError:
        allowed = ", ".join(s.value for s in SlotStatus)
        raise ValidationFailed(f"Unknown slot status {value!r}; expected one of: {allowed}")


def default_layout(day, blocked=None) -> list[SlotTemplate]:
    """Slot layout for ``day`` using the configured working hours."""
    return generate_time_slots(
        day,
        blocked,
        start=settings.SLOT_DAY_START,
        end=settings.SLOT_DAY_END,
        interval_minutes=settings.SLOT_INTERVAL_MINUTES,
    )


def _build_slots(creneau_id: UUID, templates: list[SlotTemplate]) -> list[TimeSlot]:
    return [
        TimeSlot(creneau_id=creneau_id, position=t.position, time=t.time, status=t.status)
        for t in templates
    ]


async def _require_agenda(db: AsyncSession, agenda_id: UUID) -> Agenda:
    agenda = await db.get(Agenda, agenda_id)
    if agenda is None:
        raise InvalidReference(f"Agenda {agenda_id} not found")
    return agenda


async def _find_creneau(db: AsyncSession, agenda_id: UUID, day, with_slots: bool = True) -> Creneau | None:
    query = (
        select(Creneau)
        .where(Creneau.agenda_id == agenda_id, Creneau.day == day)
        .execution_options(populate_existing=True)
    )
    if with_slots:
        query = query.options(selectinload(Creneau.time_slots))
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def _insert_creneau(db: AsyncSession, agenda_id: UUID, day, templates: list[SlotTemplate]) -> None:
    creneau = Creneau(agenda_id=agenda_id, day=day)
    db.add(creneau)
    await db.flush()
    db.add_all(_build_slots(creneau.id, templates))
    await db.commit()
    logger.info("Created day %s for agenda %s (%d slots)", day, agenda_id, len(templates))


async def _overwrite_creneau(db: AsyncSession, creneau: Creneau, templates: list[SlotTemplate]) -> None:
    reserved = await db.execute(
        select(func.count(TimeSlot.id)).where(
            TimeSlot.creneau_id == creneau.id,
            TimeSlot.status == SlotStatus.RESERVED,
        )
    )
    discarded = reserved.scalar_one()
    if discarded:
        logger.warning(
            "Re-generating day %s of agenda %s discards %d reservation(s)",
            creneau.day,
            creneau.agenda_id,
            discarded,
        )

    await db.execute(
        delete(TimeSlot)
        .where(TimeSlot.creneau_id == creneau.id)
        .execution_options(synchronize_session=False)
    )
    db.add_all(_build_slots(creneau.id, templates))
    creneau.updated_at = datetime.utcnow()
    await db.commit()
    logger.info("Overwrote day %s of agenda %s (%d slots)", creneau.day, creneau.agenda_id, len(templates))


async def generate_and_store(
    db: AsyncSession,
    agenda_id: UUID,
    day,
    blocked=None,
) -> tuple[Creneau, str]:
    """Generate the day's layout and upsert it.

    Returns ``(creneau, operation)`` where operation is ``"create"`` or
    ``"update"``. On update every existing entry is replaced, so live
    reservations on that day are lost.

    Raises:
        InvalidDate: unparseable or past day.
        InvalidReference: the agenda does not exist.
    """
    target = ensure_not_past(parse_day(day))
    await _require_agenda(db, agenda_id)
    templates = default_layout(target, blocked)

    existing = await _find_creneau(db, agenda_id, target, with_slots=False)
    if existing is None:
        try:
            await _insert_creneau(db, agenda_id, target, templates)
            return await _find_creneau(db, agenda_id, target), "create"
        except IntegrityError:
            await db.rollback()
            existing = await _find_creneau(db, agenda_id, target, with_slots=False)
            if existing is None:
                raise

    await _overwrite_creneau(db, existing, templates)
    return await _find_creneau(db, agenda_id, target), "update"


async def retrieve_or_create(db: AsyncSession, agenda_id: UUID, day) -> Creneau:
    """Return the existing day untouched, or persist the default layout."""
    target = parse_day(day)

    existing = await _find_creneau(db, agenda_id, target)
    if existing is not None:
        return existing

    await _require_agenda(db, agenda_id)
    try:
        await _insert_creneau(db, agenda_id, target, default_layout(target))
    except IntegrityError:
        await db.rollback()

    creneau = await _find_creneau(db, agenda_id, target)
    if creneau is None:
        raise NotFound(f"No slots for agenda {agenda_id} on {target}")
    return creneau


async def get_by_date(db: AsyncSession, agenda_id: UUID, day) -> Creneau:
    target = parse_day(day)
    creneau = await _find_creneau(db, agenda_id, target)
    if creneau is None:
        raise NotFound(f"No slots for agenda {agenda_id} on {target}")
    return creneau


async def filter_by_status(db: AsyncSession, agenda_id: UUID, day, status) -> tuple[Creneau, list[TimeSlot]]:
    """Entries of the day whose status is exactly ``status``, in layout order."""
    wanted = parse_slot_status(status)
    creneau = await get_by_date(db, agenda_id, day)
    return creneau, [slot for slot in creneau.time_slots if slot.status == wanted]


async def delete_creneau(db: AsyncSession, agenda_id: UUID, day) -> None:
    target = parse_day(day)
    creneau = await _find_creneau(db, agenda_id, target, with_slots=False)
    if creneau is None:
        raise NotFound(f"No slots for agenda {agenda_id} on {target}")

    await db.execute(
        delete(TimeSlot)
        .where(TimeSlot.creneau_id == creneau.id)
        .execution_options(synchronize_session=False)
    )
    await db.delete(creneau)
    await db.commit()
    logger.info("Deleted day %s of agenda %s", target, agenda_id)
