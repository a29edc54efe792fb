"""Slot-bearing day (creneau) endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.common import ApiResponse
from app.schemas.creneau import (
    CreneauFiltered,
    CreneauGenerate,
    CreneauLookup,
    CreneauOut,
    TimeSlotOut,
)
from app.services import creneau_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/genererEtEnregistrer", response_model=ApiResponse[CreneauOut])
async def generate_and_store(
    payload: CreneauGenerate,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Generate the day's slots and save them.

    An existing day is overwritten, reservations included.
    """
    creneau, operation = await creneau_service.generate_and_store(
        db, payload.agenda_id, payload.day, payload.blocked
    )
    if operation == "create":
        response.status_code = status.HTTP_201_CREATED
        message = "Slots created"
    else:
        message = "Slots updated"
    return ApiResponse(message=message, data=CreneauOut.model_validate(creneau))


@router.post("/recupererOuCreer", response_model=ApiResponse[CreneauOut])
async def retrieve_or_create(payload: CreneauLookup, db: AsyncSession = Depends(get_db)):
    """Return the day's slots, creating the default layout if none exist."""
    creneau = await creneau_service.retrieve_or_create(db, payload.agenda_id, payload.day)
    return ApiResponse(message="Slots ready", data=CreneauOut.model_validate(creneau))


@router.get("/parDate/{agenda_id}/{day}", response_model=ApiResponse[CreneauOut])
async def get_by_date(agenda_id: UUID, day: str, db: AsyncSession = Depends(get_db)):
    creneau = await creneau_service.get_by_date(db, agenda_id, day)
    return ApiResponse(message="Slots found", data=CreneauOut.model_validate(creneau))


@router.get("/filtrer/{agenda_id}/{day}/{slot_status}", response_model=ApiResponse[CreneauFiltered])
async def filter_by_status(
    agenda_id: UUID,
    day: str,
    slot_status: str,
    db: AsyncSession = Depends(get_db),
):
    """Slots of the day with exactly the given status."""
    wanted = creneau_service.parse_slot_status(slot_status)
    creneau, slots = await creneau_service.filter_by_status(db, agenda_id, day, wanted)
    return ApiResponse(
        message=f"{len(slots)} slot(s) {wanted.value}",
        data=CreneauFiltered(
            creneau_id=creneau.id,
            day=creneau.day,
            status=wanted,
            time_slots=[TimeSlotOut.model_validate(slot) for slot in slots],
        ),
    )


@router.delete("/supprimer", response_model=ApiResponse[None])
async def delete_creneau(payload: CreneauLookup, db: AsyncSession = Depends(get_db)):
    await creneau_service.delete_creneau(db, payload.agenda_id, payload.day)
    return ApiResponse(message="Slots deleted")
