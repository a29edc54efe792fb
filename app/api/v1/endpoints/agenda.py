"""Agenda (calendar) endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.agenda import (
    AgendaCreate,
    AgendaDeleted,
    AgendaDetail,
    AgendaOut,
    AgendaStatusUpdate,
)
from app.schemas.common import ApiResponse
from app.services import agenda_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=ApiResponse[AgendaOut], status_code=status.HTTP_201_CREATED)
async def create_agenda(
    payload: AgendaCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Return the doctor's agenda for the day, creating it if needed."""
    agenda, created = await agenda_service.get_or_create_agenda(
        db, payload.doctor_id, payload.day, location=payload.location
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return ApiResponse(
        message="Agenda created" if created else "Agenda already exists",
        data=AgendaOut.model_validate(agenda),
    )


@router.get("/{agenda_id}", response_model=ApiResponse[AgendaDetail])
async def get_agenda(agenda_id: UUID, db: AsyncSession = Depends(get_db)):
    agenda = await agenda_service.get_agenda(db, agenda_id)
    return ApiResponse(message="Agenda found", data=AgendaDetail.model_validate(agenda))


@router.patch("/{agenda_id}/statut", response_model=ApiResponse[AgendaOut])
async def update_agenda_status(
    agenda_id: UUID,
    payload: AgendaStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Activate or deactivate an agenda."""
    agenda = await agenda_service.set_agenda_status(db, agenda_id, payload.status)
    return ApiResponse(message=f"Agenda is now {agenda.status.value}", data=AgendaOut.model_validate(agenda))


@router.delete("/{agenda_id}", response_model=ApiResponse[AgendaDeleted])
async def delete_agenda(agenda_id: UUID, db: AsyncSession = Depends(get_db)):
    """Admin cleanup: remove the agenda, its days and their slots."""
    deleted_days = await agenda_service.delete_agenda(db, agenda_id)
    return ApiResponse(
        message="Agenda deleted",
        data=AgendaDeleted(agenda_id=agenda_id, deleted_days=deleted_days),
    )
