"""Pydantic schemas for agendas (calendars)."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.models.agenda import AgendaLocation, AgendaStatus
from app.schemas.common import CamelModel
from app.schemas.creneau import CreneauOut


class AgendaCreate(CamelModel):
    """Schema for creating (or fetching) a doctor's agenda for one day."""
    # Kept as a string so malformed dates surface as InvalidDate
    day: str = Field(alias="date")
    doctor_id: UUID
    location: Optional[AgendaLocation] = None


class AgendaStatusUpdate(CamelModel):
    status: AgendaStatus = Field(alias="statut")


class AgendaOut(CamelModel):
    id: UUID
    doctor_id: UUID
    day: date = Field(alias="date")
    status: AgendaStatus
    location: Optional[AgendaLocation] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AgendaDetail(AgendaOut):
    """Agenda with its days and their time slots."""
    creneaux: list[CreneauOut] = []


class AgendaDeleted(CamelModel):
    agenda_id: UUID
    deleted_days: int
