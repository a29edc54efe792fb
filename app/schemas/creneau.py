"""Pydantic schemas for slot-bearing days and their time slots."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.models.creneau import ActorType, SlotStatus
from app.schemas.common import CamelModel


class CreneauGenerate(CamelModel):
    """Schema for generating (or re-generating) a day's layout."""
    agenda_id: UUID
    day: str = Field(alias="date")
    blocked: list[str] = Field(default_factory=list, alias="heuresIndisponibles")


class CreneauLookup(CamelModel):
    agenda_id: UUID
    day: str = Field(alias="date")


class TimeSlotOut(CamelModel):
    id: UUID
    position: int
    time: str
    status: SlotStatus
    patient_id: Optional[UUID] = None
    motif: Optional[str] = None
    reserved_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_by_id: Optional[UUID] = None
    cancelled_by_type: Optional[ActorType] = None


class CreneauOut(CamelModel):
    id: UUID
    agenda_id: UUID
    day: date = Field(alias="date")
    time_slots: list[TimeSlotOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreneauFiltered(CamelModel):
    """Time slots of one day matching a single status."""
    creneau_id: UUID
    day: date = Field(alias="date")
    status: SlotStatus = Field(alias="statut")
    time_slots: list[TimeSlotOut]
