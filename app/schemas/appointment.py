"""Pydantic schemas for appointments (rendez-vous)."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.schemas.common import CamelModel


class BookingRequest(CamelModel):
    """Schema for booking a time slot. One of time_slot_id / time is required."""
    creneau_id: UUID
    time_slot_id: Optional[UUID] = None
    time: Optional[str] = None
    patient_id: UUID
    motif: Optional[str] = None


class CancelByIdRequest(CamelModel):
    user_id: UUID
    user_type: str
    reason: Optional[str] = Field(default=None, alias="motifAnnulation")


class CancelRequest(CancelByIdRequest):
    creneau_id: UUID
    time_slot_id: Optional[UUID] = None
    time: Optional[str] = None


class RescheduleRequest(CamelModel):
    """Schema for moving a reservation to another time of the same day."""
    creneau_id: UUID
    time_slot_id: Optional[UUID] = None
    time: Optional[str] = None
    new_time: str
    user_id: UUID
    user_type: str
    motif: Optional[str] = None


class AppointmentOut(CamelModel):
    """A reserved time slot seen as an appointment."""
    time_slot_id: UUID
    creneau_id: UUID
    agenda_id: UUID
    doctor_id: UUID
    patient_id: UUID
    day: date = Field(alias="date")
    time: str
    motif: Optional[str] = None
    reserved_at: Optional[datetime] = None
    status: str = Field(default="confirmed", alias="statut")
