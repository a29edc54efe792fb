"""Appointment (rendez-vous) endpoints: booking, cancellation and listings."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_notifier
from app.schemas.appointment import (
    AppointmentOut,
    BookingRequest,
    CancelByIdRequest,
    CancelRequest,
    RescheduleRequest,
)
from app.schemas.common import ApiResponse
from app.schemas.creneau import TimeSlotOut
from app.services import appointments, booking
from app.services.booking import BookingNotifier

router = APIRouter()
logger = logging.getLogger(__name__)


# ============================================================================
# TRANSITIONS
# ============================================================================

@router.post("", response_model=ApiResponse[TimeSlotOut], status_code=status.HTTP_201_CREATED)
@router.post("/prendre", response_model=ApiResponse[TimeSlotOut], status_code=status.HTTP_201_CREATED)
async def book(
    payload: BookingRequest,
    db: AsyncSession = Depends(get_db),
    notifier: BookingNotifier = Depends(get_notifier),
):
    """Book an available time slot for a patient."""
    slot = await booking.book_slot(
        db,
        payload.creneau_id,
        payload.patient_id,
        motif=payload.motif,
        time_slot_id=payload.time_slot_id,
        time=payload.time,
        notifier=notifier,
    )
    return ApiResponse(message=f"Appointment booked at {slot.time}", data=TimeSlotOut.model_validate(slot))


@router.post("/annuler", response_model=ApiResponse[TimeSlotOut])
async def cancel(
    payload: CancelRequest,
    db: AsyncSession = Depends(get_db),
    notifier: BookingNotifier = Depends(get_notifier),
):
    slot = await booking.cancel_slot(
        db,
        payload.creneau_id,
        payload.user_id,
        payload.user_type,
        reason=payload.reason,
        time_slot_id=payload.time_slot_id,
        time=payload.time,
        notifier=notifier,
    )
    return ApiResponse(message="Appointment cancelled", data=TimeSlotOut.model_validate(slot))


@router.patch("/annuler/{time_slot_id}", response_model=ApiResponse[TimeSlotOut])
async def cancel_by_id(
    time_slot_id: UUID,
    payload: CancelByIdRequest,
    db: AsyncSession = Depends(get_db),
    notifier: BookingNotifier = Depends(get_notifier),
):
    """Cancel an appointment addressed by its time slot id alone."""
    located = await booking.locate_slot(db, time_slot_id)
    slot = await booking.cancel_slot(
        db,
        located.creneau_id,
        payload.user_id,
        payload.user_type,
        reason=payload.reason,
        time_slot_id=time_slot_id,
        notifier=notifier,
    )
    return ApiResponse(message="Appointment cancelled", data=TimeSlotOut.model_validate(slot))


@router.patch("/modifier", response_model=ApiResponse[TimeSlotOut])
async def reschedule(
    payload: RescheduleRequest,
    db: AsyncSession = Depends(get_db),
    notifier: BookingNotifier = Depends(get_notifier),
):
    """Move an appointment to another time of the same day."""
    slot = await booking.reschedule_slot(
        db,
        payload.creneau_id,
        payload.user_id,
        payload.user_type,
        payload.new_time,
        time_slot_id=payload.time_slot_id,
        time=payload.time,
        motif=payload.motif,
        notifier=notifier,
    )
    return ApiResponse(message=f"Appointment moved to {slot.time}", data=TimeSlotOut.model_validate(slot))


# ============================================================================
# LISTINGS
# ============================================================================

def _listing(views) -> ApiResponse[list[AppointmentOut]]:
    return ApiResponse(
        message=f"{len(views)} appointment(s)",
        data=[AppointmentOut.model_validate(v) for v in views],
    )


@router.get("", response_model=ApiResponse[list[AppointmentOut]])
async def list_all(
    filtre: Optional[str] = Query(None, description="past / future (passe / futur)"),
    db: AsyncSession = Depends(get_db),
):
    return _listing(await appointments.list_appointments(db, when=filtre))


@router.get("/medecin/{doctor_id}", response_model=ApiResponse[list[AppointmentOut]])
async def list_for_doctor(
    doctor_id: UUID,
    filtre: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return _listing(await appointments.list_appointments(db, doctor_id=doctor_id, when=filtre))


@router.get("/patient/{patient_id}", response_model=ApiResponse[list[AppointmentOut]])
async def list_for_patient(
    patient_id: UUID,
    filtre: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return _listing(await appointments.list_appointments(db, patient_id=patient_id, when=filtre))


@router.get("/{time_slot_id}", response_model=ApiResponse[AppointmentOut])
async def get_appointment(time_slot_id: UUID, db: AsyncSession = Depends(get_db)):
    view = await appointments.get_appointment(db, time_slot_id)
    return ApiResponse(message="Appointment found", data=AppointmentOut.model_validate(view))
