"""Slot-bearing day (creneau) and its time-slot entries.

A creneau is the unit of truth for one calendar day: it owns an ordered list
of ``TimeSlot`` rows. Entries are never addressed outside their day except by
their identifier; deleting the day deletes them.
"""

from sqlalchemy import (
    Column,
    String,
    DateTime,
    Date,
    Integer,
    Text,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.core.database import Base


class SlotStatus(str, enum.Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    UNAVAILABLE = "unavailable"


class ActorType(str, enum.Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


class Creneau(Base):
    __tablename__ = "creneaux"
    __table_args__ = (
        UniqueConstraint("agenda_id", "day", name="uq_creneaux_agenda_day"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    agenda_id = Column(UUID(as_uuid=True), ForeignKey("agendas.id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(Date, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    agenda = relationship("Agenda", back_populates="creneaux")
    time_slots = relationship(
        "TimeSlot",
        back_populates="creneau",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TimeSlot.position",
    )


class TimeSlot(Base):
    __tablename__ = "time_slots"
    __table_args__ = (
        UniqueConstraint("creneau_id", "time", name="uq_time_slots_creneau_time"),
        # occupant is set if and only if the slot is reserved
        CheckConstraint(
            "(status = 'reserved') = (patient_id IS NOT NULL)",
            name="ck_time_slots_occupant_matches_status",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    creneau_id = Column(UUID(as_uuid=True), ForeignKey("creneaux.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    time = Column(String(5), nullable=False)  # "08:00", "08:30", ...
    status = Column(
        SQLEnum(SlotStatus, name="slot_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SlotStatus.AVAILABLE,
        index=True,
    )

    # Reservation
    patient_id = Column(UUID(as_uuid=True), ForeignKey("patients.id"), nullable=True, index=True)
    motif = Column(Text, nullable=True)
    reserved_at = Column(DateTime, nullable=True)

    # Last cancellation
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_by_id = Column(UUID(as_uuid=True), nullable=True)
    cancelled_by_type = Column(
        SQLEnum(ActorType, name="actor_type", values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )

    # Relationships
    creneau = relationship("Creneau", back_populates="time_slots")
    patient = relationship("Patient")
