"""Calendar (agenda): one doctor's working day."""

from sqlalchemy import Column, String, DateTime, Date, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.core.database import Base


class AgendaStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AgendaLocation(str, enum.Enum):
    CABINET_A = "Cabinet A"
    CABINET_B = "Cabinet B"
    ONLINE = "En ligne"


class Agenda(Base):
    __tablename__ = "agendas"
    __table_args__ = (
        UniqueConstraint("doctor_id", "day", name="uq_agendas_doctor_day"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    doctor_id = Column(UUID(as_uuid=True), ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(Date, nullable=False, index=True)
    status = Column(
        SQLEnum(AgendaStatus, name="agenda_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AgendaStatus.ACTIVE,
    )
    location = Column(
        SQLEnum(AgendaLocation, name="agenda_location", values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    doctor = relationship("Doctor", back_populates="agendas")
    creneaux = relationship(
        "Creneau",
        back_populates="agenda",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Creneau.day",
    )
