from sqlalchemy import Column, String, Text, DateTime, Enum, func
from sqlalchemy.dialects.postgresql import UUID
import uuid
import enum

from app.core.database import Base


class NotificationType(str, enum.Enum):
    CONFIRMATION = "confirmation"
    CANCELLATION = "cancellation"
    REMINDER = "reminder"


class NotificationChannel(str, enum.Enum):
    EMAIL = "email"
    SMS = "sms"


class NotificationStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class RecipientType(str, enum.Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"


def _values(e):
    return [m.value for m in e]


class Notification(Base):
    """Delivery record for one message sent about a time slot.

    Slot and day ids are kept as plain columns so the history survives the
    deletion of the day it refers to.
    """

    __tablename__ = "notifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    recipient_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    recipient_type = Column(Enum(RecipientType, name="recipient_type", values_callable=_values), nullable=False)
    creneau_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    time_slot_id = Column(UUID(as_uuid=True), nullable=True)
    type = Column(Enum(NotificationType, name="notification_type", values_callable=_values), nullable=False)
    channel = Column(Enum(NotificationChannel, name="notification_channel", values_callable=_values), nullable=False)
    subject = Column(String, nullable=True)
    content = Column(Text, nullable=False)
    status = Column(
        Enum(NotificationStatus, name="notification_status", values_callable=_values),
        nullable=False,
        default=NotificationStatus.PENDING,
    )
    error = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
