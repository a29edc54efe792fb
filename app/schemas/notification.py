"""Pydantic schemas for notification delivery history."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from app.models.notification import (
    NotificationChannel,
    NotificationStatus,
    NotificationType,
    RecipientType,
)
from app.schemas.common import CamelModel


class NotificationOut(CamelModel):
    id: UUID
    recipient_id: UUID
    recipient_type: RecipientType
    creneau_id: Optional[UUID] = None
    time_slot_id: Optional[UUID] = None
    type: NotificationType
    channel: NotificationChannel
    subject: Optional[str] = None
    content: str
    status: NotificationStatus
    error: Optional[str] = None
    created_at: Optional[datetime] = None


class NotificationList(CamelModel):
    """Paginated delivery history."""
    notifications: list[NotificationOut]
    total: int
    page: int
    page_size: int
