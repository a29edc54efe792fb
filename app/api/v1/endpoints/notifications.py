"""Notification delivery history endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.notification import RecipientType
from app.schemas.common import ApiResponse
from app.schemas.notification import NotificationList, NotificationOut
from app.services.notification_service import list_notifications

router = APIRouter()


@router.get("/{recipient_type}/{recipient_id}", response_model=ApiResponse[NotificationList])
async def get_notifications(
    recipient_type: RecipientType,
    recipient_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Messages sent to a patient or doctor, newest first."""
    items, total = await list_notifications(db, recipient_type, recipient_id, page=page, page_size=page_size)
    return ApiResponse(
        message=f"{total} notification(s)",
        data=NotificationList(
            notifications=[NotificationOut.model_validate(n) for n in items],
            total=total,
            page=page,
            page_size=page_size,
        ),
    )
