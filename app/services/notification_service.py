"""Notification dispatch for booking transitions.

``NotificationDispatcher`` is the default hook handed to the booking engine.
It runs after the booking transaction has committed, in a session of its own,
and records one ``notifications`` row per attempted delivery.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.database import async_session
from app.models.agenda import Agenda, AgendaStatus
from app.models.creneau import Creneau, SlotStatus, TimeSlot
from app.models.doctor import Doctor
from app.models.notification import (
    Notification,
    NotificationChannel,
    NotificationStatus,
    NotificationType,
    RecipientType,
)
from app.models.patient import Patient
from app.services.email_service import email_service
from app.services.email_templates import MessageContext, RenderedMessage, render_message
from app.services.sms import send_sms
from app.utils.dates import parse_day

logger = logging.getLogger(__name__)


@dataclass
class _Delivery:
    slot: TimeSlot
    patient: Patient
    doctor: Doctor


class NotificationDispatcher:
    """Sends confirmation, cancellation and reminder messages.

    Args:
        session_factory: callable returning an ``AsyncSession`` context manager.
        email: object exposing ``async send_email(to, subject, html_body, plain_body)``.
        sms_sender: ``async (to, body) -> bool``.
    """

    def __init__(self, session_factory=None, email=None, sms_sender=None):
        self.session_factory = session_factory or async_session
        self.email = email or email_service
        self.sms_sender = sms_sender or send_sms

    async def on_booked(self, creneau_id: UUID, time_slot_id: UUID) -> None:
        await self._dispatch(NotificationType.CONFIRMATION, creneau_id, time_slot_id)

    async def on_cancelled(
        self,
        creneau_id: UUID,
        time_slot_id: UUID,
        patient_id: UUID,
        reason: str | None = None,
    ) -> None:
        await self._dispatch(
            NotificationType.CANCELLATION,
            creneau_id,
            time_slot_id,
            patient_id=patient_id,
            reason=reason,
        )

    async def send_reminders(self, day) -> int:
        """Remind every patient holding a reservation on ``day``.

        Returns the number of reservations reminded.
        """
        day = parse_day(day)
        if not settings.NOTIFICATIONS_ENABLED:
            logger.info("Notifications disabled; skipping reminders for %s", day)
            return 0

        async with self.session_factory() as db:
            result = await db.execute(
                select(TimeSlot)
                .join(Creneau, TimeSlot.creneau_id == Creneau.id)
                .join(Agenda, Creneau.agenda_id == Agenda.id)
                .where(
                    Creneau.day == day,
                    Agenda.status == AgendaStatus.ACTIVE,
                    TimeSlot.status == SlotStatus.RESERVED,
                )
                .options(selectinload(TimeSlot.creneau).selectinload(Creneau.agenda).selectinload(Agenda.doctor))
                .order_by(TimeSlot.position)
            )
            slots = result.scalars().all()

            count = 0
            for slot in slots:
                patient = await db.get(Patient, slot.patient_id)
                if patient is None:
                    continue
                delivery = _Delivery(slot=slot, patient=patient, doctor=slot.creneau.agenda.doctor)
                await self._send_to(db, NotificationType.REMINDER, RecipientType.PATIENT, delivery)
                count += 1

            await db.commit()

        logger.info("Sent %d reminder(s) for %s", count, day)
        return count

    async def _dispatch(
        self,
        notification_type: NotificationType,
        creneau_id: UUID,
        time_slot_id: UUID,
        patient_id: UUID | None = None,
        reason: str | None = None,
    ) -> None:
        if not settings.NOTIFICATIONS_ENABLED:
            logger.debug("Notifications disabled; %s for slot %s not sent", notification_type.value, time_slot_id)
            return

        async with self.session_factory() as db:
            delivery = await self._resolve(db, time_slot_id, patient_id)
            if delivery is None:
                logger.warning(
                    "Cannot send %s for slot %s on day %s: slot, patient or doctor missing",
                    notification_type.value,
                    time_slot_id,
                    creneau_id,
                )
                return

            for recipient_type in (RecipientType.PATIENT, RecipientType.DOCTOR):
                await self._send_to(db, notification_type, recipient_type, delivery, reason=reason)

            await db.commit()

    async def _resolve(self, db: AsyncSession, time_slot_id: UUID, patient_id: UUID | None) -> _Delivery | None:
        result = await db.execute(
            select(TimeSlot)
            .where(TimeSlot.id == time_slot_id)
            .options(selectinload(TimeSlot.creneau).selectinload(Creneau.agenda).selectinload(Agenda.doctor))
        )
        slot = result.scalar_one_or_none()
        if slot is None:
            return None

        occupant = patient_id or slot.patient_id
        patient = await db.get(Patient, occupant) if occupant else None
        doctor = slot.creneau.agenda.doctor
        if patient is None or doctor is None:
            return None
        return _Delivery(slot=slot, patient=patient, doctor=doctor)

    async def _send_to(
        self,
        db: AsyncSession,
        notification_type: NotificationType,
        recipient_type: RecipientType,
        delivery: _Delivery,
        reason: str | None = None,
    ) -> None:
        recipient = delivery.patient if recipient_type == RecipientType.PATIENT else delivery.doctor
        message = render_message(
            notification_type,
            recipient_type,
            MessageContext(
                patient_name=delivery.patient.display_name,
                doctor_name=delivery.doctor.display_name,
                day=delivery.slot.creneau.day,
                time=delivery.slot.time,
                motif=delivery.slot.motif,
                reason=reason,
            ),
        )

        if recipient.email:
            sent = await self.email.send_email(
                to=recipient.email,
                subject=message.subject,
                html_body=message.html,
                plain_body=message.text,
            )
            self._record(db, notification_type, recipient_type, recipient.id, delivery, NotificationChannel.EMAIL, message, sent)

        # Text messages go to patients only
        if recipient_type == RecipientType.PATIENT and recipient.phone:
            sent = await self.sms_sender(recipient.phone, message.sms)
            self._record(db, notification_type, recipient_type, recipient.id, delivery, NotificationChannel.SMS, message, sent)

    def _record(
        self,
        db: AsyncSession,
        notification_type: NotificationType,
        recipient_type: RecipientType,
        recipient_id: UUID,
        delivery: _Delivery,
        channel: NotificationChannel,
        message: RenderedMessage,
        sent: bool,
    ) -> None:
        db.add(
            Notification(
                recipient_id=recipient_id,
                recipient_type=recipient_type,
                creneau_id=delivery.slot.creneau_id,
                time_slot_id=delivery.slot.id,
                type=notification_type,
                channel=channel,
                subject=message.subject if channel == NotificationChannel.EMAIL else None,
                content=message.text if channel == NotificationChannel.EMAIL else message.sms,
                status=NotificationStatus.SENT if sent else NotificationStatus.FAILED,
                error=None if sent else f"{channel.value} delivery failed",
            )
        )
        log = logger.info if sent else logger.warning
        log(
            "%s %s to %s %s: %s",
            notification_type.value.capitalize(),
            channel.value,
            recipient_type.value,
            recipient_id,
            "sent" if sent else "failed",
        )


async def list_notifications(
    db: AsyncSession,
    recipient_type: RecipientType,
    recipient_id: UUID,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Notification], int]:
    """Delivery history for one recipient, newest first."""
    criteria = [Notification.recipient_type == recipient_type, Notification.recipient_id == recipient_id]

    total = (await db.execute(select(func.count(Notification.id)).where(*criteria))).scalar_one()
    result = await db.execute(
        select(Notification)
        .where(*criteria)
        .order_by(Notification.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total
