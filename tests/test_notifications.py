"""Tests for the notification dispatcher and delivery history."""

from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import select

from app.models.notification import (
    Notification,
    NotificationChannel,
    NotificationStatus,
    NotificationType,
    RecipientType,
)
from app.services.booking import book_slot, cancel_slot
from app.services.email_templates import MessageContext, render_message
from app.services.notification_service import NotificationDispatcher, list_notifications

FUTURE_DAY = date.today() + timedelta(days=7)


@pytest.fixture
def email():
    sender = MagicMock()
    sender.send_email = AsyncMock(return_value=True)
    return sender


@pytest.fixture
def sms_sender():
    return AsyncMock(return_value=True)


@pytest.fixture
def dispatcher(session_factory, email, sms_sender):
    return NotificationDispatcher(session_factory=session_factory, email=email, sms_sender=sms_sender)


async def _rows(db):
    result = await db.execute(select(Notification).order_by(Notification.recipient_type, Notification.channel))
    return result.scalars().all()


@pytest.mark.asyncio
async def test_booking_confirms_patient_and_doctor(db, creneau, patient, doctor, dispatcher, email, sms_sender):
    await book_slot(db, creneau.id, patient.id, motif="Migraine", time="10:00", notifier=dispatcher)

    recipients = sorted(call.kwargs["to"] for call in email.send_email.await_args_list)
    assert recipients == sorted([patient.email, doctor.email])
    sms_sender.assert_awaited_once()
    assert sms_sender.await_args.args[0] == patient.phone
    assert "10:00" in sms_sender.await_args.args[1]

    rows = await _rows(db)
    assert len(rows) == 3
    assert {r.type for r in rows} == {NotificationType.CONFIRMATION}
    assert {r.status for r in rows} == {NotificationStatus.SENT}
    assert {(r.recipient_type, r.channel) for r in rows} == {
        (RecipientType.PATIENT, NotificationChannel.EMAIL),
        (RecipientType.PATIENT, NotificationChannel.SMS),
        (RecipientType.DOCTOR, NotificationChannel.EMAIL),
    }
    assert all(r.creneau_id == creneau.id for r in rows)


@pytest.mark.asyncio
async def test_failed_delivery_recorded(db, creneau, patient, dispatcher, sms_sender):
    sms_sender.return_value = False

    await book_slot(db, creneau.id, patient.id, time="10:00", notifier=dispatcher)

    rows = await _rows(db)
    failed = [r for r in rows if r.status == NotificationStatus.FAILED]
    assert len(failed) == 1
    assert failed[0].channel == NotificationChannel.SMS
    assert failed[0].error


@pytest.mark.asyncio
async def test_cancellation_reaches_former_occupant(db, creneau, patient, doctor, dispatcher, email):
    await book_slot(db, creneau.id, patient.id, time="10:00")

    await cancel_slot(db, creneau.id, doctor.id, "doctor", reason="Sick leave", time="10:00", notifier=dispatcher)

    subjects = {call.kwargs["to"]: call.kwargs["subject"] for call in email.send_email.await_args_list}
    assert "cancelled" in subjects[patient.email]
    patient_body = next(
        call.kwargs["plain_body"] for call in email.send_email.await_args_list if call.kwargs["to"] == patient.email
    )
    assert "Sick leave" in patient_body

    rows = await _rows(db)
    assert {r.type for r in rows} == {NotificationType.CANCELLATION}
    assert any(r.recipient_id == patient.id for r in rows)


@pytest.mark.asyncio
async def test_disabled_notifications_send_nothing(db, creneau, patient, dispatcher, email, sms_sender):
    with patch("app.services.notification_service.settings.NOTIFICATIONS_ENABLED", False):
        await book_slot(db, creneau.id, patient.id, time="10:00", notifier=dispatcher)

    email.send_email.assert_not_awaited()
    sms_sender.assert_not_awaited()
    assert await _rows(db) == []


@pytest.mark.asyncio
async def test_channel_exception_is_contained(db, creneau, patient, dispatcher, email):
    email.send_email.side_effect = RuntimeError("boom")

    slot = await book_slot(db, creneau.id, patient.id, time="10:00", notifier=dispatcher)

    assert slot.patient_id == patient.id


@pytest.mark.asyncio
async def test_send_reminders(db, creneau, patient, other_patient, dispatcher, email):
    await book_slot(db, creneau.id, patient.id, time="09:00")
    await book_slot(db, creneau.id, other_patient.id, time="15:00")

    count = await dispatcher.send_reminders(FUTURE_DAY.isoformat())

    assert count == 2
    assert sorted(call.kwargs["to"] for call in email.send_email.await_args_list) == sorted(
        [patient.email, other_patient.email]
    )
    rows = await _rows(db)
    assert {r.type for r in rows} == {NotificationType.REMINDER}
    assert {r.recipient_type for r in rows} == {RecipientType.PATIENT}


@pytest.mark.asyncio
async def test_no_reminders_for_empty_day(dispatcher, creneau):
    assert await dispatcher.send_reminders(FUTURE_DAY) == 0


@pytest.mark.asyncio
async def test_list_notifications_paginates(db, creneau, patient, dispatcher):
    await book_slot(db, creneau.id, patient.id, time="09:00", notifier=dispatcher)
    await book_slot(db, creneau.id, patient.id, time="09:30", notifier=dispatcher)

    items, total = await list_notifications(db, RecipientType.PATIENT, patient.id, page=1, page_size=3)
    assert total == 4
    assert len(items) == 3
    items, _ = await list_notifications(db, RecipientType.PATIENT, patient.id, page=2, page_size=3)
    assert len(items) == 1


@pytest.mark.asyncio
async def test_notifications_route(client, db, creneau, patient, doctor, dispatcher):
    await book_slot(db, creneau.id, patient.id, time="09:00", notifier=dispatcher)

    resp = await client.get(f"/api/v1/notifications/doctor/{doctor.id}")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total"] == 1
    assert data["notifications"][0]["channel"] == "email"
    assert data["notifications"][0]["type"] == "confirmation"

    bad = await client.get(f"/api/v1/notifications/nurse/{doctor.id}")
    assert bad.status_code == 422


def test_render_confirmation_for_doctor():
    message = render_message(
        NotificationType.CONFIRMATION,
        RecipientType.DOCTOR,
        MessageContext(patient_name="Lucas Martin", doctor_name="Dr Amina Benali", day=FUTURE_DAY, time="10:00", motif="Migraine"),
    )
    assert "Lucas Martin" in message.subject
    assert "Migraine" in message.html
    assert "10:00" in message.text
    assert message.sms
