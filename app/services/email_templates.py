"""Message templates for appointment notifications.

Each template renders a subject, an HTML body, a plain-text body and a short
SMS text for one (notification type, recipient) pair.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from app.core.config import settings
from app.models.notification import NotificationType, RecipientType

THEME = {
    "primary": "#3173b4",
    "doctor": "#2c3e50",
    "danger": "#c0392b",
    "box": "#f5f5f5",
    "muted": "#666666",
}


@dataclass
class MessageContext:
    patient_name: str
    doctor_name: str
    day: date
    time: str
    motif: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class RenderedMessage:
    subject: str
    html: str
    text: str
    sms: str


def format_day(day: date) -> str:
    return day.strftime("%A, %B %d, %Y")


def _html(title: str, greeting: str, intro: str, rows: list[tuple[str, str]], color: str, footer: str) -> str:
    details = "\n".join(f"<p><strong>{label}:</strong> {value}</p>" for label, value in rows)
    return f"""
        <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
                <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                    <h2 style="color: {color};">{title}</h2>

                    <p>{greeting}</p>

                    <p>{intro}</p>

                    <div style="background-color: {THEME['box']}; padding: 15px; border-radius: 5px; margin: 20px 0;">
                        {details}
                    </div>

                    <p style="color: {THEME['muted']}; font-size: 14px; margin-top: 40px;">
                        {footer}
                    </p>
                </div>
            </body>
        </html>
        """


def _text(title: str, greeting: str, intro: str, rows: list[tuple[str, str]], footer: str) -> str:
    details = "\n".join(f"{label}: {value}" for label, value in rows)
    return f"{title}\n\n{greeting}\n\n{intro}\n\n{details}\n\n{footer}\n"


def render_message(
    notification_type: NotificationType,
    recipient_type: RecipientType,
    ctx: MessageContext,
) -> RenderedMessage:
    """Render the message for one recipient of one notification."""
    clinic = settings.CLINIC_NAME
    when = f"{format_day(ctx.day)} at {ctx.time}"
    rows = [("Date", format_day(ctx.day)), ("Time", ctx.time)]

    if recipient_type == RecipientType.PATIENT:
        greeting = f"Hello {ctx.patient_name},"
        rows.append(("Doctor", ctx.doctor_name))
        footer = f"The {clinic} team"
        color = THEME["primary"]
    else:
        greeting = f"{ctx.doctor_name},"
        rows.append(("Patient", ctx.patient_name))
        footer = f"Sent by the {clinic} scheduling system"
        color = THEME["doctor"]

    if ctx.motif:
        rows.append(("Reason for visit", ctx.motif))

    if notification_type == NotificationType.CONFIRMATION:
        if recipient_type == RecipientType.PATIENT:
            title = "Appointment confirmed"
            subject = f"Your appointment on {format_day(ctx.day)} is confirmed"
            intro = f"Your appointment with {ctx.doctor_name} is confirmed."
            sms = f"{clinic}: your appointment with {ctx.doctor_name} on {when} is confirmed."
        else:
            title = "New appointment"
            subject = f"New appointment with {ctx.patient_name}"
            intro = f"{ctx.patient_name} booked an appointment with you."
            sms = f"{clinic}: new appointment with {ctx.patient_name} on {when}."

    elif notification_type == NotificationType.CANCELLATION:
        color = THEME["danger"]
        if ctx.reason:
            rows.append(("Cancellation reason", ctx.reason))
        if recipient_type == RecipientType.PATIENT:
            title = "Appointment cancelled"
            subject = f"Your appointment on {format_day(ctx.day)} was cancelled"
            intro = f"Your appointment with {ctx.doctor_name} has been cancelled."
            sms = f"{clinic}: your appointment with {ctx.doctor_name} on {when} was cancelled."
        else:
            title = "Appointment cancelled"
            subject = f"Appointment with {ctx.patient_name} cancelled"
            intro = f"The appointment with {ctx.patient_name} has been cancelled."
            sms = f"{clinic}: appointment with {ctx.patient_name} on {when} was cancelled."

    else:
        title = "Appointment reminder"
        subject = f"Reminder: appointment tomorrow at {ctx.time}"
        intro = f"This is a reminder of your appointment with {ctx.doctor_name}."
        sms = f"{clinic} reminder: appointment with {ctx.doctor_name} on {when}."

    return RenderedMessage(
        subject=subject,
        html=_html(title, greeting, intro, rows, color, footer),
        text=_text(title, greeting, intro, rows, footer),
        sms=sms,
    )
