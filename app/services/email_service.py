import logging
import smtplib
from dataclasses import dataclass
from datetime import date
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.core.config import settings
from app.models.appointment import Appointment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppointmentNotice:
    """Plain snapshot of an appointment, safe to hand to a background task after the session closes."""

    patient_name: str
    patient_email: str
    psychiatrist_name: str
    psychiatrist_email: str
    appointment_date: date
    time_slot: str


def notice_from_appointment(a: Appointment) -> AppointmentNotice:
    return AppointmentNotice(
        patient_name=a.patient_name,
        patient_email=a.patient_email,
        psychiatrist_name=a.psychiatrist_name,
        psychiatrist_email=a.psychiatrist_email,
        appointment_date=a.date.date(),
        time_slot=a.time_slot,
    )


def _send_email_sync(to_email: str, subject: str, html_body: str) -> bool:
    """Send email via SMTP (blocking). Use from background task. Never raises."""
    if not settings.email_enabled:
        logger.debug("Email disabled (SMTP not configured), skipping send")
        return False
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.from_name} <{settings.from_email}>"
    msg["To"] = to_email
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.from_email, [to_email], msg.as_string())
        logger.info("Email sent to %s", to_email)
        return True
    except Exception as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)
        return False


def _html_escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def format_appointment_day(d: date) -> str:
    """Calendar day as shown to people, e.g. "Monday, June 10, 2024"."""
    return f"{d.strftime('%A, %B')} {d.day}, {d.year}"


def _render(title: str, greeting: str, lead: str, notice: AppointmentNotice, closing: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
</head>
<body style="margin:0;padding:24px;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;color:#111827;">
  <h1 style="font-size:22px;font-weight:600;">{title}</h1>
  <p>{greeting}</p>
  <p>{lead}</p>
  <p><strong>Date:</strong> {format_appointment_day(notice.appointment_date)}</p>
  <p><strong>Time:</strong> {_html_escape(notice.time_slot)} (UTC)</p>
  <p>{closing}</p>
  <p style="color:#6b7280;font-size:13px;">Best regards,<br>{settings.site_name} &middot; {settings.contact_email}</p>
</body>
</html>
"""


def build_confirmation_messages(notice: AppointmentNotice) -> list[tuple[str, str, str]]:
    """(to_email, subject, html) for the patient and the psychiatrist."""
    patient = _html_escape(notice.patient_name)
    doctor = _html_escape(notice.psychiatrist_name)
    return [
        (
            notice.patient_email,
            f"{settings.site_name} – Your Appointment Confirmation",
            _render(
                "Appointment Confirmation",
                f"Dear {patient},",
                f"Your appointment with Dr. {doctor} has been scheduled for:",
                notice,
                "Thank you for using our service.",
            ),
        ),
        (
            notice.psychiatrist_email,
            f"{settings.site_name} – New Appointment Scheduled",
            _render(
                "New Appointment",
                f"Dear Dr. {doctor},",
                f"A new appointment has been scheduled with patient {patient}:",
                notice,
                "Thank you for your service.",
            ),
        ),
    ]


def build_cancellation_messages(notice: AppointmentNotice, cancelled_by: str) -> list[tuple[str, str, str]]:
    patient = _html_escape(notice.patient_name)
    doctor = _html_escape(notice.psychiatrist_name)
    by_psychiatrist = cancelled_by == "psychiatrist"
    subject = f"{settings.site_name} – Appointment Cancellation Notice"
    return [
        (
            notice.patient_email,
            subject,
            _render(
                "Appointment Cancellation",
                f"Dear {patient},",
                f"Your appointment with Dr. {doctor} has been cancelled "
                f"{'by the psychiatrist' if by_psychiatrist else 'at your request'}:",
                notice,
                "If you did not request this cancellation, please contact our support team.",
            ),
        ),
        (
            notice.psychiatrist_email,
            subject,
            _render(
                "Appointment Cancellation",
                f"Dear Dr. {doctor},",
                f"The appointment with patient {patient} has been cancelled "
                f"{'at your request' if by_psychiatrist else 'by the patient'}:",
                notice,
                "This time slot is now available for other appointments.",
            ),
        ),
    ]


def _deliver(kind: str, messages: list[tuple[str, str, str]]) -> int:
    sent = 0
    for to_email, subject, html in messages:
        if _send_email_sync(to_email, subject, html):
            sent += 1
    logger.debug("%s notifications sent: %d/%d", kind, sent, len(messages))
    return sent


def send_appointment_confirmation_emails(notice: AppointmentNotice) -> None:
    """Compose and send booking confirmations to both parties (call from background task)."""
    try:
        _deliver("Confirmation", build_confirmation_messages(notice))
    except Exception as e:
        logger.exception("Appointment confirmation notification failed: %s", e)


def send_appointment_cancellation_emails(notice: AppointmentNotice, cancelled_by: str) -> None:
    """Compose and send cancellation notices to both parties (call from background task)."""
    try:
        _deliver("Cancellation", build_cancellation_messages(notice, cancelled_by))
    except Exception as e:
        logger.exception("Appointment cancellation notification failed: %s", e)
