"""
Notification composition and best-effort delivery.
"""
from datetime import date

import pytest

from app.core.config import settings
from app.models.principal import Role
from app.services import email_service
from app.services.email_service import (
    AppointmentNotice,
    build_cancellation_messages,
    build_confirmation_messages,
    format_appointment_day,
    send_appointment_confirmation_emails,
)

from conftest import auth_headers, make_patient, make_psychiatrist, upcoming

NOTICE = AppointmentNotice(
    patient_name="Alex <Patient>",
    patient_email="alex@example.com",
    psychiatrist_name="Sam Doctor",
    psychiatrist_email="sam@example.com",
    appointment_date=date(2024, 6, 10),
    time_slot="9:00 AM - 9:30 AM",
)


@pytest.fixture
def smtp_configured(monkeypatch):
    monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(settings, "smtp_user", "mailer")
    monkeypatch.setattr(settings, "smtp_password", "pw")
    monkeypatch.setattr(settings, "from_email", "noreply@example.com")


@pytest.fixture
def failing_smtp(monkeypatch):
    attempts: list[str] = []

    class RefusingSMTP:
        def __init__(self, host, port):
            attempts.append(host)
            raise ConnectionRefusedError("smtp down")

    monkeypatch.setattr(email_service.smtplib, "SMTP", RefusingSMTP)
    return attempts


def test_format_appointment_day():
    assert format_appointment_day(date(2024, 6, 10)) == "Monday, June 10, 2024"
    assert format_appointment_day(date(2024, 6, 1)) == "Saturday, June 1, 2024"


def test_confirmation_goes_to_both_parties():
    messages = build_confirmation_messages(NOTICE)

    assert [to for to, _, _ in messages] == ["alex@example.com", "sam@example.com"]
    _, subject, html = messages[0]
    assert subject == f"{settings.site_name} – Your Appointment Confirmation"
    assert "Monday, June 10, 2024" in html
    assert "9:00 AM - 9:30 AM" in html
    assert "Dr. Sam Doctor" in html
    assert "Alex &lt;Patient&gt;" in html
    assert "<Patient>" not in html
    assert messages[1][1] == f"{settings.site_name} – New Appointment Scheduled"


@pytest.mark.parametrize(
    "cancelled_by,patient_phrase,psychiatrist_phrase",
    [
        ("patient", "at your request", "by the patient"),
        ("psychiatrist", "by the psychiatrist", "at your request"),
    ],
)
def test_cancellation_wording_depends_on_who_cancelled(cancelled_by, patient_phrase, psychiatrist_phrase):
    (_, _, to_patient), (_, _, to_psychiatrist) = build_cancellation_messages(NOTICE, cancelled_by)
    assert patient_phrase in to_patient
    assert psychiatrist_phrase in to_psychiatrist


def test_send_is_skipped_when_smtp_not_configured(monkeypatch, failing_smtp):
    monkeypatch.setattr(settings, "smtp_host", "")
    assert email_service._send_email_sync("a@example.com", "s", "<p>x</p>") is False
    assert failing_smtp == []


def test_smtp_failure_never_raises(smtp_configured, failing_smtp):
    assert email_service._send_email_sync("a@example.com", "s", "<p>x</p>") is False
    send_appointment_confirmation_emails(NOTICE)
    assert len(failing_smtp) == 3


@pytest.mark.asyncio
async def test_booking_succeeds_when_smtp_is_down(client, session, smtp_configured, failing_smtp):
    patient = await make_patient(session)
    doctor = await make_psychiatrist(session)

    resp = await client.post(
        "/api/v1/appointments",
        json={"psychiatristId": doctor.id, "date": upcoming(1).isoformat(), "timeSlot": "9:00 AM - 9:30 AM"},
        headers=auth_headers(patient.id, Role.patient),
    )

    assert resp.status_code == 201
    assert failing_smtp == ["smtp.example.com", "smtp.example.com"]
