import logging
from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    BookingValidationError,
    DoublyBookedError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PastDateError,
    PastTimeError,
    ProviderUnavailableError,
    SlotTakenError,
)
from app.models.appointment import (
    Appointment,
    AppointmentStatus,
    PatientSummary,
    PsychiatristSummary,
)
from app.models.patient import Patient
from app.models.principal import Principal
from app.models.psychiatrist import Psychiatrist
from app.services.availability_service import (
    compute_slots,
    normalize_weekday,
    parse_slot_start,
    utc_now_naive,
    weekday_name,
)
from app.services.slot_service import appointment_day, find_active_appointment

logger = logging.getLogger(__name__)


def _to_naive_utc(dt: datetime) -> datetime:
    """Convert to naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    if dt.tzinfo is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def parse_appointment_date(value: str | date | datetime) -> date:
    """UTC calendar day of an ISO date or datetime ("2024-06-10", "2024-06-10T00:00:00.000Z")."""
    if isinstance(value, datetime):
        return _to_naive_utc(value).date()
    if isinstance(value, date):
        return value
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    return _to_naive_utc(parsed).date()


async def book_appointment(
    session: AsyncSession,
    patient_id: int,
    psychiatrist_id: int | None,
    date_value: str | date | datetime | None,
    time_slot: str | None,
    now: datetime | None = None,
) -> Appointment:
    if not psychiatrist_id or not date_value or not time_slot:
        raise BookingValidationError()
    try:
        day = parse_appointment_date(date_value)
    except (ValueError, OverflowError) as e:
        raise BookingValidationError("Date must be an ISO-8601 date or datetime") from e
    try:
        slot_start = parse_slot_start(time_slot)
    except ValueError as e:
        raise BookingValidationError("Time slot must look like '9:00 AM - 9:30 AM'") from e

    patient = await session.get(Patient, patient_id)
    psychiatrist = await session.get(Psychiatrist, psychiatrist_id)
    if not patient or not psychiatrist:
        raise NotFoundError("Patient or psychiatrist not found")

    now = _to_naive_utc(now) if now else utc_now_naive()
    today = now.date()
    if day < today:
        raise PastDateError()
    if day == today and datetime.combine(day, time()) + timedelta(minutes=slot_start) < now:
        raise PastTimeError()

    if not psychiatrist.has_availability:
        raise ProviderUnavailableError("Psychiatrist has not set their availability")
    working_days = {normalize_weekday(d) for d in psychiatrist.working_days or []}
    if weekday_name(day) not in working_days:
        raise ProviderUnavailableError()
    if time_slot not in compute_slots(psychiatrist.start_time, psychiatrist.end_time):
        raise ProviderUnavailableError("Time slot is outside the psychiatrist's working hours")

    # Fast, friendly errors; the partial unique indexes are the real guarantee.
    if await find_active_appointment(session, day, time_slot, psychiatrist_id=psychiatrist_id):
        raise SlotTakenError()
    if await find_active_appointment(session, day, time_slot, patient_id=patient_id):
        raise DoublyBookedError()

    appointment = Appointment(
        patient_id=patient_id,
        psychiatrist_id=psychiatrist_id,
        date=appointment_day(day),
        time_slot=time_slot,
        status=AppointmentStatus.scheduled.value,
        patient_name=patient.name,
        patient_email=patient.email,
        psychiatrist_name=psychiatrist.name,
        psychiatrist_email=psychiatrist.email,
    )
    session.add(appointment)
    try:
        await session.flush()
    except IntegrityError as e:
        await session.rollback()
        logger.info(
            "Booking lost race: psychiatrist=%s patient=%s date=%s slot=%s",
            psychiatrist_id, patient_id, day, time_slot,
        )
        if await find_active_appointment(session, day, time_slot, psychiatrist_id=psychiatrist_id):
            raise SlotTakenError() from e
        if await find_active_appointment(session, day, time_slot, patient_id=patient_id):
            raise DoublyBookedError() from e
        raise
    await session.refresh(appointment)
    logger.info(
        "Appointment %s booked: psychiatrist=%s patient=%s date=%s slot=%s",
        appointment.id, psychiatrist_id, patient_id, day, time_slot,
    )
    return appointment


def _is_party(appointment: Appointment, principal: Principal) -> bool:
    if principal.is_patient:
        return appointment.patient_id == principal.id
    if principal.is_psychiatrist:
        return appointment.psychiatrist_id == principal.id
    return False


async def cancel_appointment(
    session: AsyncSession, principal: Principal, appointment_id: int
) -> tuple[Appointment, bool]:
    """Cancel on behalf of one of the two parties. Returns (appointment, changed);
    cancelling an already-cancelled appointment succeeds with changed=False."""
    appointment = await session.get(Appointment, appointment_id)
    if not appointment:
        raise NotFoundError("Appointment not found")
    if not _is_party(appointment, principal):
        raise ForbiddenError("Not authorized to cancel this appointment")
    if appointment.status == AppointmentStatus.cancelled.value:
        return appointment, False
    if appointment.status == AppointmentStatus.completed.value:
        raise InvalidStateError("Completed appointments cannot be cancelled")
    appointment.status = AppointmentStatus.cancelled.value
    appointment.updated_at = utc_now_naive()
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    logger.info("Appointment %s cancelled by %s %s", appointment.id, principal.role.value, principal.id)
    return appointment, True


async def list_appointments_for_patient(session: AsyncSession, patient_id: int) -> list[Appointment]:
    q = (
        select(Appointment)
        .where(Appointment.patient_id == patient_id)
        .order_by(Appointment.date, Appointment.id)
    )
    result = await session.execute(q)
    return list(result.scalars().all())


async def list_appointments_for_psychiatrist(session: AsyncSession, psychiatrist_id: int) -> list[Appointment]:
    q = (
        select(Appointment)
        .where(Appointment.psychiatrist_id == psychiatrist_id)
        .order_by(Appointment.date, Appointment.id)
    )
    result = await session.execute(q)
    return list(result.scalars().all())


async def list_patients_for_psychiatrist(
    session: AsyncSession, psychiatrist_id: int, today: date | None = None
) -> list[PatientSummary]:
    """Unique patients with non-cancelled appointments, with count and last/next dates."""
    today = today or utc_now_naive().date()
    result = await session.execute(
        select(Appointment)
        .where(
            Appointment.psychiatrist_id == psychiatrist_id,
            Appointment.status != AppointmentStatus.cancelled.value,
        )
        .order_by(Appointment.date, Appointment.id)
    )
    summaries: dict[int, PatientSummary] = {}
    for a in result.scalars().all():
        day = a.date.date()
        summary = summaries.get(a.patient_id)
        if summary is None:
            summary = summaries[a.patient_id] = PatientSummary(
                patient_id=a.patient_id,
                name=a.patient_name,
                email=a.patient_email,
                appointment_count=0,
                last_appointment=day,
            )
        summary.appointment_count += 1
        summary.last_appointment = max(summary.last_appointment, day)
        if (
            a.status == AppointmentStatus.scheduled.value
            and day >= today
            and (summary.next_appointment is None or day < summary.next_appointment)
        ):
            summary.next_appointment = day
    return list(summaries.values())


async def list_psychiatrists_for_patient(session: AsyncSession, patient_id: int) -> list[PsychiatristSummary]:
    result = await session.execute(
        select(Appointment.psychiatrist_id, Appointment.psychiatrist_name)
        .where(
            Appointment.patient_id == patient_id,
            Appointment.status != AppointmentStatus.cancelled.value,
        )
        .order_by(Appointment.date, Appointment.id)
    )
    seen: dict[int, PsychiatristSummary] = {}
    for psychiatrist_id, name in result.all():
        if psychiatrist_id not in seen:
            seen[psychiatrist_id] = PsychiatristSummary(psychiatrist_id=psychiatrist_id, name=name)
    return list(seen.values())


async def complete_elapsed_appointments(session: AsyncSession, today: date | None = None) -> int:
    """Mark scheduled appointments on days before UTC today as completed. Returns count updated."""
    today = today or utc_now_naive().date()
    cutoff = datetime(today.year, today.month, today.day, 0, 0, 0)
    result = await session.execute(
        update(Appointment)
        .where(
            Appointment.status == AppointmentStatus.scheduled.value,
            Appointment.date < cutoff,
        )
        .values(status=AppointmentStatus.completed.value, updated_at=utc_now_naive())
    )
    await session.flush()
    return result.rowcount or 0
