from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment, AppointmentStatus
from app.models.psychiatrist import Psychiatrist
from app.services.availability_service import compute_slots, parse_slot_start


def appointment_day(d: date) -> datetime:
    """Stored value for a calendar day: naive UTC noon, so no offset can move it."""
    return datetime(d.year, d.month, d.day, 12, 0, 0)


def _slot_sort_key(label: str) -> tuple[int, str]:
    try:
        return parse_slot_start(label), label
    except ValueError:
        return 24 * 60, label


async def get_booked_slots(session: AsyncSession, psychiatrist_id: int, d: date) -> set[str]:
    """Time slots already taken (anything not cancelled) for the psychiatrist on day d."""
    result = await session.execute(
        select(Appointment.time_slot).where(
            Appointment.psychiatrist_id == psychiatrist_id,
            Appointment.date == appointment_day(d),
            Appointment.status != AppointmentStatus.cancelled.value,
        )
    )
    return {row[0] for row in result.all()}


def sorted_slots(slots: set[str]) -> list[str]:
    return sorted(slots, key=_slot_sort_key)


async def find_active_appointment(
    session: AsyncSession,
    d: date,
    time_slot: str,
    psychiatrist_id: int | None = None,
    patient_id: int | None = None,
) -> Appointment | None:
    q = select(Appointment).where(
        Appointment.date == appointment_day(d),
        Appointment.time_slot == time_slot,
        Appointment.status != AppointmentStatus.cancelled.value,
    )
    if psychiatrist_id is not None:
        q = q.where(Appointment.psychiatrist_id == psychiatrist_id)
    if patient_id is not None:
        q = q.where(Appointment.patient_id == patient_id)
    result = await session.execute(q.limit(1))
    return result.scalars().first()


async def get_slot_availability(
    session: AsyncSession, psychiatrist: Psychiatrist, d: date
) -> list[tuple[str, bool]]:
    """Returns list of (slot_label, available) for the psychiatrist's hours on day d."""
    if not psychiatrist.start_time or not psychiatrist.end_time:
        return []
    slots = compute_slots(psychiatrist.start_time, psychiatrist.end_time)
    if not slots:
        return []
    booked = await get_booked_slots(session, psychiatrist.id, d)
    return [(s, s not in booked) for s in slots]
