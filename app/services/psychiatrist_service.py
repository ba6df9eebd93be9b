import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AvailabilitySettingsError, ForbiddenError, NotFoundError
from app.models.principal import Principal, Role
from app.models.psychiatrist import AvailabilityPublic, Psychiatrist, PsychiatristPublic
from app.services.availability_service import (
    BookableDate,
    compute_bookable_dates,
    normalize_weekday,
    parse_time_of_day,
)
from app.services.slot_service import get_slot_availability

logger = logging.getLogger(__name__)


@dataclass
class AvailabilityDay:
    bookable_date: BookableDate
    slots: list[tuple[str, bool]]


def psychiatrist_to_public(p: Psychiatrist) -> PsychiatristPublic:
    return PsychiatristPublic(
        id=p.id,
        email=p.email,
        name=p.name,
        expertise=p.expertise,
        bio=p.bio,
        availability=AvailabilityPublic(
            start_time=p.start_time,
            end_time=p.end_time,
            working_days=list(p.working_days or []),
        ),
    )


async def list_bookable_psychiatrists(session: AsyncSession) -> list[Psychiatrist]:
    """Psychiatrists that patients can book: at least one working day configured."""
    result = await session.execute(select(Psychiatrist).order_by(Psychiatrist.name, Psychiatrist.id))
    return [p for p in result.scalars().all() if p.is_bookable]


async def get_bookable_psychiatrist(session: AsyncSession, psychiatrist_id: int) -> Psychiatrist:
    psychiatrist = await session.get(Psychiatrist, psychiatrist_id)
    if not psychiatrist:
        raise NotFoundError("Psychiatrist not found")
    if not psychiatrist.is_bookable:
        raise NotFoundError("Psychiatrist is not currently available for appointments")
    return psychiatrist


async def update_availability(
    session: AsyncSession,
    principal: Principal,
    psychiatrist_id: int,
    start_time: str | None,
    end_time: str | None,
    working_days: list[str] | None,
) -> Psychiatrist:
    """Replace a psychiatrist's availability. An empty working_days list is accepted
    and makes the psychiatrist unbookable until days are added again."""
    if principal.role != Role.psychiatrist or principal.id != psychiatrist_id:
        raise ForbiddenError("Not authorized to update this availability")
    if not start_time or not end_time:
        raise AvailabilitySettingsError()
    try:
        start = parse_time_of_day(start_time)
        end = parse_time_of_day(end_time)
    except ValueError as e:
        raise AvailabilitySettingsError("Times must use 24-hour HH:MM format") from e
    if start >= end:
        raise AvailabilitySettingsError("Start time must be before end time")

    days: list[str] = []
    for name in working_days or []:
        normalized = normalize_weekday(name)
        if normalized is None:
            raise AvailabilitySettingsError(f"Unknown working day: {name}")
        if normalized not in days:
            days.append(normalized)

    psychiatrist = await session.get(Psychiatrist, psychiatrist_id)
    if not psychiatrist:
        raise NotFoundError("Psychiatrist not found")
    psychiatrist.start_time = f"{start // 60:02d}:{start % 60:02d}"
    psychiatrist.end_time = f"{end // 60:02d}:{end % 60:02d}"
    psychiatrist.working_days = days
    session.add(psychiatrist)
    await session.flush()
    await session.refresh(psychiatrist)
    logger.info(
        "Updated availability for psychiatrist %s: %s-%s %s",
        psychiatrist_id, psychiatrist.start_time, psychiatrist.end_time, ", ".join(days) or "(no days)",
    )
    return psychiatrist


async def get_availability_view(
    session: AsyncSession, psychiatrist: Psychiatrist, today: date | None = None
) -> list[AvailabilityDay]:
    """Upcoming bookable dates, each with its slots marked available or booked."""
    days = compute_bookable_dates(psychiatrist.working_days or [], today=today)
    out: list[AvailabilityDay] = []
    for d in days:
        slots = await get_slot_availability(session, psychiatrist, d.date)
        out.append(AvailabilityDay(bookable_date=d, slots=slots))
    return out
