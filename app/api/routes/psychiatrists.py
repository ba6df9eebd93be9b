from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_principal, get_current_psychiatrist, get_session
from app.api.schemas.availability import (
    AvailabilityResponse,
    AvailableDay,
    PsychiatristListResponse,
    PsychiatristResponse,
    SlotInfo,
    UpdateAvailabilityRequest,
)
from app.models.principal import Principal
from app.services.psychiatrist_service import (
    get_availability_view,
    get_bookable_psychiatrist,
    list_bookable_psychiatrists,
    psychiatrist_to_public,
    update_availability,
)


router = APIRouter(prefix="/psychiatrists", tags=["psychiatrists"])


@router.get("", response_model=PsychiatristListResponse)
async def list_psychiatrists(session: AsyncSession = Depends(get_session)) -> PsychiatristListResponse:
    """Psychiatrists open for booking; those with no working days are hidden."""
    psychiatrists = await list_bookable_psychiatrists(session)
    return PsychiatristListResponse(data=[psychiatrist_to_public(p) for p in psychiatrists])


@router.get("/{psychiatrist_id}", response_model=PsychiatristResponse)
async def get_psychiatrist(
    psychiatrist_id: int, session: AsyncSession = Depends(get_session)
) -> PsychiatristResponse:
    psychiatrist = await get_bookable_psychiatrist(session, psychiatrist_id)
    return PsychiatristResponse(data=psychiatrist_to_public(psychiatrist))


@router.get("/{psychiatrist_id}/availability", response_model=AvailabilityResponse)
async def get_psychiatrist_availability(
    psychiatrist_id: int,
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
) -> AvailabilityResponse:
    """Upcoming working days (UTC) with every slot marked available or booked."""
    psychiatrist = await get_bookable_psychiatrist(session, psychiatrist_id)
    view = await get_availability_view(session, psychiatrist)
    return AvailabilityResponse(
        psychiatrist_id=psychiatrist_id,
        start_time=psychiatrist.start_time,
        end_time=psychiatrist.end_time,
        working_days=list(psychiatrist.working_days or []),
        days=[
            AvailableDay(
                day=d.bookable_date.day,
                date=str(d.bookable_date.day_of_month),
                month=d.bookable_date.month,
                full_date=d.bookable_date.date,
                slots=[SlotInfo(time=label, available=free) for label, free in d.slots],
            )
            for d in view
        ],
    )


@router.put("/{psychiatrist_id}/availability", response_model=PsychiatristResponse)
async def put_psychiatrist_availability(
    psychiatrist_id: int,
    body: UpdateAvailabilityRequest,
    session: AsyncSession = Depends(get_session),
    psychiatrist: Principal = Depends(get_current_psychiatrist),
) -> PsychiatristResponse:
    updated = await update_availability(
        session,
        psychiatrist,
        psychiatrist_id,
        start_time=body.start_time,
        end_time=body.end_time,
        working_days=body.working_days,
    )
    return PsychiatristResponse(data=psychiatrist_to_public(updated), message="Availability updated successfully")
