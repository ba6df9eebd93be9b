import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import (
    get_current_patient,
    get_current_principal,
    get_current_psychiatrist,
    get_session,
)
from app.api.schemas.appointment import (
    AppointmentListResponse,
    AppointmentResponse,
    BookAppointmentRequest,
    BookedSlotsResponse,
)
from app.core.errors import BookingValidationError
from app.models.appointment import (
    Appointment,
    AppointmentPublic,
    PatientSummary,
    PsychiatristSummary,
)
from app.models.principal import Principal
from app.services.appointment_service import (
    book_appointment,
    cancel_appointment,
    list_appointments_for_patient,
    list_appointments_for_psychiatrist,
    list_patients_for_psychiatrist,
    list_psychiatrists_for_patient,
    parse_appointment_date,
)
from app.services.email_service import (
    notice_from_appointment,
    send_appointment_cancellation_emails,
    send_appointment_confirmation_emails,
)
from app.services.slot_service import get_booked_slots, sorted_slots

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


class PatientSummaryListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[PatientSummary]


class PsychiatristSummaryListResponse(BaseModel):
    success: bool = True
    data: list[PsychiatristSummary]


def _to_public(a: Appointment) -> AppointmentPublic:
    """Public shape; the stored noon-UTC datetime is exposed as its calendar day."""
    return AppointmentPublic(
        id=int(a.id),
        patient_id=a.patient_id,
        psychiatrist_id=a.psychiatrist_id,
        date=a.date.date(),
        time_slot=a.time_slot,
        status=a.status,
        notes=a.notes or "",
        patient_name=a.patient_name,
        patient_email=a.patient_email,
        psychiatrist_name=a.psychiatrist_name,
        psychiatrist_email=a.psychiatrist_email,
        created_at=a.created_at,
        updated_at=a.updated_at,
    )


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    body: BookAppointmentRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    patient: Principal = Depends(get_current_patient),
) -> AppointmentResponse:
    appointment = await book_appointment(
        session,
        patient_id=patient.id,
        psychiatrist_id=body.psychiatrist_id,
        date_value=body.date,
        time_slot=body.time_slot,
    )
    # Notifications are best-effort and never fail the booking
    background_tasks.add_task(send_appointment_confirmation_emails, notice_from_appointment(appointment))
    return AppointmentResponse(data=_to_public(appointment), message="Appointment booked successfully")


@router.get("/patient", response_model=AppointmentListResponse)
async def list_patient_appointments(
    session: AsyncSession = Depends(get_session),
    patient: Principal = Depends(get_current_patient),
) -> AppointmentListResponse:
    appointments = await list_appointments_for_patient(session, patient.id)
    return AppointmentListResponse(data=[_to_public(a) for a in appointments])


@router.get("/psychiatrist", response_model=AppointmentListResponse)
async def list_psychiatrist_appointments(
    session: AsyncSession = Depends(get_session),
    psychiatrist: Principal = Depends(get_current_psychiatrist),
) -> AppointmentListResponse:
    appointments = await list_appointments_for_psychiatrist(session, psychiatrist.id)
    return AppointmentListResponse(data=[_to_public(a) for a in appointments])


@router.get("/psychiatrist/patients", response_model=PatientSummaryListResponse)
async def list_my_patients(
    session: AsyncSession = Depends(get_session),
    psychiatrist: Principal = Depends(get_current_psychiatrist),
) -> PatientSummaryListResponse:
    patients = await list_patients_for_psychiatrist(session, psychiatrist.id)
    return PatientSummaryListResponse(count=len(patients), data=patients)


@router.get("/my-psychiatrists", response_model=PsychiatristSummaryListResponse)
async def list_my_psychiatrists(
    session: AsyncSession = Depends(get_session),
    patient: Principal = Depends(get_current_patient),
) -> PsychiatristSummaryListResponse:
    psychiatrists = await list_psychiatrists_for_patient(session, patient.id)
    return PsychiatristSummaryListResponse(data=psychiatrists)


@router.get("/booked-slots/{psychiatrist_id}", response_model=BookedSlotsResponse)
async def booked_slots(
    psychiatrist_id: int,
    date_param: str | None = Query(None, alias="date"),
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
) -> BookedSlotsResponse:
    """Slots already taken for the psychiatrist on the given UTC day (YYYY-MM-DD)."""
    if not date_param:
        raise BookingValidationError("Psychiatrist ID and date are required")
    try:
        day = parse_appointment_date(date_param)
    except (ValueError, OverflowError) as e:
        raise BookingValidationError("Date must be an ISO-8601 date") from e
    booked = await get_booked_slots(session, psychiatrist_id, day)
    return BookedSlotsResponse(data=sorted_slots(booked))


@router.put("/cancel/{appointment_id}", response_model=AppointmentResponse)
async def cancel_my_appointment(
    appointment_id: int,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
) -> AppointmentResponse:
    appointment, changed = await cancel_appointment(session, principal, appointment_id)
    if changed:
        background_tasks.add_task(
            send_appointment_cancellation_emails,
            notice_from_appointment(appointment),
            principal.role.value,
        )
        message = "Appointment cancelled successfully"
    else:
        message = "Appointment was already cancelled"
    return AppointmentResponse(data=_to_public(appointment), message=message)
