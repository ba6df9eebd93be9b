from datetime import UTC, date as date_type, datetime
from enum import Enum

from sqlalchemy import DateTime, Index, text
from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class AppointmentStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"


# Partial unique indexes: at most one non-cancelled appointment per
# (psychiatrist, day, slot) and per (patient, day, slot).
_ACTIVE = text("status <> 'cancelled'")


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            "uq_appointments_psychiatrist_slot_active",
            "psychiatrist_id",
            "date",
            "time_slot",
            unique=True,
            postgresql_where=_ACTIVE,
            sqlite_where=_ACTIVE,
        ),
        Index(
            "uq_appointments_patient_slot_active",
            "patient_id",
            "date",
            "time_slot",
            unique=True,
            postgresql_where=_ACTIVE,
            sqlite_where=_ACTIVE,
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    patient_id: int = Field(foreign_key="patients.id", index=True)
    psychiatrist_id: int = Field(foreign_key="psychiatrists.id", index=True)
    # Calendar day pinned to 12:00 naive UTC so no timezone offset shifts the day
    date: datetime = Field(index=True, sa_type=DateTime())
    time_slot: str
    status: str = Field(default=AppointmentStatus.scheduled.value, index=True)
    notes: str = ""
    # Point-in-time snapshot of both parties for notifications and display
    patient_name: str
    patient_email: str
    psychiatrist_name: str
    psychiatrist_email: str
    created_at: datetime = Field(default_factory=_utc_naive_now, sa_type=DateTime())
    updated_at: datetime = Field(default_factory=_utc_naive_now, sa_type=DateTime())


class AppointmentPublic(SQLModel):
    id: int
    patient_id: int
    psychiatrist_id: int
    date: date_type
    time_slot: str
    status: str
    notes: str = ""
    patient_name: str
    patient_email: str
    psychiatrist_name: str
    psychiatrist_email: str
    created_at: datetime
    updated_at: datetime


class PatientSummary(SQLModel):
    patient_id: int
    name: str
    email: str
    appointment_count: int
    last_appointment: date_type
    next_appointment: date_type | None = None


class PsychiatristSummary(SQLModel):
    psychiatrist_id: int
    name: str
