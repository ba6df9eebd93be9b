from app.models.appointment import (
    Appointment,
    AppointmentPublic,
    AppointmentStatus,
    PatientSummary,
    PsychiatristSummary,
)
from app.models.patient import Patient
from app.models.principal import Principal, Role
from app.models.psychiatrist import AvailabilityPublic, Psychiatrist, PsychiatristPublic

__all__ = [
    "Appointment",
    "AppointmentPublic",
    "AppointmentStatus",
    "AvailabilityPublic",
    "Patient",
    "PatientSummary",
    "Principal",
    "Psychiatrist",
    "PsychiatristPublic",
    "PsychiatristSummary",
    "Role",
]
