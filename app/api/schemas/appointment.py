from pydantic import BaseModel, ConfigDict, Field

from app.models.appointment import AppointmentPublic


class BookAppointmentRequest(BaseModel):
    # Accepts the camelCase body sent by the web client as well as snake_case.
    model_config = ConfigDict(populate_by_name=True)

    psychiatrist_id: int | None = Field(default=None, alias="psychiatristId")
    date: str | None = None  # ISO date or datetime; only the UTC calendar day is kept
    time_slot: str | None = Field(default=None, alias="timeSlot")


class AppointmentResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: AppointmentPublic


class AppointmentListResponse(BaseModel):
    success: bool = True
    data: list[AppointmentPublic]


class BookedSlotsResponse(BaseModel):
    success: bool = True
    data: list[str]
