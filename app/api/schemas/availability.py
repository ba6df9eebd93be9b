from datetime import date as date_type

from pydantic import BaseModel, ConfigDict, Field

from app.models.psychiatrist import PsychiatristPublic


class UpdateAvailabilityRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_time: str | None = Field(default=None, alias="startTime")  # HH:MM, 24-hour
    end_time: str | None = Field(default=None, alias="endTime")
    working_days: list[str] | None = Field(default=None, alias="workingDays")


class SlotInfo(BaseModel):
    time: str  # e.g. "9:00 AM - 9:30 AM"
    available: bool


class AvailableDay(BaseModel):
    day: str  # MON
    date: str  # day of month
    month: str  # Jun
    full_date: date_type
    slots: list[SlotInfo]


class AvailabilityResponse(BaseModel):
    psychiatrist_id: int
    start_time: str | None
    end_time: str | None
    working_days: list[str]
    days: list[AvailableDay]


class PsychiatristResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: PsychiatristPublic


class PsychiatristListResponse(BaseModel):
    success: bool = True
    data: list[PsychiatristPublic]
