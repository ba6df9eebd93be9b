from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from app.core.config import settings

DEFAULT_WORKING_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def _default_working_days() -> list[str]:
    return list(DEFAULT_WORKING_DAYS)


class Psychiatrist(SQLModel, table=True):
    __tablename__ = "psychiatrists"
    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    name: str
    hashed_password: str
    expertise: str | None = None
    bio: str | None = None
    # Availability: HH:MM (24h) wall-clock times, interpreted in UTC.
    start_time: str | None = settings.default_start_time
    end_time: str | None = settings.default_end_time
    # None = availability never set; [] = deliberately unbookable
    working_days: list[str] | None = Field(
        default_factory=_default_working_days, sa_column=Column(JSON, nullable=True)
    )
    created_at: datetime = Field(default_factory=_utc_naive_now, sa_type=DateTime())

    @property
    def has_availability(self) -> bool:
        return bool(self.start_time and self.end_time and self.working_days is not None)

    @property
    def is_bookable(self) -> bool:
        return self.has_availability and bool(self.working_days)


class AvailabilityPublic(SQLModel):
    start_time: str | None = None
    end_time: str | None = None
    working_days: list[str] = []


class PsychiatristPublic(SQLModel):
    id: int
    email: str
    name: str
    expertise: str | None = None
    bio: str | None = None
    availability: AvailabilityPublic
