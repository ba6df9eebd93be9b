import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENV", "test")

from datetime import UTC, date, datetime, timedelta  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from app.core.db import get_session  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.models import Appointment, AppointmentStatus, Patient, Psychiatrist  # noqa: E402
from app.models.principal import Role  # noqa: E402
from app.services.slot_service import appointment_day  # noqa: E402


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest_asyncio.fixture
async def client(session_maker):
    async def _override_get_session():
        async with session_maker() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    fastapi_app.dependency_overrides[get_session] = _override_get_session
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    fastapi_app.dependency_overrides.clear()


async def make_patient(session: AsyncSession, name: str = "Alex Patient", email: str | None = None) -> Patient:
    patient = Patient(
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.com",
        hashed_password="x",
    )
    session.add(patient)
    await session.commit()
    await session.refresh(patient)
    return patient


async def make_psychiatrist(
    session: AsyncSession,
    name: str = "Sam Doctor",
    email: str | None = None,
    start_time: str | None = "09:00",
    end_time: str | None = "17:00",
    working_days: list[str] | None = None,
    unset_days: bool = False,
) -> Psychiatrist:
    psychiatrist = Psychiatrist(
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.com",
        hashed_password="x",
        start_time=start_time,
        end_time=end_time,
    )
    if unset_days:
        psychiatrist.working_days = None
    elif working_days is not None:
        psychiatrist.working_days = working_days
    session.add(psychiatrist)
    await session.commit()
    await session.refresh(psychiatrist)
    return psychiatrist


async def make_appointment(
    session: AsyncSession,
    patient: Patient,
    psychiatrist: Psychiatrist,
    day: date,
    time_slot: str = "9:00 AM - 9:30 AM",
    status: AppointmentStatus = AppointmentStatus.scheduled,
) -> Appointment:
    appointment = Appointment(
        patient_id=patient.id,
        psychiatrist_id=psychiatrist.id,
        date=appointment_day(day),
        time_slot=time_slot,
        status=status.value,
        patient_name=patient.name,
        patient_email=patient.email,
        psychiatrist_name=psychiatrist.name,
        psychiatrist_email=psychiatrist.email,
    )
    session.add(appointment)
    await session.commit()
    await session.refresh(appointment)
    return appointment


def auth_headers(account_id: int, role: Role) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(account_id, role.value)}"}


def upcoming(weekday: int, min_days: int = 1) -> date:
    """Next UTC date at least min_days ahead falling on weekday (0 = Monday)."""
    d = datetime.now(UTC).date() + timedelta(days=min_days)
    while d.weekday() != weekday:
        d += timedelta(days=1)
    return d
