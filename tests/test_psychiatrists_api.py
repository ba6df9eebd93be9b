"""
HTTP tests for /api/v1/psychiatrists: directory, availability view and settings.
"""
import pytest

from app.models.principal import Role
from app.services.availability_service import compute_slots, utc_today, weekday_name

from conftest import auth_headers, make_appointment, make_patient, make_psychiatrist

BASE = "/api/v1/psychiatrists"


@pytest.mark.asyncio
async def test_directory_hides_psychiatrists_without_working_days(client, session):
    visible = await make_psychiatrist(session, "Dr Ada")
    await make_psychiatrist(session, "Dr Bea", working_days=[])
    await make_psychiatrist(session, "Dr Cy", unset_days=True)

    resp = await client.get(BASE)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [p["id"] for p in data] == [visible.id]
    assert data[0]["availability"] == {
        "start_time": "09:00",
        "end_time": "17:00",
        "working_days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
    }


@pytest.mark.asyncio
async def test_get_psychiatrist(client, session):
    doctor = await make_psychiatrist(session)
    hidden = await make_psychiatrist(session, "Dr Hidden", working_days=[])

    found = await client.get(f"{BASE}/{doctor.id}")
    assert found.status_code == 200
    assert found.json()["data"]["name"] == doctor.name

    assert (await client.get(f"{BASE}/{hidden.id}")).status_code == 404
    missing = await client.get(f"{BASE}/9999")
    assert missing.status_code == 404
    assert missing.json()["error"] == "NotFoundError"


@pytest.mark.asyncio
async def test_availability_view_marks_booked_slots(client, session):
    patient = await make_patient(session)
    every_day = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
    doctor = await make_psychiatrist(session, start_time="09:00", end_time="11:00", working_days=every_day)
    today = utc_today()
    await make_appointment(session, patient, doctor, today, "10:00 AM - 10:30 AM")

    resp = await client.get(f"{BASE}/{doctor.id}/availability", headers=auth_headers(patient.id, Role.patient))

    assert resp.status_code == 200
    body = resp.json()
    assert len(body["days"]) == 7
    first = body["days"][0]
    assert first["full_date"] == today.isoformat()
    assert first["date"] == str(today.day)
    assert first["day"] == weekday_name(today)[:3].upper()
    assert [s["time"] for s in first["slots"]] == compute_slots("09:00", "11:00")
    assert {s["time"]: s["available"] for s in first["slots"]} == {
        "9:00 AM - 9:30 AM": True,
        "9:30 AM - 10:00 AM": True,
        "10:00 AM - 10:30 AM": False,
        "10:30 AM - 11:00 AM": True,
    }
    assert all(s["available"] for d in body["days"][1:] for s in d["slots"])


@pytest.mark.asyncio
async def test_availability_view_only_lists_working_days(client, session):
    patient = await make_patient(session)
    doctor = await make_psychiatrist(session, working_days=["Tuesday"])

    resp = await client.get(f"{BASE}/{doctor.id}/availability", headers=auth_headers(patient.id, Role.patient))

    days = resp.json()["days"]
    assert days
    assert {d["day"] for d in days} == {"TUE"}


@pytest.mark.asyncio
async def test_availability_view_requires_auth(client, session):
    doctor = await make_psychiatrist(session)
    assert (await client.get(f"{BASE}/{doctor.id}/availability")).status_code == 401


@pytest.mark.asyncio
async def test_update_own_availability(client, session):
    doctor = await make_psychiatrist(session)

    resp = await client.put(
        f"{BASE}/{doctor.id}/availability",
        json={"startTime": "8:30", "endTime": "12:00", "workingDays": ["mon", "Wednesday", "Monday"]},
        headers=auth_headers(doctor.id, Role.psychiatrist),
    )

    assert resp.status_code == 200
    assert resp.json()["message"] == "Availability updated successfully"
    assert resp.json()["data"]["availability"] == {
        "start_time": "08:30",
        "end_time": "12:00",
        "working_days": ["Monday", "Wednesday"],
    }


@pytest.mark.asyncio
async def test_update_with_no_days_makes_psychiatrist_unbookable(client, session):
    doctor = await make_psychiatrist(session)

    resp = await client.put(
        f"{BASE}/{doctor.id}/availability",
        json={"startTime": "09:00", "endTime": "17:00", "workingDays": []},
        headers=auth_headers(doctor.id, Role.psychiatrist),
    )

    assert resp.status_code == 200
    assert (await client.get(BASE)).json()["data"] == []


@pytest.mark.asyncio
async def test_cannot_update_someone_else(client, session):
    doctor = await make_psychiatrist(session, "Dr Ada")
    other = await make_psychiatrist(session, "Dr Bea")

    resp = await client.put(
        f"{BASE}/{other.id}/availability",
        json={"startTime": "09:00", "endTime": "17:00", "workingDays": ["Monday"]},
        headers=auth_headers(doctor.id, Role.psychiatrist),
    )

    assert resp.status_code == 403
    assert resp.json()["error"] == "ForbiddenError"


@pytest.mark.asyncio
async def test_patient_cannot_update_availability(client, session):
    patient = await make_patient(session)
    doctor = await make_psychiatrist(session)

    resp = await client.put(
        f"{BASE}/{doctor.id}/availability",
        json={"startTime": "09:00", "endTime": "17:00", "workingDays": ["Monday"]},
        headers=auth_headers(patient.id, Role.patient),
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"startTime": "17:00", "endTime": "09:00", "workingDays": ["Monday"]},
        {"startTime": "09:00", "endTime": "09:00", "workingDays": ["Monday"]},
        {"endTime": "17:00", "workingDays": ["Monday"]},
        {"startTime": "9am", "endTime": "17:00", "workingDays": ["Monday"]},
        {"startTime": "09:00", "endTime": "17:00", "workingDays": ["Someday"]},
    ],
)
async def test_invalid_availability_is_rejected(client, session, payload):
    doctor = await make_psychiatrist(session)

    resp = await client.put(
        f"{BASE}/{doctor.id}/availability",
        json=payload,
        headers=auth_headers(doctor.id, Role.psychiatrist),
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"
    await session.refresh(doctor)
    assert doctor.start_time == "09:00"
    assert doctor.end_time == "17:00"
