import pytest

from app.core.security import create_access_token, decode_access_token

BASE = "/api/v1/auth"


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["patient", "psychiatrist"])
async def test_signup_then_me(client, role):
    resp = await client.post(
        f"{BASE}/signup",
        json={"email": "New.User@Example.com", "password": "secret1", "name": "New User", "role": role},
    )
    assert resp.status_code == 201
    token = resp.json()["access_token"]
    assert resp.json()["role"] == role
    assert resp.json()["token_type"] == "bearer"

    me = await client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "new.user@example.com"
    assert me.json()["role"] == role
    assert me.json()["name"] == "New User"


@pytest.mark.asyncio
async def test_login(client):
    payload = {"email": "pat@example.com", "password": "secret1", "name": "Pat", "role": "patient"}
    await client.post(f"{BASE}/signup", json=payload)

    ok = await client.post(f"{BASE}/login", json={"email": "pat@example.com", "password": "secret1"})
    assert ok.status_code == 200
    assert ok.json()["expires_in"] == 60 * 60

    wrong = await client.post(f"{BASE}/login", json={"email": "pat@example.com", "password": "nope123"})
    assert wrong.status_code == 401

    # same email, other role: separate account table
    other_role = await client.post(
        f"{BASE}/login", json={"email": "pat@example.com", "password": "secret1", "role": "psychiatrist"}
    )
    assert other_role.status_code == 401


@pytest.mark.asyncio
async def test_duplicate_signup_conflicts(client):
    payload = {"email": "dup@example.com", "password": "secret1", "name": "Dup", "role": "patient"}
    assert (await client.post(f"{BASE}/signup", json=payload)).status_code == 201
    assert (await client.post(f"{BASE}/signup", json=payload)).status_code == 409


@pytest.mark.asyncio
async def test_short_password_is_rejected(client):
    resp = await client.post(f"{BASE}/signup", json={"email": "a@example.com", "password": "123", "name": "A"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_token_for_missing_account_is_rejected(client):
    token = create_access_token(424242, "patient")
    resp = await client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_token_round_trip():
    token = create_access_token(7, "psychiatrist")
    assert decode_access_token(token) == ("7", "psychiatrist")
    assert decode_access_token("garbage") == (None, None)
