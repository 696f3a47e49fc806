"""Tests for registration, login and tokens."""
import pytest

from conftest import PASSWORD, register


@pytest.mark.asyncio
async def test_register_starts_at_level_one(client):
    user = await register(client, "newcomer")
    assert user["level"] == 1
    assert user["wallet_balance"] == 0
    assert user["role"] == "user"
    assert user["email"] == "newcomer@monlyking.gg"


@pytest.mark.asyncio
async def test_admin_email_gets_admin_role(admin):
    assert admin["role"] == "admin"


@pytest.mark.asyncio
async def test_duplicate_username_rejected(client, buyer):
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": "other@monlyking.gg", "username": "buyer", "password": PASSWORD},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Username already registered"


@pytest.mark.asyncio
async def test_duplicate_email_rejected(client, buyer):
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": "buyer@monlyking.gg", "username": "buyer2", "password": PASSWORD},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


@pytest.mark.asyncio
async def test_short_password_rejected(client):
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": "short@monlyking.gg", "username": "short", "password": "12345"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_wrong_password(client, buyer):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "buyer@monlyking.gg", "password": "not-the-password"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me(client, buyer):
    response = await client.get("/api/v1/auth/me", headers=buyer["headers"])
    assert response.status_code == 200
    assert response.json()["username"] == "buyer"


@pytest.mark.asyncio
async def test_refresh_issues_new_pair(client, buyer):
    response = await client.post(
        "/api/v1/auth/refresh",
        json={"refresh_token": buyer["tokens"]["refresh_token"]},
    )
    assert response.status_code == 200
    tokens = response.json()

    response = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {tokens['access_token']}"},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_access_token_cannot_refresh(client, buyer):
    response = await client.post(
        "/api/v1/auth/refresh",
        json={"refresh_token": buyer["tokens"]["access_token"]},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_profile_shows_level_progress(client, buyer):
    response = await client.get(f"/api/v1/users/{buyer['id']}")
    assert response.status_code == 200
    profile = response.json()
    assert "email" not in profile
    assert profile["level_progress"]["rank"] == "Iron"
    assert profile["level_progress"]["next_level_required"] == 500


@pytest.mark.asyncio
async def test_update_me(client, buyer):
    response = await client.put(
        "/api/v1/users/me",
        json={"display_name": "Big Buyer"},
        headers=buyer["headers"],
    )
    assert response.status_code == 200
    assert response.json()["display_name"] == "Big Buyer"
