"""Shared fixtures: a throwaway SQLite database and an HTTP client on the app."""
import os
import tempfile
from decimal import Decimal
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="monlyking-tests-"))

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP / 'test.db'}"
os.environ["REDIS_ENABLED"] = "false"
os.environ["METRICS_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["ADMIN_EMAILS"] = '["admin@monlyking.gg"]'

import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from monlyking.core.database import engine, AsyncSessionLocal, Base  # noqa: E402
from monlyking.main import app  # noqa: E402
from monlyking.models import User  # noqa: E402

PASSWORD = "secret123"

VALORANT_LISTING = {
    "game": "valorant",
    "title": "Immortal 2 Valorant account",
    "description": "Every agent unlocked, forty skins including Reaver and Prime bundles.",
    "price": "1000.00",
    "images": [],
    "game_data": {"rank": "Immortal 2", "rr": 45, "agents": 23, "level": 187, "region": "EU"},
}


@pytest_asyncio.fixture
async def db_schema():
    """Create all tables for one test and drop them afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(db_schema):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def register(client: AsyncClient, username: str, email: str = None) -> dict:
    """Register and log in a user; returns its profile plus auth headers."""
    email = email or f"{username}@monlyking.gg"
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "username": username, "password": PASSWORD},
    )
    assert response.status_code == 201, response.text
    user = response.json()

    response = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    tokens = response.json()

    user["tokens"] = tokens
    user["headers"] = {"Authorization": f"Bearer {tokens['access_token']}"}
    return user


async def set_balance(user_id: int, amount) -> None:
    async with AsyncSessionLocal() as session:
        user = await session.get(User, user_id)
        user.wallet_balance = Decimal(str(amount))
        await session.commit()


async def load_user(user_id: int) -> User:
    async with AsyncSessionLocal() as session:
        return await session.get(User, user_id)


@pytest_asyncio.fixture
async def buyer(client):
    return await register(client, "buyer")


@pytest_asyncio.fixture
async def seller(client):
    return await register(client, "seller")


@pytest_asyncio.fixture
async def admin(client):
    return await register(client, "admin")


@pytest_asyncio.fixture
async def listing(client, seller):
    response = await client.post("/api/v1/listings/", json=VALORANT_LISTING, headers=seller["headers"])
    assert response.status_code == 201, response.text
    return response.json()
