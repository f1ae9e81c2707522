"""
Shared fixtures: in-memory SQLite database, app client, and user helpers.
"""

from __future__ import annotations

import os

# Must be set before channelhub modules read settings.
os.environ.setdefault("CH_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CH_BCRYPT_ROUNDS", "4")
os.environ.setdefault("CH_LOG_FORMAT", "text")

import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from channelhub.core.database import get_session
from channelhub.main import app


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    # https so the Secure session cookie is sent back
    async with AsyncClient(transport=ASGITransport(app=app), base_url="https://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class Account:
    """A registered, logged-in user as seen by a test client."""

    def __init__(self, user_id: uuid.UUID, identifier: str, token: str):
        self.id = user_id
        self.identifier = identifier
        self.token = token

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


async def signup(client: AsyncClient, identifier: str, secret: str = "correct-horse-battery") -> Account:
    resp = await client.post("/auth/register", json={"identifier": identifier, "secret": secret})
    assert resp.status_code == 201, resp.text
    resp = await client.post("/auth/login", json={"identifier": identifier, "secret": secret})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    # Bearer auth only; keep cookies out of the shared client
    client.cookies.clear()
    return Account(uuid.UUID(body["user"]["id"]), identifier, body["token"])


@pytest.fixture
async def alice(client) -> Account:
    return await signup(client, "alice")


@pytest.fixture
async def bob(client) -> Account:
    return await signup(client, "bob")


@pytest.fixture
async def carol(client) -> Account:
    return await signup(client, "carol")
