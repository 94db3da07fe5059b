"""
Shared fixtures: an in-memory SQLite database per test, an httpx client wired
to the app, and small factories for users and orgs.
"""

from __future__ import annotations

import os

# Settings are read at import time; configure them before importing the app.
os.environ["WORKOPS_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["WORKOPS_SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["WORKOPS_BCRYPT_ROUNDS"] = "4"
os.environ["WORKOPS_LOG_FORMAT"] = "console"
os.environ["WORKOPS_LOG_LEVEL"] = "warning"

import uuid
from dataclasses import dataclass

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.core.auth import hash_password
from app.core.database import get_session
from app.main import app as fastapi_app
from app.models.membership import OrgMembership
from app.models.organization import Organization
from app.models.user import User

PASSWORD = "correct-horse-battery"


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    """A bare session for service-level tests (no HTTP)."""
    async with session_factory() as s:
        yield s


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(session_factory):
    async def _get_test_session():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except BaseException:
                await s.rollback()
                raise

    fastapi_app.dependency_overrides[get_session] = _get_test_session
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()


@dataclass
class Caller:
    user_id: str
    email: str
    headers: dict


class Api:
    """Thin helpers over the HTTP API for multi-step scenarios."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def signup(self, email: str, password: str = PASSWORD) -> Caller:
        resp = await self.client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": password, "confirm_password": password},
        )
        assert resp.status_code == 201, resp.text
        user_id = resp.json()["user_id"]
        resp = await self.client.post(
            "/api/v1/auth/login", json={"email": email, "password": password}
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["access_token"]
        return Caller(user_id=user_id, email=email, headers={"Authorization": f"Bearer {token}"})

    async def create_org(self, caller: Caller, name: str = "Acme") -> str:
        resp = await self.client.post("/api/v1/orgs", json={"name": name}, headers=caller.headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["id"]

    async def add_member(self, admin: Caller, org_id: str, who: Caller, role: str = "member"):
        resp = await self.client.post(
            f"/api/v1/orgs/{org_id}/members",
            json={"email": who.email, "role": role},
            headers=admin.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def create_client(self, caller: Caller, org_id: str, name: str, **fields) -> dict:
        resp = await self.client.post(
            f"/api/v1/orgs/{org_id}/clients",
            json={"name": name, **fields},
            headers=caller.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def create_project(self, caller: Caller, org_id: str, name: str, **fields) -> dict:
        resp = await self.client.post(
            f"/api/v1/orgs/{org_id}/projects",
            json={"name": name, **fields},
            headers=caller.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()


@pytest.fixture
def api(client):
    return Api(client)


# ---------------------------------------------------------------------------
# Direct-to-database factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user(session):
    async def _make(email: str | None = None) -> User:
        user = User(
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            password_hash=hash_password(PASSWORD),
        )
        session.add(user)
        await session.flush()
        return user

    return _make


@pytest.fixture
def make_org(session):
    async def _make(name: str = "Acme", members: list | None = None) -> Organization:
        """Create an org with ``members``: [(user, role), ...]."""
        org = Organization(name=name)
        session.add(org)
        await session.flush()
        for user, role in members or []:
            session.add(OrgMembership(org_id=org.id, user_id=user.id, role=role))
        await session.flush()
        return org

    return _make
