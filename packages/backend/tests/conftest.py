"""Test fixtures — a fresh in-memory database per test.

Pattern:
1. Each test gets its own SQLite (aiosqlite) engine with a StaticPool,
   so every session in the test talks to the same in-memory database.
2. Tables are created from the models; nothing survives the test.
3. The app's get_db, get_notifier and get_mailer dependencies are
   overridden: the notifier is a real Notifier (on its own registry)
   that also records every call, the mailer only records.
"""

import os

# Must be set before hireboard.config is imported anywhere.
os.environ.setdefault("HIREBOARD_ENVIRONMENT", "test")
os.environ.setdefault("HIREBOARD_BCRYPT_ROUNDS", "4")

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from hireboard.auth.jwt import create_access_token
from hireboard.auth.password import hash_password
from hireboard.db.engine import get_db
from hireboard.db.models import Base, User
from hireboard.main import app
from hireboard.realtime.notifier import Notifier, get_notifier
from hireboard.realtime.registry import ConnectionRegistry
from hireboard.services.email import get_mailer

TEST_DB_URL = "sqlite+aiosqlite://"


# ═══════════════════════════════════════════════════════════
# Fakes
# ═══════════════════════════════════════════════════════════


class FakeConnection:
    """Stands in for a WebSocket: records every text frame sent to it."""

    def __init__(self, fail: bool = False):
        self.sent: list[str] = []
        self.fail = fail

    async def send_text(self, message: str) -> None:
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(message)


class RecordingNotifier(Notifier):
    """Real Notifier that also remembers what it was asked to do."""

    def __init__(self, registry: ConnectionRegistry):
        super().__init__(registry)
        self.calls: list[tuple[str, str, dict]] = []

    def notify(self, user_id, event_name, payload):
        self.calls.append((str(user_id), event_name, payload))
        super().notify(user_id, event_name, payload)

    def calls_for(self, event_name: str) -> list[tuple[str, str, dict]]:
        return [c for c in self.calls if c[1] == event_name]


class FakeMailer:
    """Records dispatched emails; can be told to blow up on dispatch."""

    enabled = True

    def __init__(self, fail: bool = False):
        self.sent: list[tuple[str, str, str]] = []
        self.fail = fail

    def dispatch(self, to: str, subject: str, html: str) -> None:
        self.sent.append((to, subject, html))
        if self.fail:
            raise RuntimeError("SMTP server unreachable")

    async def flush(self) -> None:
        return None


# ═══════════════════════════════════════════════════════════
# Database
# ═══════════════════════════════════════════════════════════


@pytest_asyncio.fixture()
async def db_engine():
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(db_engine):
    session = AsyncSession(bind=db_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()


# ═══════════════════════════════════════════════════════════
# Collaborators
# ═══════════════════════════════════════════════════════════


@pytest.fixture()
def registry():
    return ConnectionRegistry()


@pytest.fixture()
def notifier(registry):
    return RecordingNotifier(registry)


@pytest.fixture()
def mailer():
    return FakeMailer()


# ═══════════════════════════════════════════════════════════
# HTTP client
# ═══════════════════════════════════════════════════════════


@pytest_asyncio.fixture()
async def client(db_session, notifier, mailer):
    """HTTP client with the app's database, notifier and mailer overridden."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_mailer] = lambda: mailer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await notifier.flush()
    app.dependency_overrides.clear()


async def register_user(client, role: str = "jobSeeker", name: str | None = None) -> dict:
    """Register a user through the API. Returns the user plus auth headers."""
    email = f"{role.lower()}-{uuid.uuid4().hex[:8]}@example.com"
    resp = await client.post(
        "/api/v1/auth/register",
        json={
            "name": name or f"{role} user",
            "email": email,
            "password": "password_123",
            "role": role,
        },
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return {
        **body["user"],
        "password": "password_123",
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
        "refresh_token": body["refresh_token"],
    }


@pytest_asyncio.fixture()
async def employer(client):
    return await register_user(client, "employer", name="Erin Employer")


@pytest_asyncio.fixture()
async def seeker(client):
    return await register_user(client, "jobSeeker", name="Sam Seeker")


@pytest_asyncio.fixture()
async def admin(client, db_session):
    """Admins can't self-register, so the row is written directly."""
    user = User(
        name="Ada Admin",
        email=f"admin-{uuid.uuid4().hex[:8]}@example.com",
        password_hash=hash_password("admin_pass"),
        role="admin",
        skills=[],
    )
    db_session.add(user)
    await db_session.commit()
    token = create_access_token(str(user.id), "admin")
    return {
        "id": str(user.id),
        "email": user.email,
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest_asyncio.fixture()
async def job(client, employer):
    resp = await client.post(
        "/api/v1/jobs",
        json={
            "title": "Backend Engineer",
            "description": "Build and run our Python APIs",
            "job_type": "Full-time",
            "location_city": "Berlin",
            "salary_min": 60000,
            "salary_max": 90000,
            "tags": ["python", "fastapi"],
        },
        headers=employer["headers"],
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
