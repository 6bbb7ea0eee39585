"""Test fixtures — a fresh in-memory database per test.

Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own engine on an in-memory SQLite database
   (StaticPool keeps the single connection alive), with foreign keys on.
2. Every request gets its own session from that engine, as in production.
3. The principal normally produced by HTTP Basic auth is overridden to come
   from an X-Test-Principal header, so tests pick who is calling without
   hashing passwords. "root" has no user row: it is the bootstrap admin
   and resolves to a transient admin identity.
"""

import os

os.environ.setdefault("PROCTOR_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PROCTOR_BCRYPT_ROUNDS", "4")
os.environ.setdefault("PROCTOR_ADMIN_USERNAME", "root")
os.environ.setdefault("PROCTOR_ADMIN_PASSWORD", "root-password")

import pytest
import pytest_asyncio
from fastapi import Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from proctor.auth.basic import Principal, get_principal
from proctor.db.engine import get_db
from proctor.db.models import Base
from proctor.main import app

ROOT = "root"

# Real ed25519 keys with their `ssh-keygen -lf` fingerprints.
KEY_1 = (
    "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIGY0rUnqa7U6r2tkn+3r6jzaT7Rq0R99fQBCSun7XXbi"
    " user1@example"
)
KEY_1_FINGERPRINT = "SHA256:0QpPdIFdcQOZpdhmrZ+hjsdNg+kJ/rXyyQej09m4dTo"
KEY_2 = (
    "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIL7ob0xC0Cc6JbMOw2FIe9qgMypmqrzi/Q/6Qm3E+Hjg"
    " user2@example"
)
KEY_2_FINGERPRINT = "SHA256:yPOliA0+7uv/ZEyGTNVpf3KgD/0o0SB+MIoGvnqmi80"
KEY_3 = (
    "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIEdettEDKB4sGaJY3WwG+TZ63qvfqDCfqKUWTEw0TQ0/"
    " user3@example"
)


@pytest_asyncio.fixture()
async def engine():
    """Per-test in-memory database with the full schema."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A session for service-level tests and direct assertions."""
    async with session_factory() as session:
        yield session


def _override_db(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    return override_get_db


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client with a per-request DB session and a header-chosen principal.

    Requests without an X-Test-Principal header run as ROOT.
    """

    def override_get_principal(request: Request) -> Principal:
        return Principal(name=request.headers.get("X-Test-Principal", ROOT))

    app.dependency_overrides[get_db] = _override_db(session_factory)
    app.dependency_overrides[get_principal] = override_get_principal

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def unauthenticated_client(session_factory):
    """HTTP client WITHOUT the principal override — real Basic auth runs."""
    app.dependency_overrides[get_db] = _override_db(session_factory)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def as_user():
    """Headers that make a request run as the named principal."""

    def headers(name: str) -> dict:
        return {"X-Test-Principal": name}

    return headers


@pytest.fixture
def make_user(client):
    """Create a user through the API as ROOT and return its JSON."""

    async def create(name: str, role: str = "user", password: str = "password"):
        resp = await client.post(
            "/users", json={"name": name, "role": role, "password": password}
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return create


@pytest.fixture
def make_key(client):
    """Add a pubkey to a user through the API as ROOT and return its JSON."""

    async def create(user: str, title: str, key: str = KEY_1):
        resp = await client.post(
            f"/users/{user}/pubkeys", json={"title": title, "key": key}
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return create


@pytest.fixture
def link(client):
    """Link a user to a team through the API as ROOT."""

    async def create(user: str, team: str):
        resp = await client.post("/memberships", json={"user": user, "team": team})
        assert resp.status_code == 201, resp.text
        return resp

    return create
