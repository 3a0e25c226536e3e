"""Test fixtures — a fresh in-memory SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Env vars are set BEFORE codecollab is imported, so the Settings
   singleton (and the module-level engine) point at SQLite, bcrypt runs
   at its cheapest work factor, and the dev JWT secret is accepted.
2. Each test gets its own in-memory engine with the schema created from
   the ORM models.
3. ``client`` overrides get_db so every HTTP request gets its own session
   on the test engine. Auth is NOT mocked — tests register and log in for
   real, because who-owns-what is the thing under test.
4. ``db_session`` is for service-level tests that skip HTTP entirely.
   Don't mix it with ``client`` in one test; both would share the single
   in-memory connection.
"""

import os

os.environ.setdefault("CODECOLLAB_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CODECOLLAB_ENVIRONMENT", "test")
os.environ.setdefault("CODECOLLAB_BCRYPT_ROUNDS", "4")

import uuid  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from codecollab.db.engine import get_db  # noqa: E402
from codecollab.db.models import Base  # noqa: E402
from codecollab.main import app  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture()
async def test_engine():
    engine = create_async_engine(TEST_DB_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Single session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client with get_db pointed at the per-test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ─── Helpers ─────────────────────────────────────────────


@pytest.fixture
def register(client):
    """Register a student over HTTP. Returns (token, student_json, email).

    Each call uses a fresh email so one test can register several students.
    """
    async def _register(name: str = "Student", password: str = "password_123"):
        email = f"{name.lower()}-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/v1/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert r.status_code == 201, r.text
        body = r.json()
        return body["token"], body["student"], email

    return _register


@pytest.fixture
def auth_headers():
    def _headers(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    return _headers
