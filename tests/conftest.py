"""
Shared test fixtures for the StaffClock test suite.

Async throughout (aiosqlite + AsyncSession).  The wall clock is a
dependency, so every attendance test pins "now" explicitly.
"""

import os
import sys
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DEFAULT_TIMEZONE_OFFSET"] = "+00:00"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from staffclock.api.v1.deps import get_clock, get_current_active_user, get_db, require_admin
from staffclock.db.base import Base
from staffclock.main import app
from staffclock.models.employee import Employee
from staffclock.models.user import User

# Separate engine for tests; staffclock.db.session's engine is never touched
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

TEST_DAY = "2024-03-11"  # a Monday


class FakeClock:
    """Stand-in for the wall clock; ``set`` pins the UTC instant."""

    def __init__(self) -> None:
        self.now = datetime(2024, 3, 11, 9, 0, 0, tzinfo=timezone.utc)

    def set(self, clock: str, day: str = TEST_DAY) -> None:
        self.now = datetime.fromisoformat(f"{day}T{clock}").replace(tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before usage and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def clock():
    """Pin "now" for the clock endpoints."""
    fake = FakeClock()
    app.dependency_overrides[get_clock] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_clock, None)


@pytest.fixture
async def employee(db_session: AsyncSession) -> Employee:
    """Employee profile linked to the authenticated test user (id 1)."""
    db_session.add(User(id=1, email="admin@example.com", hashed_password="x", role="admin"))
    emp = Employee(name="Alice Smith", user_id=1, department="Engineering")
    db_session.add(emp)
    await db_session.commit()
    await db_session.refresh(emp)
    return emp


@pytest.fixture
def real_auth():
    """Disable the auth overrides so tokens are actually checked."""
    saved = {
        dep: app.dependency_overrides.pop(dep)
        for dep in (get_current_active_user, require_admin)
    }
    yield
    app.dependency_overrides.update(saved)


# ── Auth Overrides ──────────────────────────────────────────────────
async def _override_get_current_active_user():
    return User(id=1, email="admin@example.com", is_active=True, role="admin")


async def _override_require_admin():
    return User(id=1, email="admin@example.com", is_active=True, role="admin")


app.dependency_overrides[get_current_active_user] = _override_get_current_active_user
app.dependency_overrides[require_admin] = _override_require_admin
