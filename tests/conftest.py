"""
Pytest configuration and shared fixtures.

Uses SQLite in-memory via aiosqlite, no running PostgreSQL required.
StaticPool keeps a single connection so every session in a test sees the
same in-memory database.
"""
from __future__ import annotations

from typing import AsyncGenerator, Awaitable, Callable
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cronmonitor.models import Base, Monitor

SQLITE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed creation time for monitors built in tests (epoch milliseconds)
T0 = 1_700_000_000_000


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a fresh in-memory SQLite engine per test function."""
    engine = create_async_engine(
        SQLITE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine, as the sweeper uses it."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async session, rolled back after each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def sample_monitor(test_db: AsyncSession) -> Monitor:
    """Persist a never-pinged monitor created at ``T0``."""
    monitor = Monitor(
        name="Nightly backup",
        schedule="1m",
        grace_seconds=0,
        alert_webhook="https://hooks.example.com/alert",
        created_at=T0,
    )
    test_db.add(monitor)
    await test_db.commit()
    await test_db.refresh(monitor)
    return monitor


@pytest.fixture
def make_monitor(session_factory) -> Callable[..., Awaitable[Monitor]]:
    """Factory committing monitors in their own session (defaults: ``1m``, no grace, ``T0``)."""

    async def _make(**overrides) -> Monitor:
        fields = {
            "name": "Nightly backup",
            "schedule": "1m",
            "grace_seconds": 0,
            "created_at": T0,
        }
        fields.update(overrides)
        async with session_factory() as db:
            monitor = Monitor(**fields)
            db.add(monitor)
            await db.commit()
            return monitor

    return _make


@pytest.fixture
def load_monitor(session_factory) -> Callable[[str], Awaitable[Monitor | None]]:
    """Read a monitor back through a fresh session."""

    async def _load(monitor_id: str) -> Monitor | None:
        async with session_factory() as db:
            return await db.get(Monitor, monitor_id)

    return _load


# ── Mock HTTP client fixture ──────────────────────────────────────────────────
@pytest.fixture
def mock_httpx_response():
    """Factory for building mock httpx responses."""
    def _make(status_code: int = 200):
        resp = MagicMock()
        resp.status_code = status_code
        resp.raise_for_status = MagicMock()
        return resp
    return _make
