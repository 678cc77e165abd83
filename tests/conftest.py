"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database with the full schema, the
default roles and one town hall. Redis is not initialised, so rate limiting
and login lockout are disabled unless a test installs a client.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

os.environ.setdefault("AIRWALK_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AIRWALK_REDIS_URL", "")
os.environ.setdefault("AIRWALK_LOG_FORMAT", "console")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.config import get_settings
from airwalk.database import close_db, get_engine, get_session, init_db
from airwalk.db.base import Base
from airwalk.db.models import TownHall
from airwalk.db.seed import seed_roles
from airwalk.main import create_app


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Create the schema in a fresh in-memory database."""
    get_settings.cache_clear()
    await init_db(get_settings().database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async for session in get_session():
        await seed_roles(session)
        session.add(TownHall(name="Gandia", province="Valencia"))
        await session.commit()
        break

    yield

    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for arranging data and asserting on it.

    Commit after writing so the app sees the rows; ``await refresh(obj)``
    before asserting on rows the app may have changed.
    """
    async for session in get_session():
        yield session
        break


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the ASGI app."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def mock_email_service(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Replace the email service so nothing is ever sent."""
    mock_service = MagicMock()
    mock_service.send_template = AsyncMock(return_value=True)

    monkeypatch.setattr("airwalk.auth.service.get_email_service", lambda *a, **kw: mock_service)
    return mock_service
