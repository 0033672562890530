"""Integration test fixtures with an in-memory database."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from house_help.api.app import create_app
from house_help.api.dependencies import get_db_session
from house_help.config import Settings, get_settings
from house_help.models import Base

# In-memory SQLite shared by every session of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_EMAIL = "boss@example.com"
SHARED_OWNER_KEY = "house_help_admin_sync"
APP_URL = "https://tracker.example.com"


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "database_url": TEST_DATABASE_URL,
        "admin_emails": (ADMIN_EMAIL, "partner@example.com"),
        "shared_owner_key": SHARED_OWNER_KEY,
        "restrict_sign_in": False,
        "identity_header": "X-Forwarded-Email",
        "app_url": APP_URL,
        "share_link_days": 30,
        "ledger_path": "ledger.json",
        "sync_url": None,
        "sync_token": None,
        "sync_debounce_ms": 1000,
        "host": "127.0.0.1",
        "port": 8000,
        "debug": False,
        "log_level": "INFO",
    }
    values.update(overrides)
    return Settings(**values)


def identity(email: str = ADMIN_EMAIL) -> dict[str, str]:
    return {"X-Forwarded-Email": email}


@pytest_asyncio.fixture
async def engine():
    """Create test database engine with the schema applied."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Get database session for integration tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(session_factory, settings) -> FastAPI:
    """Application wired to the test database and settings."""
    app = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
