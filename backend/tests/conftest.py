"""
Affiliate Tracker Backend: Test Configuration (conftest.py)
===========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_settings: Settings for a fast, isolated app instance
    ├── auth_service: AuthService built from test_settings
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── app_factory: create_app() with per-test setting overrides
    ├── client_factory: HTTPX clients against a fresh SQLite schema
    └── test_client: one client with the default test settings
"""

import os
import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

# Environment must be in place before affiliate_tracker is imported:
# config.settings and the database engine are built at import time.
_test_dir = tempfile.mkdtemp(prefix="affiliate_tracker_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/test.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import func, select  # noqa: E402

from affiliate_tracker.config import Settings  # noqa: E402
from affiliate_tracker.database import (  # noqa: E402
    Base,
    async_session_factory,
    dispose_engine,
    engine,
    init_models,
)
from affiliate_tracker.services.auth_service import AuthService  # noqa: E402


def make_result(scalar=None, rows=None, one=None):
    """
    Build a stand-in for a SQLAlchemy Result.

    AsyncSession.execute is awaited, but the Result it returns is used
    synchronously, so it must be a MagicMock rather than an AsyncMock.
    """
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalars.return_value.all.return_value = rows or []
    if one is not None:
        result.one.return_value = one
    return result


@pytest.fixture
def test_settings():
    """Settings with the cheapest bcrypt cost and a known secret."""
    return Settings(
        jwt_secret="test-secret-not-for-production",
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest.fixture
def auth_service(test_settings):
    return AuthService(test_settings)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    An AsyncMock that simulates AsyncSession behavior.
    How:     Mocks execute, get, flush, delete, commit, rollback and close.
             add() fills in the id and created_at defaults a real flush
             would assign, so services can build response models.

    Usage:
        async def test_get_platform(mock_db_session):
            mock_db_session.execute.return_value = make_result(scalar=platform)
            result = await platform_service.get_platform(mock_db_session, platform_id)
    """
    def assign_defaults(obj):
        if getattr(obj, "id", None) is None:
            obj.id = uuid4()
        if getattr(obj, "created_at", None) is None:
            obj.created_at = datetime.now(timezone.utc)

    session = AsyncMock()
    session.execute = AsyncMock(return_value=make_result())
    session.get = AsyncMock(return_value=None)
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock(side_effect=assign_defaults)
    return session


@pytest.fixture
def app_factory(test_settings):
    """Returns a callable building an app; keyword overrides patch test_settings."""
    from affiliate_tracker.main import create_app

    def build(**overrides):
        settings = test_settings.model_copy(update=overrides) if overrides else test_settings
        return create_app(settings)

    return build


@pytest_asyncio.fixture
async def client_factory(app_factory):
    """
    Yields a factory of HTTPX clients, each bound to a freshly built app.

    Tables are created before the test and dropped afterwards; the engine
    is disposed so no pooled connection outlives the test's event loop.
    """
    await init_models()
    clients = []

    def build(**overrides):
        app = app_factory(**overrides)
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield build

    for client in clients:
        await client.aclose()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await dispose_engine()


@pytest_asyncio.fixture
async def test_client(client_factory):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    yield client_factory()


async def register_and_login(client, email="ada@example.com", password="secret123"):
    """Register a user through the API and return an Authorization header."""
    response = await client.post(
        "/register",
        json={"name": "Ada", "email": email, "password": password},
    )
    assert response.status_code == 201, response.text

    response = await client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


async def count_rows(model, *criteria):
    """Number of stored rows of `model` matching the given column criteria."""
    async with async_session_factory() as session:
        query = select(func.count()).select_from(model)
        if criteria:
            query = query.where(*criteria)
        result = await session.execute(query)
        return result.scalar_one()
