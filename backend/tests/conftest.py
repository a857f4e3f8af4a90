"""
Project Library Backend - Test Configuration (conftest.py)
===========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Services and routes run against an in-memory SQLite database
       (aiosqlite) built from the ORM metadata, so no PostgreSQL is needed.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine:          in-memory SQLite engine with every table created
    ├── db_session:      AsyncSession on that engine (service tests)
    ├── client:          HTTPX AsyncClient against a fresh create_app()
    ├── mock_db_session: AsyncMock session for pure-logic tests
    └── make_user:       factory that signs a user up through AuthService
"""

import os

# Override settings BEFORE any project_library import builds `settings`
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SESSION_SECRET"] = "test-secret-not-for-production-use-0123456789"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from typing import AsyncGenerator, Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import project_library.models  # noqa: E402,F401
from project_library.database import Base, get_db_session  # noqa: E402
from project_library.main import create_app  # noqa: E402
from project_library.services.auth_service import auth_service  # noqa: E402
from project_library.services.owner_service import owner_service  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    """
    One in-memory database per test.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock async database session for tests that only check control flow.

    Usage:
        mock_db_session.execute.side_effect = SQLAlchemyError("boom")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Data Factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_user(db_session):
    """
    Sign a user up and return (user, personal_owner).

    Usage:
        alice, alice_owner = await make_user("alice")
    """
    async def _make(username: str, password: str = "correct-horse-1"):
        user = await auth_service.signup(
            db_session, f"{username}@example.com", username, password
        )
        owner = await owner_service.get_personal_owner(db_session, user.id)
        return user, owner

    return _make


# ══════════════════════════════════════════════════════════════════════════
# API Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(session_factory):
    """A fresh application whose requests use the test database."""
    application = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_db_session
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


@pytest.fixture
def signup(client):
    """
    Create an account through the API and return its session token.

    Cookies are cleared afterwards so each test chooses its identity
    explicitly with a Bearer header.
    """

    async def _signup(username: str, password: str = "correct-horse-1") -> Dict:
        response = await client.post(
            "/api/auth/signup",
            json={
                "email": f"{username}@example.com",
                "username": username,
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        client.cookies.clear()
        return response.json()["data"]

    return _signup
