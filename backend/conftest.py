"""
Pytest configuration and fixtures for backend tests.

This module provides the core testing infrastructure including:
- A throwaway SQLite database per test, built from the model metadata
- Session fixtures for database access, including independent sessions
  for concurrency tests
- The global admin identity used by the tests
- Test client for API integration tests
"""

from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.db.session import build_engine, build_sessionmaker, get_session
from app.main import app

TEST_GLOBAL_ADMIN_EMAIL = "admin@example.com"


@pytest.fixture(autouse=True)
def _global_admin(monkeypatch: pytest.MonkeyPatch) -> str:
    """Pin the global admin identity for every test."""
    monkeypatch.setattr(settings, "GLOBAL_ADMIN_EMAIL", TEST_GLOBAL_ADMIN_EMAIL)
    return TEST_GLOBAL_ADMIN_EMAIL


@pytest.fixture(scope="function")
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine on a fresh SQLite file."""
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    test_engine = build_engine(database_url, connect_args={"timeout": 5})
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine: AsyncEngine) -> Callable[[], AsyncSession]:
    """
    Factory for independent sessions on the test database.

    Concurrency tests open one session per simulated request so that
    each runs in its own transaction.
    """
    return build_sessionmaker(engine)


@pytest.fixture(scope="function")
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database session for each test.

    The database file lives in the test's tmp_path, so nothing needs to be
    cleaned up between tests.
    """
    async with session_factory() as test_session:
        yield test_session


@pytest.fixture
async def client(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing API endpoints.

    This fixture:
    - Overrides the database session dependency to use the test session
    - Provides an AsyncClient configured with the FastAPI app

    Usage:
        async def test_endpoint(client: AsyncClient):
            response = await client.get("/api/v1/health")
            assert response.status_code == 200
    """

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
