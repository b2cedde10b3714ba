"""
Smoke tests to verify test infrastructure is working correctly.

These tests validate that the test database, fixtures, and basic
testing setup are functioning properly.
"""

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.security import decode_identity_token, is_global_admin
from app.testing import create_category, create_tier, get_identity_headers, get_identity_token


@pytest.mark.unit
async def test_database_session(session: AsyncSession):
    """Test that database session fixture works."""
    assert session is not None
    assert isinstance(session, AsyncSession)


@pytest.mark.unit
async def test_independent_sessions(session_factory):
    """Test that the session factory hands out distinct sessions."""
    async with session_factory() as first, session_factory() as second:
        assert first is not second


@pytest.mark.unit
async def test_factories_create_rows(session: AsyncSession):
    """Test that factories create committed rows with ids."""
    tier = await create_tier(session, name="factory-tier")
    category = await create_category(session, name="factory-category")

    assert tier.id is not None
    assert category.id is not None
    assert category.order_index == 1


@pytest.mark.unit
def test_identity_token_claims():
    """Test that identity tokens carry the normalized email and provider id."""
    claims = decode_identity_token(get_identity_token("Someone@Example.com", "uid-42"))

    assert claims["sub"] == "someone@example.com"
    assert claims["uid"] == "uid-42"


@pytest.mark.unit
def test_global_admin_is_configured(_global_admin: str):
    """Test that the configured global admin is recognized case-insensitively."""
    assert is_global_admin(_global_admin.upper())
    assert not is_global_admin("someone@example.com")
    assert not is_global_admin(None)


@pytest.mark.integration
async def test_http_client(client: AsyncClient):
    """Test that HTTP client fixture works."""
    assert client is not None
    assert isinstance(client, AsyncClient)


@pytest.mark.integration
async def test_authenticated_request(client: AsyncClient):
    """Test that authenticated requests work with identity headers."""
    response = await client.post("/api/v1/auth/session", headers=get_identity_headers("auth-test@example.com"))

    assert response.status_code == 200
    assert response.json()["email"] == "auth-test@example.com"
