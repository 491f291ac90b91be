"""
tests/test_auth.py
Tests for console access control: JWT checks, admin gate, sign-out deny-list.
"""

import uuid

import pytest
from httpx import AsyncClient

from shared.models.models import User
from shared.utils.security import create_access_token
from tests.conftest import auth_headers


@pytest.mark.asyncio
async def test_unauthenticated_returns_401(client: AsyncClient):
    response = await client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "Authentication required"


@pytest.mark.asyncio
async def test_garbage_token_returns_401(client: AsyncClient):
    response = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_token_for_unknown_user_returns_401(client: AsyncClient):
    token, _ = create_access_token(str(uuid.uuid4()), "9000000000")
    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found"


@pytest.mark.asyncio
async def test_non_admin_is_turned_away(client: AsyncClient, user: User):
    response = await client.get("/auth/me", headers=auth_headers(user))
    assert response.status_code == 403
    assert response.json()["detail"] == (
        "This admin panel is restricted to authorized administrators only."
    )


@pytest.mark.asyncio
async def test_non_admin_cannot_list_users(client: AsyncClient, user: User):
    response = await client.get("/users", headers=auth_headers(user))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_me_returns_admin_row(client: AsyncClient, admin_user: User):
    response = await client.get("/auth/me", headers=auth_headers(admin_user))
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(admin_user.id)
    assert data["phone"] == admin_user.phone
    assert data["is_admin"] is True


@pytest.mark.asyncio
async def test_logout_redirects_to_login(client: AsyncClient, admin_user: User):
    response = await client.post("/auth/logout", headers=auth_headers(admin_user))
    assert response.status_code == 303
    assert response.headers["location"] == "/login"


@pytest.mark.asyncio
async def test_logout_revokes_token(client: AsyncClient, admin_user: User, fake_redis):
    headers = auth_headers(admin_user)
    await client.post("/auth/logout", headers=headers)

    assert any(key.startswith("jwt_revoked:") for key in fake_redis.store)

    response = await client.get("/auth/me", headers=headers)
    assert response.status_code == 401
    assert response.json()["detail"] == "Token has been revoked"


@pytest.mark.asyncio
async def test_other_sessions_survive_logout(client: AsyncClient, admin_user: User):
    """Only the presented token is revoked."""
    await client.post("/auth/logout", headers=auth_headers(admin_user))
    response = await client.get("/auth/me", headers=auth_headers(admin_user))
    assert response.status_code == 200
