"""
Test authentication endpoints
"""
from datetime import timedelta

import pytest

from app.core.auth import create_access_token


async def _signup(client, email="test@example.com", password="testpassword123", name="Test User"):
    return await client.post(
        "/api/v1/auth/signup",
        json={"name": name, "email": email, "password": password}
    )


@pytest.mark.asyncio
async def test_signup(api_client):
    """Test user signup"""
    response = await _signup(api_client)

    assert response.status_code == 201
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "test@example.com"
    assert "password_hash" not in data["user"]


@pytest.mark.asyncio
async def test_signup_duplicate_email(api_client):
    """Email is unique, case-insensitively"""
    await _signup(api_client)

    response = await _signup(api_client, email="Test@Example.com", name="User Two")

    assert response.status_code == 400
    assert "already registered" in response.json()["detail"].lower()


@pytest.mark.asyncio
async def test_signup_short_password(api_client):
    response = await _signup(api_client, password="short")

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login(api_client):
    await _signup(api_client)

    response = await api_client.post(
        "/api/v1/auth/login",
        json={"email": "test@example.com", "password": "testpassword123"}
    )

    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Test User"


@pytest.mark.asyncio
async def test_login_wrong_password(api_client):
    await _signup(api_client)

    response = await api_client.post(
        "/api/v1/auth/login",
        json={"email": "test@example.com", "password": "wrongpassword"}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect email or password"


@pytest.mark.asyncio
async def test_login_unknown_user(api_client):
    response = await api_client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@example.com", "password": "testpassword123"}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me(api_client):
    token = (await _signup(api_client)).json()["access_token"]

    response = await api_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["email"] == "test@example.com"


@pytest.mark.asyncio
async def test_me_with_invalid_token(api_client):
    response = await api_client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_with_expired_token(api_client):
    user_id = (await _signup(api_client)).json()["user"]["id"]
    token = create_access_token(user_id, expires_delta=timedelta(minutes=-1))

    response = await api_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_for_unknown_user(api_client):
    token = create_access_token("507f1f77bcf86cd799439011")

    response = await api_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
