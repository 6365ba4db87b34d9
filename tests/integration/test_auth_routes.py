"""Integration tests for authentication endpoints."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient


@pytest.fixture
def test_user() -> dict:
    return {
        "email": "testuser@example.com",
        "password": "testpassword123",
        "full_name": "Test User",
    }


class TestRegisterEndpoint:
    """Tests for POST /auth/register endpoint."""

    async def test_register_success(self, async_client: AsyncClient, test_user: dict) -> None:
        response = await async_client.post("/auth/register", json=test_user)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == "Registration successful"
        assert data["user"]["email"] == test_user["email"]
        assert data["user"]["role"] == "employee"
        assert data["user"]["status"] == "active"
        assert data["tokens"]["token_type"] == "bearer"
        assert data["tokens"]["expires_in"] > 0

    async def test_register_duplicate_email(
        self, async_client: AsyncClient, test_user: dict
    ) -> None:
        await async_client.post("/auth/register", json=test_user)

        response = await async_client.post("/auth/register", json=test_user)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "already exists" in response.json()["detail"]

    async def test_register_invalid_email(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/auth/register", json={"email": "not-an-email", "password": "password123"}
        )

        assert response.status_code == 422


class TestLoginEndpoint:
    """Tests for POST /auth/login endpoint."""

    async def test_login_success(self, async_client: AsyncClient, test_user: dict) -> None:
        await async_client.post("/auth/register", json=test_user)

        response = await async_client.post(
            "/auth/login",
            json={"email": test_user["email"], "password": test_user["password"]},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["message"] == "Login successful"
        assert data["user"]["last_login_at"] is not None
        assert data["tokens"]["access_token"]

    async def test_login_wrong_password(self, async_client: AsyncClient, test_user: dict) -> None:
        await async_client.post("/auth/register", json=test_user)

        response = await async_client.post(
            "/auth/login", json={"email": test_user["email"], "password": "wrongpassword"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_login_unknown_user(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/auth/login", json={"email": "nobody@example.com", "password": "password123"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestMeEndpoint:
    """Tests for GET /auth/me endpoint."""

    async def test_me_returns_profile(self, async_client: AsyncClient, test_user: dict) -> None:
        register = await async_client.post("/auth/register", json=test_user)
        token = register.json()["tokens"]["access_token"]

        response = await async_client.get(
            "/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["email"] == test_user["email"]

    async def test_me_without_token(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_registered_token_works_on_tasks(
        self, async_client: AsyncClient, test_user: dict
    ) -> None:
        register = await async_client.post("/auth/register", json=test_user)
        token = register.json()["tokens"]["access_token"]

        response = await async_client.get(
            "/tasks", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["tasks"] == []
