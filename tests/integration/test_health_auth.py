"""Health and authentication endpoint tests."""

import pytest
from httpx import AsyncClient

from teampulse.models import UserRole

from .helpers import error_message

pytestmark = pytest.mark.asyncio


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        """Health endpoint should report a reachable database."""
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert "timestamp" in data
        assert data["uptime"] >= 0

    async def test_readiness_check(self, client: AsyncClient):
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_liveness_check(self, client: AsyncClient):
        response = await client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    async def test_unknown_route_uses_error_envelope(self, client: AsyncClient):
        response = await client.get("/api/nope")
        assert response.status_code == 404
        assert error_message(response) == "Not Found"


class TestRegisterAndLogin:
    """Account creation and credential exchange."""

    async def test_register(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/register",
            json={"name": "Ada Lovelace", "email": "Ada@Example.com", "password": "secret1", "role": "manager"},
        )
        assert response.status_code == 201, response.text

        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "ada@example.com"
        assert data["user"]["role"] == "MANAGER"
        assert data["user"]["totalKudosReceived"] == 0
        assert "passwordHash" not in data["user"]

    async def test_register_duplicate_email(self, client: AsyncClient, make_user):
        await make_user("Ada", email="ada@example.com")

        response = await client.post(
            "/api/auth/register",
            json={"name": "Other Ada", "email": "ADA@example.com", "password": "secret1"},
        )
        assert response.status_code == 409
        assert error_message(response) == "User with this email already exists"

    async def test_register_validation(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/register",
            json={"name": "A", "email": "not-an-email", "password": "123"},
        )
        assert response.status_code == 400
        body = response.json()["error"]
        assert body["message"] == "Validation failed"
        assert len(body["details"]) == 3

    async def test_login(self, client: AsyncClient, make_user):
        await make_user("Grace", email="grace@example.com")

        response = await client.post(
            "/api/auth/login", json={"email": "grace@example.com", "password": "password123"}
        )
        assert response.status_code == 200
        token = response.json()["token"]

        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["user"]["name"] == "Grace"

    async def test_login_wrong_password(self, client: AsyncClient, make_user):
        await make_user("Grace", email="grace@example.com")

        response = await client.post(
            "/api/auth/login", json={"email": "grace@example.com", "password": "nope"}
        )
        assert response.status_code == 401
        assert error_message(response) == "Invalid email or password"

    async def test_login_rate_limited(self, client: AsyncClient, make_user):
        """Five failures in the window lock the client out, even with the right password."""
        await make_user("Grace", email="grace@example.com")
        for _ in range(5):
            response = await client.post(
                "/api/auth/login", json={"email": "grace@example.com", "password": "nope"}
            )
            assert response.status_code == 401

        response = await client.post(
            "/api/auth/login", json={"email": "grace@example.com", "password": "password123"}
        )
        assert response.status_code == 429


class TestSessionGuard:
    """Bearer token checks on protected routes."""

    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401
        assert error_message(response) == "Access token required"

    async def test_garbage_token(self, client: AsyncClient):
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert error_message(response) == "Invalid token"

    async def test_deactivated_user_is_rejected(self, client: AsyncClient, make_user, auth_headers):
        admin = await make_user("Admin", UserRole.ADMIN)
        user = await make_user("Leaver")

        response = await client.delete(f"/api/users/{user.id}", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["user"]["isActive"] is False

        response = await client.get("/api/auth/me", headers=auth_headers(user))
        assert response.status_code == 401
        assert error_message(response) == "User not found or inactive"

    async def test_role_gate(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user("Regular")

        response = await client.get("/api/budgets/all", headers=auth_headers(user))
        assert response.status_code == 403
        assert error_message(response) == "Insufficient permissions"


class TestProfile:
    async def test_update_me(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user("Ada")

        response = await client.put(
            "/api/auth/me",
            headers=auth_headers(user),
            json={"name": "Ada L.", "department": "Research", "avatar": "https://example.com/a.png"},
        )
        assert response.status_code == 200
        data = response.json()["user"]
        assert data["name"] == "Ada L."
        assert data["department"] == "Research"
        assert data["avatar"] == "https://example.com/a.png"

    async def test_change_password(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user("Ada", email="ada@example.com")

        wrong = await client.put(
            "/api/auth/change-password",
            headers=auth_headers(user),
            json={"currentPassword": "nope", "newPassword": "brand-new"},
        )
        assert wrong.status_code == 401
        assert error_message(wrong) == "Current password is incorrect"

        ok = await client.put(
            "/api/auth/change-password",
            headers=auth_headers(user),
            json={"currentPassword": "password123", "newPassword": "brand-new"},
        )
        assert ok.status_code == 200

        login = await client.post("/api/auth/login", json={"email": "ada@example.com", "password": "brand-new"})
        assert login.status_code == 200
