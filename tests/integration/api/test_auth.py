"""Integration tests for the authentication endpoints."""

import pytest
from httpx import AsyncClient

from tests.conftest import error_code
from tests.factories.auth import DEFAULT_PASSWORD, RegisterRequestFactory


pytestmark = pytest.mark.integration


async def register_via_api(client: AsyncClient, **overrides: str) -> dict:
    payload = RegisterRequestFactory.build(**overrides).model_dump(mode="json")
    response = await client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestRegisterEndpoint:
    """Tests for POST /api/v1/auth/register."""

    async def test_register_returns_token_pair(self, client: AsyncClient):
        data = await register_via_api(client, email="new@example.com", tenant_name="New Co")

        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["expires_in"] > 0
        assert data["user"]["email"] == "new@example.com"
        assert data["tenant"]["slug"] == "new-co"
        assert data["tenant"]["role"] == "owner"
        assert "password" not in str(data)

    async def test_register_sets_refresh_cookie(self, client: AsyncClient):
        payload = RegisterRequestFactory.build().model_dump(mode="json")

        response = await client.post("/api/v1/auth/register", json=payload)

        cookie = response.headers["set-cookie"].lower()
        assert cookie.startswith("refresh_token=")
        assert "httponly" in cookie
        assert "samesite=strict" in cookie
        assert "secure" in cookie
        assert "path=/api/v1/auth" in cookie

    async def test_duplicate_email_conflicts(self, client: AsyncClient):
        await register_via_api(client, email="dup@example.com")
        payload = RegisterRequestFactory.build(email="dup@example.com").model_dump(mode="json")

        response = await client.post("/api/v1/auth/register", json=payload)

        assert response.status_code == 409
        assert error_code(response) == "email_taken"

    @pytest.mark.parametrize("password", ["short1A", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
    async def test_weak_password_rejected(self, client: AsyncClient, password: str):
        payload = RegisterRequestFactory.build().model_dump(mode="json")
        payload["password"] = password

        response = await client.post("/api/v1/auth/register", json=payload)

        assert response.status_code == 422
        assert password not in response.text

    async def test_invalid_email_rejected(self, client: AsyncClient):
        payload = RegisterRequestFactory.build().model_dump(mode="json")
        payload["email"] = "not-an-email"

        response = await client.post("/api/v1/auth/register", json=payload)

        assert response.status_code == 422


class TestLoginEndpoint:
    """Tests for POST /api/v1/auth/login."""

    async def test_login_succeeds(self, client: AsyncClient):
        await register_via_api(client, email="login@example.com")

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "login@example.com", "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "login@example.com"

    async def test_wrong_password_is_401(self, client: AsyncClient):
        await register_via_api(client, email="login@example.com")

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "login@example.com", "password": "Wrong1234"},
        )

        assert response.status_code == 401
        assert error_code(response) == "invalid_credentials"
        assert "Wrong1234" not in response.text

    async def test_unknown_user_is_401(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "ghost@example.com", "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 401
        assert error_code(response) == "invalid_credentials"

    async def test_foreign_tenant_is_403(self, client: AsyncClient):
        await register_via_api(client, email="a@example.com")
        other = await register_via_api(client, email="b@example.com")

        response = await client.post(
            "/api/v1/auth/login",
            json={
                "email": "a@example.com",
                "password": DEFAULT_PASSWORD,
                "tenant_id": other["tenant"]["id"],
            },
        )

        assert response.status_code == 403
        assert error_code(response) == "tenant_not_authorized"


class TestRefreshEndpoint:
    """Tests for POST /api/v1/auth/refresh."""

    async def test_refresh_rotates(self, client: AsyncClient):
        registered = await register_via_api(client)

        response = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": registered["refresh_token"]},
        )

        assert response.status_code == 200
        assert response.json()["refresh_token"] != registered["refresh_token"]

    async def test_replay_is_401(self, client: AsyncClient):
        registered = await register_via_api(client)
        body = {"refresh_token": registered["refresh_token"]}

        first = await client.post("/api/v1/auth/refresh", json=body)
        second = await client.post("/api/v1/auth/refresh", json=body)

        assert first.status_code == 200
        assert second.status_code == 401
        assert error_code(second) == "invalid_refresh_token"
        assert second.headers["www-authenticate"] == "Bearer"

    async def test_missing_token_is_401(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/refresh")

        assert response.status_code == 401


class TestLogoutEndpoints:
    """Tests for logout, logout-all and /me."""

    async def test_logout_revokes_refresh_token(self, client: AsyncClient):
        registered = await register_via_api(client)
        body = {"refresh_token": registered["refresh_token"]}

        response = await client.post("/api/v1/auth/logout", json=body)

        assert response.status_code == 204
        assert "refresh_token=" in response.headers["set-cookie"]
        refreshed = await client.post("/api/v1/auth/refresh", json=body)
        assert refreshed.status_code == 401

    async def test_logout_with_unknown_token_succeeds(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/logout", json={"refresh_token": "nope"})

        assert response.status_code == 204

    async def test_logout_all(self, client: AsyncClient):
        registered = await register_via_api(client, email="all@example.com")
        await client.post(
            "/api/v1/auth/login",
            json={"email": "all@example.com", "password": DEFAULT_PASSWORD},
        )

        response = await client.post(
            "/api/v1/auth/logout-all",
            headers={"Authorization": f"Bearer {registered['access_token']}"},
        )

        assert response.status_code == 200
        assert response.json() == {"revoked": 2}
        refreshed = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": registered["refresh_token"]},
        )
        assert refreshed.status_code == 401

    async def test_me(self, client: AsyncClient):
        registered = await register_via_api(client, email="me@example.com")

        response = await client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {registered['access_token']}"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "me@example.com"
        assert data["tenant_id"] == registered["tenant"]["id"]
        assert data["role"] == "owner"

    async def test_me_requires_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert error_code(response) == "missing_credentials"
