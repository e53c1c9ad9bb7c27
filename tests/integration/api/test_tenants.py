"""Integration tests for tenant endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from chronicle.core.auth.schemas import AuthResult
from chronicle.core.auth.service import AuthService
from chronicle.core.permissions.roles import Role
from chronicle.modules.api_keys.services import ApiKeyService
from chronicle.modules.tenants.models import Membership
from chronicle.modules.tenants.repos import MembershipRepository
from tests.conftest import api_key_header, bearer, error_code, register
from tests.factories.auth import DEFAULT_PASSWORD


pytestmark = pytest.mark.integration


@pytest.fixture
async def member_a(auth_service: AuthService, db: AsyncSession, owner_a: AuthResult) -> AuthResult:
    """A plain member of tenant A, signed in to tenant A."""
    user = await register(auth_service, email="member-a@example.com")
    db.add(Membership(user_id=user.user.id, tenant_id=owner_a.tenant.id, role=Role.MEMBER))
    await db.flush()
    return await auth_service.login("member-a@example.com", DEFAULT_PASSWORD, tenant_id=owner_a.tenant.id)


class TestCurrentTenant:
    """Tests for GET /api/v1/tenants/current."""

    async def test_current_tenant(self, client: AsyncClient, owner_a: AuthResult):
        response = await client.get("/api/v1/tenants/current", headers=bearer(owner_a))

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(owner_a.tenant.id)
        assert data["name"] == "Tenant A"
        assert data["is_active"] is True
        assert data["role"] == "owner"

    async def test_list_members(self, client: AsyncClient, owner_a: AuthResult, member_a: AuthResult):
        response = await client.get("/api/v1/tenants/current/members", headers=bearer(member_a))

        assert response.status_code == 200
        roles = {m["user_id"]: m["role"] for m in response.json()}
        assert roles == {str(owner_a.user.id): "owner", str(member_a.user.id): "member"}


class TestMemberRoles:
    """Tests for PUT /api/v1/tenants/current/members/{user_id}/role."""

    async def test_owner_promotes_member(
        self,
        client: AsyncClient,
        owner_a: AuthResult,
        member_a: AuthResult,
    ):
        response = await client.put(
            f"/api/v1/tenants/current/members/{member_a.user.id}/role",
            json={"role": "admin"},
            headers=bearer(owner_a),
        )

        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    async def test_role_change_applies_to_existing_tokens(
        self,
        client: AsyncClient,
        owner_a: AuthResult,
        member_a: AuthResult,
    ):
        """Roles are read from the membership on every request."""
        await client.put(
            f"/api/v1/tenants/current/members/{member_a.user.id}/role",
            json={"role": "admin"},
            headers=bearer(owner_a),
        )

        response = await client.post(
            "/api/v1/api-keys",
            json={"name": "promoted"},
            headers=bearer(member_a),
        )

        assert response.status_code == 201

    async def test_member_cannot_change_roles(
        self,
        client: AsyncClient,
        owner_a: AuthResult,
        member_a: AuthResult,
    ):
        response = await client.put(
            f"/api/v1/tenants/current/members/{owner_a.user.id}/role",
            json={"role": "member"},
            headers=bearer(member_a),
        )

        assert response.status_code == 403
        assert error_code(response) == "insufficient_role"

    async def test_last_owner_cannot_be_demoted(self, client: AsyncClient, owner_a: AuthResult):
        response = await client.put(
            f"/api/v1/tenants/current/members/{owner_a.user.id}/role",
            json={"role": "admin"},
            headers=bearer(owner_a),
        )

        assert response.status_code == 400
        assert error_code(response) == "last_owner"

    async def test_unknown_member(self, client: AsyncClient, owner_a: AuthResult, owner_b: AuthResult):
        response = await client.put(
            f"/api/v1/tenants/current/members/{owner_b.user.id}/role",
            json={"role": "admin"},
            headers=bearer(owner_a),
        )

        assert response.status_code == 404

    async def test_removed_member_loses_access(
        self,
        client: AsyncClient,
        db: AsyncSession,
        owner_a: AuthResult,
        member_a: AuthResult,
    ):
        """A token outlives its membership only until the next request."""
        membership = await MembershipRepository(db).get(member_a.user.id, owner_a.tenant.id)
        await db.delete(membership)
        await db.flush()

        response = await client.get("/api/v1/tenants/current", headers=bearer(member_a))

        assert response.status_code == 403
        assert error_code(response) == "membership_required"


class TestDeactivateTenant:
    """Tests for POST /api/v1/tenants/current/deactivate."""

    async def test_member_cannot_deactivate(self, client: AsyncClient, member_a: AuthResult):
        response = await client.post("/api/v1/tenants/current/deactivate", headers=bearer(member_a))

        assert response.status_code == 403

    async def test_deactivation_cuts_off_every_credential(
        self,
        client: AsyncClient,
        api_key_service: ApiKeyService,
        owner_a: AuthResult,
    ):
        _, plaintext = await api_key_service.create_api_key(owner_a.tenant.id, "ingest")

        response = await client.post("/api/v1/tenants/current/deactivate", headers=bearer(owner_a))

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert response.json()["deactivated_at"] is not None

        bearer_response = await client.get("/api/v1/tenants/current", headers=bearer(owner_a))
        assert bearer_response.status_code == 403
        assert error_code(bearer_response) == "tenant_inactive"

        key_response = await client.post(
            "/api/v1/events",
            json={"type": "signup"},
            headers=api_key_header(plaintext),
        )
        assert key_response.status_code == 401

        login = await client.post(
            "/api/v1/auth/login",
            json={"email": "owner-a@example.com", "password": DEFAULT_PASSWORD},
        )
        assert login.status_code == 400
        assert error_code(login) == "tenant_inactive"

        refresh = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": owner_a.refresh_token},
        )
        assert refresh.status_code == 401
