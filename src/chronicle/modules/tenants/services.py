"""Tenant lifecycle and membership management."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from chronicle.core.errors import BadRequestError, NotFoundError
from chronicle.core.permissions.roles import Role
from chronicle.modules.tenants.models import Membership, Tenant
from chronicle.modules.tenants.repos import MembershipRepo, TenantRepo


logger = structlog.get_logger()


class TenantService:
    """Service for tenant and membership operations.

    Deactivating a tenant cuts off every credential bound to it: bearer
    requests are refused on the per-request membership check and API keys
    stop validating.
    """

    def __init__(self, tenants: TenantRepo, memberships: MembershipRepo) -> None:
        self.tenants = tenants
        self.memberships = memberships

    async def get_tenant(self, tenant_id: UUID) -> Tenant:
        """Get a tenant by ID.

        Raises:
            NotFoundError: If the tenant does not exist
        """
        tenant = await self.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found", resource="tenant", resource_id=str(tenant_id))
        return tenant

    async def deactivate(self, tenant_id: UUID) -> Tenant:
        """Deactivate a tenant. Idempotent."""
        tenant = await self.get_tenant(tenant_id)
        if tenant.is_active:
            tenant.deactivate()
            await self.tenants.update(tenant)
            logger.info("tenant_deactivated", tenant_id=str(tenant_id))
        return tenant

    async def reactivate(self, tenant_id: UUID) -> Tenant:
        """Reactivate a tenant."""
        tenant = await self.get_tenant(tenant_id)
        if not tenant.is_active:
            tenant.reactivate()
            await self.tenants.update(tenant)
            logger.info("tenant_reactivated", tenant_id=str(tenant_id))
        return tenant

    async def list_members(self, tenant_id: UUID) -> list[Membership]:
        """List a tenant's members, oldest first."""
        return await self.memberships.list_for_tenant(tenant_id)

    async def update_member_role(self, tenant_id: UUID, user_id: UUID, role: Role) -> Membership:
        """Change a member's role.

        Args:
            tenant_id: The tenant
            user_id: The member
            role: The new role

        Returns:
            The updated membership

        Raises:
            NotFoundError: If the user is not a member of the tenant
            BadRequestError: If this would leave the tenant without an owner
        """
        membership = await self.memberships.get(user_id, tenant_id)
        if membership is None:
            raise NotFoundError("Member not found", resource="membership", resource_id=str(user_id))

        if membership.role == role:
            return membership

        if membership.role == Role.OWNER:
            owners = await self.memberships.count_with_role(tenant_id, Role.OWNER)
            if owners <= 1:
                raise BadRequestError(
                    "A tenant must keep at least one owner",
                    error_code="last_owner",
                )

        previous = membership.role
        membership.update_role(role)
        await self.memberships.update(membership)
        logger.info(
            "member_role_changed",
            tenant_id=str(tenant_id),
            user_id=str(user_id),
            previous_role=previous.value,
            role=role.value,
        )
        return membership


# Type alias for dependency injection
TenantSvc = Annotated[TenantService, Depends(TenantService)]
