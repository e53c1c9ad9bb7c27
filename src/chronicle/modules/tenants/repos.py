"""Tenant and membership repositories.

These tables define tenancy itself, so they are queried with explicit
tenant and user ids rather than through a TenantSession.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from chronicle.api.dependencies import DBSession
from chronicle.core.permissions.roles import Role
from chronicle.modules.tenants.models import Membership, Tenant


class TenantRepository:
    """Repository for Tenant database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, tenant: Tenant) -> Tenant:
        """Persist a new tenant."""
        self.session.add(tenant)
        await self.session.flush()
        return tenant

    async def get_by_id(self, tenant_id: UUID) -> Tenant | None:
        """Get a tenant by ID."""
        return await self.session.get(Tenant, tenant_id)

    async def slug_exists(self, slug: str) -> bool:
        """Check whether a slug is already taken."""
        stmt = select(func.count()).select_from(Tenant).where(Tenant.slug == slug)
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def update(self, tenant: Tenant) -> Tenant:
        """Flush changes to a tenant."""
        await self.session.flush()
        return tenant


class MembershipRepository:
    """Repository for Membership database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, membership: Membership) -> Membership:
        """Persist a new membership."""
        self.session.add(membership)
        await self.session.flush()
        return membership

    async def list_for_user(self, user_id: UUID) -> list[Membership]:
        """List a user's memberships, oldest first.

        Args:
            user_id: The user's UUID

        Returns:
            Memberships ordered by join time
        """
        stmt = (
            select(Membership)
            .where(Membership.user_id == user_id)
            .order_by(Membership.joined_at, Membership.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_first_for_user(self, user_id: UUID) -> Membership | None:
        """Get the user's earliest membership."""
        memberships = await self.list_for_user(user_id)
        return memberships[0] if memberships else None

    async def get(self, user_id: UUID, tenant_id: UUID) -> Membership | None:
        """Get the membership for a (user, tenant) pair."""
        stmt = select(Membership).where(
            Membership.user_id == user_id,
            Membership.tenant_id == tenant_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_tenant(self, tenant_id: UUID) -> list[Membership]:
        """List a tenant's memberships, oldest first."""
        stmt = (
            select(Membership)
            .where(Membership.tenant_id == tenant_id)
            .order_by(Membership.joined_at, Membership.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_with_role(self, tenant_id: UUID, role: Role) -> int:
        """Count a tenant's members holding a role."""
        stmt = (
            select(func.count())
            .select_from(Membership)
            .where(Membership.tenant_id == tenant_id, Membership.role == role)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def update(self, membership: Membership) -> Membership:
        """Flush changes to a membership."""
        await self.session.flush()
        return membership


# Type aliases for dependency injection
TenantRepo = Annotated[TenantRepository, Depends(TenantRepository)]
MembershipRepo = Annotated[MembershipRepository, Depends(MembershipRepository)]
