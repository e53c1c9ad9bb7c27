"""Pydantic schemas for tenant operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from chronicle.core.permissions.roles import Role


class TenantResponse(BaseModel):
    """Schema for tenant response data."""

    id: UUID
    name: str
    slug: str
    is_active: bool
    created_at: datetime
    deactivated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CurrentTenantResponse(TenantResponse):
    """The caller's tenant together with the caller's role in it."""

    role: Role


class MembershipResponse(BaseModel):
    """Schema for membership response data."""

    user_id: UUID
    tenant_id: UUID
    role: Role
    joined_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MemberRoleUpdate(BaseModel):
    """Schema for changing a member's role."""

    role: Role
