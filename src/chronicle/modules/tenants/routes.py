"""Tenant API routes.

All routes act on the caller's own tenant, taken from the bearer token.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends

from chronicle.core.auth.dependencies import BearerPrincipal
from chronicle.core.auth.principal import Principal
from chronicle.core.permissions.dependencies import require_role
from chronicle.core.permissions.roles import Role
from chronicle.modules.tenants import router
from chronicle.modules.tenants.schemas import (
    CurrentTenantResponse,
    MemberRoleUpdate,
    MembershipResponse,
    TenantResponse,
)
from chronicle.modules.tenants.services import TenantSvc


OwnerPrincipal = Annotated[Principal, Depends(require_role(Role.OWNER))]


@router.get(
    "/current",
    response_model=CurrentTenantResponse,
    summary="Get current tenant",
)
async def get_current_tenant(
    principal: BearerPrincipal,
    service: TenantSvc,
) -> CurrentTenantResponse:
    """Get the tenant the caller is acting in."""
    tenant = await service.get_tenant(principal.tenant_id)
    return CurrentTenantResponse(
        **TenantResponse.model_validate(tenant).model_dump(),
        role=principal.role,
    )


@router.get(
    "/current/members",
    response_model=list[MembershipResponse],
    summary="List members",
)
async def list_members(
    principal: BearerPrincipal,
    service: TenantSvc,
) -> list[MembershipResponse]:
    """List the members of the caller's tenant."""
    members = await service.list_members(principal.tenant_id)
    return [MembershipResponse.model_validate(m) for m in members]


@router.put(
    "/current/members/{user_id}/role",
    response_model=MembershipResponse,
    summary="Change a member's role",
    description="Requires the owner role. The last owner cannot be demoted.",
)
async def update_member_role(
    user_id: UUID,
    data: MemberRoleUpdate,
    principal: OwnerPrincipal,
    service: TenantSvc,
) -> MembershipResponse:
    """Change a member's role in the caller's tenant."""
    membership = await service.update_member_role(principal.tenant_id, user_id, data.role)
    return MembershipResponse.model_validate(membership)


@router.post(
    "/current/deactivate",
    response_model=TenantResponse,
    summary="Deactivate tenant",
    description=(
        "Requires the owner role. Deactivation blocks every login, bearer token "
        "and API key of the tenant."
    ),
)
async def deactivate_current_tenant(
    principal: OwnerPrincipal,
    service: TenantSvc,
) -> TenantResponse:
    """Deactivate the caller's tenant."""
    tenant = await service.deactivate(principal.tenant_id)
    return TenantResponse.model_validate(tenant)
