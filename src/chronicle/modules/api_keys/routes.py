"""API key management routes.

Keys are managed by admins and owners of a tenant with bearer tokens.
"""

from datetime import UTC
from typing import Annotated
from uuid import UUID

from fastapi import Depends, status

from chronicle.core.auth.principal import Principal
from chronicle.core.errors import NotFoundError
from chronicle.core.permissions.dependencies import require_role
from chronicle.core.permissions.roles import Role
from chronicle.modules.api_keys import router
from chronicle.modules.api_keys.schemas import (
    ApiKeyCreate,
    ApiKeyCreatedResponse,
    ApiKeyResponse,
)
from chronicle.modules.api_keys.services import ApiKeySvc


AdminPrincipal = Annotated[Principal, Depends(require_role(Role.ADMIN))]


@router.post(
    "",
    response_model=ApiKeyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create API key",
    description="Issues a key for the caller's tenant. The key is returned only once.",
)
async def create_api_key(
    data: ApiKeyCreate,
    principal: AdminPrincipal,
    service: ApiKeySvc,
) -> ApiKeyCreatedResponse:
    """Create an API key."""
    expires_at = data.expires_at
    if expires_at is not None and expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)

    api_key, plaintext = await service.create_api_key(
        principal.tenant_id,
        data.name,
        expires_at=expires_at,
    )
    return ApiKeyCreatedResponse(
        **ApiKeyResponse.model_validate(api_key).model_dump(),
        key=plaintext,
    )


@router.get(
    "",
    response_model=list[ApiKeyResponse],
    summary="List API keys",
)
async def list_api_keys(
    principal: AdminPrincipal,
    service: ApiKeySvc,
) -> list[ApiKeyResponse]:
    """List the caller's tenant's API keys."""
    keys = await service.list_api_keys(principal.tenant_id)
    return [ApiKeyResponse.model_validate(k) for k in keys]


@router.delete(
    "/{key_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke API key",
    description="Revokes a key of the caller's tenant. Revoking twice is not an error.",
)
async def revoke_api_key(
    key_id: UUID,
    principal: AdminPrincipal,
    service: ApiKeySvc,
) -> None:
    """Revoke an API key."""
    found = await service.revoke_api_key(key_id, tenant_id=principal.tenant_id)
    if not found:
        raise NotFoundError("API key not found", resource="api_key", resource_id=str(key_id))
