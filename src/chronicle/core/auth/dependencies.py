"""FastAPI dependencies for authentication and tenant resolution.

This module provides FastAPI dependency injection functions for:
- Resolving the caller from a bearer token or an API key
- Enforcing the single scheme each endpoint accepts
- Building the per-request tenant-scoped session
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from enum import StrEnum
from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from chronicle.api.dependencies import DBSession
from chronicle.config import settings
from chronicle.core.auth.backend import decode_access_token
from chronicle.core.auth.principal import Principal, ServiceAccountActor, UserActor
from chronicle.core.database.tenant import TenantSession
from chronicle.core.errors import ForbiddenError, UnauthorizedError
from chronicle.modules.api_keys.services import ApiKeyService
from chronicle.modules.tenants.repos import MembershipRepository, TenantRepository


# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)

# API key header security scheme
api_key_scheme = APIKeyHeader(name=settings.api_key_header, auto_error=False)


class AuthScheme(StrEnum):
    """The credential scheme an endpoint accepts."""

    BEARER = "bearer"
    API_KEY = "api_key"
    EITHER = "either"


def _scheme_mismatch() -> UnauthorizedError:
    return UnauthorizedError(
        "Credential type is not accepted by this endpoint",
        error_code="scheme_mismatch",
    )


async def _authenticate_bearer(token: str, db: DBSession) -> Principal:
    """Resolve a bearer token to a member principal.

    The token's tenant must still be active and the user must still be a
    member; the role used is the membership's current one.
    """
    claims = decode_access_token(token)
    if claims is None:
        raise UnauthorizedError(
            "Invalid or expired token",
            error_code="invalid_token",
        )

    membership = await MembershipRepository(db).get(claims.user_id, claims.tenant_id)
    if membership is None:
        raise ForbiddenError(
            "You are not a member of this tenant",
            error_code="membership_required",
        )

    tenant = await TenantRepository(db).get_by_id(claims.tenant_id)
    if tenant is None or not tenant.is_active:
        raise ForbiddenError(
            "Tenant is deactivated",
            error_code="tenant_inactive",
        )

    return Principal(
        actor=UserActor(user_id=claims.user_id, email=claims.email),
        tenant_id=claims.tenant_id,
        role=membership.role,
    )


async def _authenticate_api_key(key: str, db: DBSession) -> Principal:
    """Resolve an API key to a service-account principal."""
    api_key = await ApiKeyService(db).validate_api_key(key)
    if api_key is None:
        raise UnauthorizedError(
            "Invalid API key",
            error_code="invalid_api_key",
        )
    return Principal(
        actor=ServiceAccountActor(api_key_id=api_key.id, key_name=api_key.name),
        tenant_id=api_key.tenant_id,
    )


@lru_cache
def authenticate(scheme: AuthScheme) -> Callable[..., Awaitable[Principal]]:
    """Build a dependency that authenticates with exactly one scheme.

    A credential of the wrong scheme is rejected before it is checked, so
    a valid key never opens a bearer-only endpoint and vice versa. One
    dependency exists per scheme, so FastAPI resolves it once per request.

    Args:
        scheme: The scheme the endpoint accepts

    Returns:
        A dependency resolving to the caller's Principal

    Example:
        @router.post("/events")
        async def ingest(
            principal: Annotated[Principal, Depends(authenticate(AuthScheme.API_KEY))],
        ): ...
    """

    async def dependency(
        request: Request,
        db: DBSession,
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
        api_key: Annotated[str | None, Depends(api_key_scheme)],
    ) -> Principal:
        has_bearer = credentials is not None
        has_key = bool(api_key)

        match scheme:
            case AuthScheme.BEARER:
                if has_key:
                    raise _scheme_mismatch()
            case AuthScheme.API_KEY:
                if has_bearer:
                    raise _scheme_mismatch()
            case AuthScheme.EITHER:
                if has_bearer and has_key:
                    raise _scheme_mismatch()

        if credentials is not None:
            principal = await _authenticate_bearer(credentials.credentials, db)
        elif api_key:
            principal = await _authenticate_api_key(api_key, db)
        else:
            raise UnauthorizedError(
                "Missing authentication credentials",
                error_code="missing_credentials",
            )

        request.state.tenant_id = principal.tenant_id
        request.state.actor = principal.actor.actor_type.value
        return principal

    return dependency


# Type aliases for cleaner dependency injection
BearerPrincipal = Annotated[Principal, Depends(authenticate(AuthScheme.BEARER))]
ApiKeyPrincipal = Annotated[Principal, Depends(authenticate(AuthScheme.API_KEY))]


@lru_cache
def get_tenant_session(
    scheme: AuthScheme,
) -> Callable[..., AsyncGenerator[TenantSession, None]]:
    """Build a dependency yielding a session scoped to the caller's tenant.

    The tenant id is bound to the log context for the lifetime of the
    request and unbound afterwards, whether the request succeeds, fails or
    is cancelled.
    """

    async def dependency(
        db: DBSession,
        principal: Annotated[Principal, Depends(authenticate(scheme))],
    ) -> AsyncGenerator[TenantSession, None]:
        structlog.contextvars.bind_contextvars(tenant_id=str(principal.tenant_id))
        try:
            yield TenantSession(db, principal.tenant_id)
        finally:
            structlog.contextvars.unbind_contextvars("tenant_id")

    return dependency


BearerTenantSession = Annotated[TenantSession, Depends(get_tenant_session(AuthScheme.BEARER))]
ApiKeyTenantSession = Annotated[TenantSession, Depends(get_tenant_session(AuthScheme.API_KEY))]
