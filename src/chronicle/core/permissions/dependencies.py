"""Role requirements for route protection.

Usage:
    @router.post("", dependencies=[Depends(require_role(Role.ADMIN))])
    async def create_key(...): ...

or, to also receive the principal:

    async def deactivate(principal: Annotated[Principal, Depends(require_role(Role.OWNER))]):
        ...
"""

from collections.abc import Awaitable, Callable
from functools import lru_cache

import structlog

from chronicle.core.auth.dependencies import BearerPrincipal
from chronicle.core.auth.principal import Principal
from chronicle.core.errors import ForbiddenError
from chronicle.core.permissions.roles import Role, role_satisfies


logger = structlog.get_logger()


@lru_cache
def require_role(minimum: Role) -> Callable[..., Awaitable[Principal]]:
    """Build a dependency that requires a bearer caller with at least ``minimum``.

    Raises:
        ForbiddenError: If the caller's current role ranks below ``minimum``
    """

    async def dependency(principal: BearerPrincipal) -> Principal:
        if principal.role is None or not role_satisfies(principal.role, minimum):
            logger.info(
                "role_check_failed",
                actor_id=str(principal.actor.actor_id),
                tenant_id=str(principal.tenant_id),
                required=minimum.value,
            )
            raise ForbiddenError(
                f"This action requires the {minimum.value} role",
                error_code="insufficient_role",
            )
        return principal

    return dependency
