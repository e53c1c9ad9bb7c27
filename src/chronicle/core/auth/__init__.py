"""Authentication: credential issuing, token rotation, and principals.

Dependencies, routes and the service are imported from their own
modules; they depend on feature modules that in turn use this package.
"""

from chronicle.core.auth.backend import (
    create_access_token,
    decode_access_token,
    generate_refresh_token,
    hash_password,
    hash_token,
    verify_password,
)
from chronicle.core.auth.schemas import (
    AccessClaims,
    AuthFailure,
    AuthFailureReason,
    AuthResult,
    TenantSummary,
    UserSummary,
)


__all__ = [
    # Schemas
    "AccessClaims",
    "AuthFailure",
    "AuthFailureReason",
    "AuthResult",
    "TenantSummary",
    "UserSummary",
    # Token utilities
    "create_access_token",
    "decode_access_token",
    "generate_refresh_token",
    # Password utilities
    "hash_password",
    "hash_token",
    "verify_password",
]
