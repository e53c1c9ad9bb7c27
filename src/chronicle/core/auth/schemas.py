"""Authentication schemas for token claims and flow results."""

from datetime import datetime
from enum import StrEnum
from typing import Self
from uuid import UUID

from pydantic import BaseModel

from chronicle.core.permissions.roles import Role


class AccessClaims(BaseModel):
    """Claims extracted from a verified access token.

    Attributes:
        user_id: The user's UUID (``sub``)
        email: The user's email address
        tenant_id: The tenant the token is scoped to (``tid``)
        role: The user's role in that tenant at issue time
        jti: Unique token identifier
        exp: Token expiration time
        first_name: Optional given name
        last_name: Optional family name
    """

    user_id: UUID
    email: str
    tenant_id: UUID
    role: Role
    jti: str
    exp: datetime
    first_name: str | None = None
    last_name: str | None = None


class UserSummary(BaseModel):
    """Public view of the authenticated user."""

    id: UUID
    email: str
    first_name: str | None = None
    last_name: str | None = None


class TenantSummary(BaseModel):
    """Public view of the tenant a token pair is scoped to."""

    id: UUID
    name: str
    slug: str
    role: Role


class AuthFailureReason(StrEnum):
    """Why an authentication flow did not succeed."""

    EMAIL_TAKEN = "email_taken"
    INVALID_CREDENTIALS = "invalid_credentials"
    NO_MEMBERSHIP = "no_membership"
    TENANT_NOT_AUTHORIZED = "tenant_not_authorized"
    TENANT_INACTIVE = "tenant_inactive"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"


class AuthFailure(BaseModel):
    """A failed flow with a human-readable message.

    Attributes:
        reason: Machine-readable failure reason
        message: Message safe to show to the client
        unauthorized: True for security-boundary failures, which the HTTP
            layer renders as 401 without saying which check failed
    """

    reason: AuthFailureReason
    message: str
    unauthorized: bool = False

    @property
    def is_unauthorized(self) -> bool:
        return self.unauthorized


class AuthResult(BaseModel):
    """Uniform result of register, login, refresh and logout.

    On success the token fields and summaries are set; on failure only
    ``failure`` is. Logout succeeds without tokens.
    """

    success: bool
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: datetime | None = None
    user: UserSummary | None = None
    tenant: TenantSummary | None = None
    failure: AuthFailure | None = None

    @property
    def error(self) -> str | None:
        return self.failure.message if self.failure else None

    @classmethod
    def ok(
        cls,
        *,
        access_token: str | None = None,
        refresh_token: str | None = None,
        expires_at: datetime | None = None,
        user: UserSummary | None = None,
        tenant: TenantSummary | None = None,
    ) -> Self:
        return cls(
            success=True,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
            user=user,
            tenant=tenant,
        )

    @classmethod
    def failed(
        cls,
        reason: AuthFailureReason,
        message: str,
        *,
        unauthorized: bool = False,
    ) -> Self:
        return cls(
            success=False,
            failure=AuthFailure(reason=reason, message=message, unauthorized=unauthorized),
        )

    def __repr__(self) -> str:
        # Tokens stay out of reprs and tracebacks
        return f"AuthResult(success={self.success}, failure={self.failure!r})"
