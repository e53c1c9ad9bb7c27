"""Pydantic schemas for authentication requests and responses."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from chronicle.core.auth.schemas import TenantSummary, UserSummary
from chronicle.core.constants import (
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
)
from chronicle.core.permissions.roles import Role


# ============================================================
# Password Validation
# ============================================================

# Password complexity rules: (regex pattern, human-readable name)
PASSWORD_COMPLEXITY_RULES: list[tuple[str, str]] = [
    (r"[A-Z]", "uppercase letter"),
    (r"[a-z]", "lowercase letter"),
    (r"\d", "digit"),
]


def validate_password_complexity(password: str) -> str:
    """Validate password meets complexity requirements.

    Requirements:
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit

    Args:
        password: The password to validate

    Returns:
        The validated password

    Raises:
        ValueError: If password doesn't meet requirements
    """
    missing = [
        name
        for pattern, name in PASSWORD_COMPLEXITY_RULES
        if not re.search(pattern, password)
    ]

    if missing:
        if len(missing) == 1:
            raise ValueError(f"Password must contain at least one {missing[0]}")
        raise ValueError(f"Password must contain at least one: {', '.join(missing)}")

    return password


# ============================================================
# Authentication Schemas
# ============================================================


class RegisterRequest(BaseModel):
    """Schema for user registration.

    Creates both a new tenant and its owner in one request.
    """

    email: EmailStr
    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )
    first_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    last_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    tenant_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        """Validate password complexity."""
        return validate_password_complexity(v)


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str = Field(..., max_length=MAX_PASSWORD_LENGTH)
    tenant_id: UUID | None = None


class RefreshTokenRequest(BaseModel):
    """Refresh secret for clients that cannot use the cookie."""

    refresh_token: str | None = None


class AuthResponse(BaseModel):
    """Schema for a freshly issued token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    expires_in: int = Field(..., description="Access token expiration in seconds")
    user: UserSummary
    tenant: TenantSummary


class UserResponse(BaseModel):
    """The authenticated caller and the tenant they are acting in."""

    id: UUID
    email: str
    first_name: str | None = None
    last_name: str | None = None
    tenant_id: UUID
    role: Role


class LogoutAllResponse(BaseModel):
    """Number of sessions ended by logout-all."""

    revoked: int
