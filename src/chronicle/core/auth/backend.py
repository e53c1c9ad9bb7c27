"""Credential issuing for JWT access tokens, refresh tokens and passwords.

This module provides core authentication utilities including:
- Password hashing with bcrypt
- JWT access token creation and verification
- Opaque refresh token generation
- Token hashing for storage
"""

import hashlib
import secrets
import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from chronicle.config import settings
from chronicle.core.auth.schemas import AccessClaims
from chronicle.core.constants import BCRYPT_ROUNDS, REFRESH_TOKEN_BYTES
from chronicle.core.permissions.roles import Role


if TYPE_CHECKING:
    from chronicle.modules.users.models import User


# Password hashing context using bcrypt
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


# ============================================================
# Password Utilities
# ============================================================


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash of the password
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Bcrypt hash to verify against

    Returns:
        True if password matches, False otherwise
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed or unknown hash format
        return False


# ============================================================
# JWT Access Tokens
# ============================================================


def create_access_token(
    user: "User",
    tenant_id: UUID,
    role: Role,
    expires_delta: timedelta | None = None,
    now: datetime | None = None,
) -> str:
    """Create a short-lived, signed JWT access token.

    Args:
        user: The authenticated user
        tenant_id: The tenant the token is scoped to
        role: The user's role in that tenant
        expires_delta: Optional custom lifetime
        now: Issue time, defaults to the current time

    Returns:
        Encoded JWT access token

    Raises:
        SigningKeyError: If no signing secret is configured
    """
    secret_key = settings.require_secret_key()

    now = now or datetime.now(UTC)
    expire = now + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.access_token_expire_minutes)
    )

    to_encode: dict[str, Any] = {
        "sub": str(user.id),
        "email": user.email,
        "tid": str(tenant_id),
        "role": role.value,
        "jti": str(uuid.uuid4()),
        "type": "access",
        "iat": now,
        "exp": expire,
    }
    if user.first_name:
        to_encode["given_name"] = user.first_name
    if user.last_name:
        to_encode["family_name"] = user.last_name
    if settings.jwt_issuer:
        to_encode["iss"] = settings.jwt_issuer
    if settings.jwt_audience:
        to_encode["aud"] = settings.jwt_audience

    return jwt.encode(
        to_encode,
        secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> AccessClaims | None:
    """Decode and validate a JWT access token.

    Checks signature, expiry, issuer and audience (when configured),
    token type, and that every required claim is present and well formed.

    Args:
        token: The JWT token to decode

    Returns:
        AccessClaims if valid, None otherwise

    Raises:
        SigningKeyError: If no signing secret is configured
    """
    secret_key = settings.require_secret_key()

    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options=options,
        )
    except JWTError:
        return None

    if payload.get("type") != "access":
        return None

    try:
        return AccessClaims(
            user_id=UUID(payload["sub"]),
            email=payload["email"],
            tenant_id=UUID(payload["tid"]),
            role=Role(payload["role"]),
            jti=payload["jti"],
            exp=datetime.fromtimestamp(payload["exp"], tz=UTC),
            first_name=payload.get("given_name"),
            last_name=payload.get("family_name"),
        )
    except (KeyError, TypeError, ValueError):
        return None


def access_token_expiration(now: datetime | None = None) -> datetime:
    """Expiry time of an access token issued at ``now``."""
    return (now or datetime.now(UTC)) + timedelta(
        minutes=settings.access_token_expire_minutes
    )


# ============================================================
# Refresh Tokens
# ============================================================


def generate_refresh_token() -> str:
    """Generate an opaque refresh token.

    The refresh token is a random string (not a JWT) with 512 bits of
    entropy. Only its hash is ever stored.

    Returns:
        Random URL-safe refresh token string
    """
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Hash a token for secure storage and lookup.

    Uses SHA-256 so the same input always maps to the same stored value.
    This prevents token theft if the database is compromised.

    Args:
        token: The token to hash

    Returns:
        SHA-256 hex digest of the token
    """
    return hashlib.sha256(token.encode()).hexdigest()


def refresh_token_expiration(now: datetime | None = None, days: int | None = None) -> datetime:
    """Get the expiration datetime for a refresh token.

    Args:
        now: Issue time, defaults to the current time
        days: Number of days until expiration

    Returns:
        Expiration datetime
    """
    if days is None:
        days = settings.refresh_token_expire_days
    return (now or datetime.now(UTC)) + timedelta(days=days)
