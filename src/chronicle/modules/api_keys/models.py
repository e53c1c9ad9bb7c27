"""API key database model."""

from datetime import datetime

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from chronicle.core.constants import (
    API_KEY_DISPLAY_PREFIX_LENGTH,
    MAX_NAME_LENGTH,
    SHA256_HEX_LENGTH,
)
from chronicle.core.database.base import (
    Base,
    TenantMixin,
    UTCDateTime,
    UUIDMixin,
    utcnow,
)


class ApiKey(Base, UUIDMixin, TenantMixin):
    """A tenant's API key, stored as a SHA-256 hash.

    The plaintext key is shown once at creation and never persisted. The
    leading characters are kept in key_prefix so keys can be told apart
    in listings.

    Attributes:
        name: Human-readable label
        key_hash: SHA-256 hash of the plaintext key
        key_prefix: First characters of the plaintext key, for display
        is_active: False once revoked
        created_at: When the key was issued
        expires_at: Optional expiry
        last_used_at: Last successful validation, best-effort
        revoked_at: When the key was revoked
    """

    __tablename__ = "api_keys"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    key_hash: Mapped[str] = mapped_column(
        String(SHA256_HEX_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    key_prefix: Mapped[str] = mapped_column(
        String(API_KEY_DISPLAY_PREFIX_LENGTH),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
        nullable=False,
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime,
        nullable=True,
    )
    last_used_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime,
        nullable=True,
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime,
        nullable=True,
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utcnow()) >= self.expires_at

    def revoke(self, now: datetime | None = None) -> None:
        """Revoke the key; revoking twice keeps the first timestamp."""
        if self.revoked_at is None:
            self.revoked_at = now or utcnow()
        self.is_active = False

    def __repr__(self) -> str:
        return f"<ApiKey(id={self.id}, tenant_id={self.tenant_id}, prefix={self.key_prefix})>"
