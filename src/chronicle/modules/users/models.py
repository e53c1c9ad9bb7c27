"""User and refresh token database models."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chronicle.core.constants import (
    MAX_EMAIL_LENGTH,
    MAX_IPV6_LENGTH,
    MAX_NAME_LENGTH,
    SHA256_HEX_LENGTH,
)
from chronicle.core.database.base import (
    Base,
    TimestampMixin,
    UTCDateTime,
    UUIDMixin,
    utcnow,
)


class User(Base, UUIDMixin, TimestampMixin):
    """User model representing an interactive identity.

    Users are global; access to tenants is granted through memberships.

    Attributes:
        email: Globally unique email address
        password_hash: Bcrypt-hashed password
        first_name: Optional given name
        last_name: Optional family name
        is_active: Whether the user can log in
        last_login_at: When the user last logged in successfully
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    first_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    last_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"


class RefreshToken(Base, UUIDMixin):
    """Opaque refresh token, stored as a SHA-256 hash.

    A token is active until it is revoked or expires. Revocation by
    rotation records the hash of the successor in replaced_by_token_hash,
    which links tokens into a chain; revocation by logout leaves it empty.
    Revoked rows are never modified again.

    Attributes:
        user_id: The user this token belongs to
        token_hash: SHA-256 hash of the refresh token
        expires_at: When the token expires
        created_at: When the token was issued
        created_by_ip: The IP address that requested the token
        revoked_at: When the token was revoked
        revoked_by_ip: The IP address that revoked the token
        replaced_by_token_hash: Hash of the token issued in its place
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash: Mapped[str] = mapped_column(
        String(SHA256_HEX_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
        nullable=False,
    )
    created_by_ip: Mapped[str] = mapped_column(
        String(MAX_IPV6_LENGTH),
        nullable=False,
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime,
        nullable=True,
    )
    revoked_by_ip: Mapped[str | None] = mapped_column(
        String(MAX_IPV6_LENGTH),
        nullable=True,
    )
    replaced_by_token_hash: Mapped[str | None] = mapped_column(
        String(SHA256_HEX_LENGTH),
        nullable=True,
    )

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    def is_active(self, now: datetime | None = None) -> bool:
        return not self.is_revoked and not self.is_expired(now)

    def __repr__(self) -> str:
        return f"<RefreshToken(id={self.id}, user_id={self.user_id}, revoked={self.is_revoked})>"
