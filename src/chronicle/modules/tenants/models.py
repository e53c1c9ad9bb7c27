"""Tenant and membership database models."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from chronicle.core.constants import MAX_NAME_LENGTH, MAX_SLUG_LENGTH
from chronicle.core.database.base import (
    Base,
    TimestampMixin,
    UTCDateTime,
    UUIDMixin,
    utcnow,
)
from chronicle.core.permissions.roles import Role


class Tenant(Base, UUIDMixin, TimestampMixin):
    """Tenant model representing an isolated customer organization.

    All tenant-scoped data references this table via tenant_id.
    Tenants are never hard-deleted; they are deactivated instead.
    """

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        index=True,
    )
    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
    )
    deactivated_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime,
        nullable=True,
    )

    def deactivate(self, now: datetime | None = None) -> None:
        """Deactivate the tenant; a no-op if already inactive."""
        if self.is_active:
            self.is_active = False
            self.deactivated_at = now or utcnow()

    def reactivate(self) -> None:
        """Reactivate the tenant and clear the deactivation stamp."""
        self.is_active = True
        self.deactivated_at = None

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name={self.name}, slug={self.slug})>"


class Membership(Base, UUIDMixin):
    """A user's role in a tenant.

    At most one membership exists per (user, tenant) pair.
    """

    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint("user_id", "tenant_id", name="uq_memberships_user_tenant"),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="membership_role", values_callable=lambda e: [r.value for r in e]),
        nullable=False,
    )
    joined_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
        nullable=False,
    )

    def update_role(self, role: Role) -> None:
        """Change the member's role."""
        self.role = role

    def __repr__(self) -> str:
        return (
            f"<Membership(user_id={self.user_id}, tenant_id={self.tenant_id}, "
            f"role={self.role})>"
        )
