"""Activity event database model."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from chronicle.core.auth.principal import ActorType
from chronicle.core.constants import MAX_EVENT_SOURCE_LENGTH, MAX_EVENT_TYPE_LENGTH
from chronicle.core.database.base import (
    Base,
    TenantMixin,
    UTCDateTime,
    UUIDMixin,
    utcnow,
)


class ActivityEvent(Base, UUIDMixin, TenantMixin):
    """An activity event recorded for a tenant.

    Events are written by service accounts through API keys and read by
    members through bearer tokens. actor_type says which kind of identity
    actor_id refers to, so an API key id is never taken for a user id.

    Attributes:
        actor_type: user or service_account
        actor_id: The user id or API key id that recorded the event
        type: Event type, e.g. ``page_view``
        source: Where the event came from
        timestamp: When the event happened
        payload: Arbitrary JSON data
        created_at: When the event was stored
    """

    __tablename__ = "activity_events"
    __table_args__ = (
        Index("ix_activity_events_tenant_timestamp", "tenant_id", "timestamp"),
    )

    actor_type: Mapped[ActorType] = mapped_column(
        Enum(ActorType, name="actor_type", values_callable=lambda e: [a.value for a in e]),
        nullable=False,
    )
    actor_id: Mapped[UUID] = mapped_column(
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(
        String(MAX_EVENT_TYPE_LENGTH),
        nullable=False,
        index=True,
    )
    source: Mapped[str | None] = mapped_column(
        String(MAX_EVENT_SOURCE_LENGTH),
        nullable=True,
    )
    timestamp: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
        nullable=False,
        index=True,
    )
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ActivityEvent(id={self.id}, tenant_id={self.tenant_id}, type={self.type})>"
