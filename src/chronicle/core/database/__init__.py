"""Database layer - session management, base models, and mixins."""

from chronicle.core.database.base import (
    Base,
    TenantMixin,
    TimestampMixin,
    UTCDateTime,
    UUIDMixin,
    utcnow,
)
from chronicle.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
)
from chronicle.core.database.tenant import (
    TenantContextRequired,
    TenantMismatchError,
    TenantSession,
    tenant_filter,
)


__all__ = [
    "Base",
    "TenantContextRequired",
    "TenantMismatchError",
    "TenantMixin",
    "TenantSession",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
    "tenant_filter",
    "utcnow",
]
