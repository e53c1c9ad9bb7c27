"""API key repositories.

Issuing, listing and revoking keys happen inside a tenant and go
through a TenantSession. Validation runs before any tenant is known, so
the lookups it needs are system-level and live on a separate class.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update

from chronicle.api.dependencies import DBSession
from chronicle.core.database.tenant import TenantSession
from chronicle.modules.api_keys.models import ApiKey


class ApiKeyRepository:
    """Tenant-scoped API key operations."""

    def __init__(self, session: TenantSession) -> None:
        self.session = session

    async def create(self, api_key: ApiKey) -> ApiKey:
        """Persist a new key for the session's tenant."""
        self.session.add(api_key)
        await self.session.flush()
        return api_key

    async def get(self, key_id: UUID) -> ApiKey | None:
        """Get one of this tenant's keys by ID."""
        return await self.session.get(ApiKey, key_id)

    async def list_all(self) -> list[ApiKey]:
        """List this tenant's keys, newest first."""
        stmt = self.session.select(ApiKey).order_by(ApiKey.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class ApiKeyLookupRepository:
    """System-level API key lookups used before a tenant is resolved."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def get_by_hash_system(self, key_hash: str) -> ApiKey | None:
        """Find a key by hash across all tenants.

        Only the key validator may call this: the tenant is derived from
        the key it finds.
        """
        stmt = select(ApiKey).where(ApiKey.key_hash == key_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id_system(self, key_id: UUID) -> ApiKey | None:
        """Get a key by ID across all tenants."""
        return await self.session.get(ApiKey, key_id)

    async def record_usage_system(self, key_id: UUID, now: datetime) -> None:
        """Stamp last_used_at with a single UPDATE; no read-modify-write."""
        stmt = (
            update(ApiKey)
            .where(ApiKey.id == key_id)
            .values(last_used_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
