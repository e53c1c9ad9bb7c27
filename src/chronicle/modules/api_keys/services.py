"""API key issuing, validation and revocation."""

import secrets
from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from chronicle.api.dependencies import DBSession
from chronicle.core.auth.backend import hash_token
from chronicle.core.constants import (
    API_KEY_DISPLAY_PREFIX_LENGTH,
    API_KEY_PREFIX,
    API_KEY_SECRET_BYTES,
)
from chronicle.core.database.base import utcnow
from chronicle.core.database.tenant import TenantSession
from chronicle.modules.api_keys.models import ApiKey
from chronicle.modules.api_keys.repos import ApiKeyLookupRepository, ApiKeyRepository
from chronicle.modules.tenants.models import Tenant


logger = structlog.get_logger()


def generate_api_key() -> str:
    """Generate a plaintext API key with the recognizable prefix."""
    return API_KEY_PREFIX + secrets.token_urlsafe(API_KEY_SECRET_BYTES)


class ApiKeyService:
    """Service for API key lifecycle operations.

    Keys are returned in plaintext exactly once, from create_api_key();
    afterwards only their hash and display prefix exist.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.lookup = ApiKeyLookupRepository(db)

    def _repo(self, tenant_id: UUID) -> ApiKeyRepository:
        return ApiKeyRepository(TenantSession(self.db, tenant_id))

    async def create_api_key(
        self,
        tenant_id: UUID,
        name: str,
        expires_at: datetime | None = None,
    ) -> tuple[ApiKey, str]:
        """Issue a new key for a tenant.

        Args:
            tenant_id: The owning tenant
            name: Human-readable label
            expires_at: Optional expiry

        Returns:
            Tuple of (stored key, plaintext key)
        """
        plaintext = generate_api_key()
        api_key = ApiKey(
            tenant_id=tenant_id,
            name=name,
            key_hash=hash_token(plaintext),
            key_prefix=plaintext[:API_KEY_DISPLAY_PREFIX_LENGTH],
            expires_at=expires_at,
        )
        await self._repo(tenant_id).create(api_key)

        logger.info(
            "api_key_created",
            api_key_id=str(api_key.id),
            tenant_id=str(tenant_id),
        )
        return api_key, plaintext

    async def validate_api_key(self, plaintext: Any) -> ApiKey | None:
        """Resolve a presented key to its record.

        Never raises for bad input.

        Args:
            plaintext: The presented key

        Returns:
            The key if it is known, active and unexpired and its tenant is
            active; None otherwise
        """
        if not isinstance(plaintext, str):
            return None
        plaintext = plaintext.strip()
        if not plaintext or not plaintext.startswith(API_KEY_PREFIX):
            return None

        api_key = await self.lookup.get_by_hash_system(hash_token(plaintext))
        if api_key is None:
            return None

        now = utcnow()
        if not api_key.is_active or api_key.is_expired(now):
            return None

        tenant = await self.db.get(Tenant, api_key.tenant_id)
        if tenant is None or not tenant.is_active:
            return None

        await self._record_usage(api_key, now)
        return api_key

    async def _record_usage(self, api_key: ApiKey, now: datetime) -> None:
        """Best-effort last_used_at stamp; failures never fail validation.

        The UPDATE runs in its own short transaction on a separate
        connection and commits at once. The caller's transaction never
        holds the row lock and is untouched when the write fails.
        """
        try:
            async with AsyncSession(self.db.bind) as session, session.begin():
                await ApiKeyLookupRepository(session).record_usage_system(api_key.id, now)
        except SQLAlchemyError as e:
            logger.warning(
                "api_key_usage_record_failed",
                api_key_id=str(api_key.id),
                error=type(e).__name__,
            )
            return
        # Mirror the stamp without making the instance dirty in the caller's session
        set_committed_value(api_key, "last_used_at", now)

    async def revoke_api_key(self, key_id: UUID, tenant_id: UUID | None = None) -> bool:
        """Revoke a key. Idempotent.

        Args:
            key_id: The key to revoke
            tenant_id: When given, only a key owned by this tenant is found

        Returns:
            True if the key exists (whether or not it was already revoked),
            False for an unknown key
        """
        if tenant_id is None:
            api_key = await self.lookup.get_by_id_system(key_id)
        else:
            api_key = await self._repo(tenant_id).get(key_id)
        if api_key is None:
            return False

        if api_key.is_active:
            api_key.revoke()
            await self.db.flush()
            logger.info(
                "api_key_revoked",
                api_key_id=str(api_key.id),
                tenant_id=str(api_key.tenant_id),
            )
        return True

    async def list_api_keys(self, tenant_id: UUID) -> list[ApiKey]:
        """List a tenant's keys (metadata only)."""
        return await self._repo(tenant_id).list_all()


# Type alias for dependency injection
ApiKeySvc = Annotated[ApiKeyService, Depends(ApiKeyService)]
