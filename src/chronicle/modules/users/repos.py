"""User and refresh token repositories."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select, update

from chronicle.api.dependencies import DBSession
from chronicle.core.auth.backend import hash_password, verify_password
from chronicle.modules.users.models import RefreshToken, User


class UserRepository:
    """Identity store backed by the users table.

    Provides user creation, password verification, lookups, and
    last-login stamping. Users are global, not tenant-scoped.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(
        self,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Create a user with a hashed password.

        Args:
            email: Email address, stored lowercased
            password: Plain text password; only its hash is stored
            first_name: Optional given name
            last_name: Optional family name

        Returns:
            The created user with ID populated
        """
        user = User(
            email=email.strip().lower(),
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
        )
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get a user by ID."""
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email address (case-insensitive)."""
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    def check_password(self, user: User, password: str) -> bool:
        """Verify a password against the user's stored hash."""
        return verify_password(password, user.password_hash)

    async def record_login(self, user: User, now: datetime) -> None:
        """Stamp the user's last successful login."""
        user.last_login_at = now
        await self.session.flush()


class RefreshTokenRepository:
    """Repository for RefreshToken database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, token: RefreshToken) -> RefreshToken:
        """Create a new refresh token.

        Args:
            token: RefreshToken instance to create

        Returns:
            The created token
        """
        self.session.add(token)
        await self.session.flush()
        return token

    async def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Get a refresh token by its hash, whatever its state.

        Args:
            token_hash: SHA-256 hash of the token

        Returns:
            RefreshToken if found, None otherwise
        """
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            # Bulk revocations skip the identity map; reload the row
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def revoke_if_active(
        self,
        token_id: UUID,
        now: datetime,
        revoked_by_ip: str,
        replaced_by_token_hash: str | None = None,
    ) -> bool:
        """Atomically move a token from active to revoked.

        Issues a single conditional UPDATE that only matches while the
        token is unrevoked and unexpired, so of several concurrent
        callers at most one succeeds.

        Args:
            token_id: The token to revoke
            now: Revocation time, also the expiry cut-off
            revoked_by_ip: Client IP performing the revocation
            replaced_by_token_hash: Successor hash when rotating, None on logout

        Returns:
            True if this call revoked the token, False if it was already
            revoked, expired, or missing
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.id == token_id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now,
            )
            .values(
                revoked_at=now,
                revoked_by_ip=revoked_by_ip,
                replaced_by_token_hash=replaced_by_token_hash,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        revoked = result.rowcount == 1
        if revoked:
            # Keep any loaded instance in step with the row
            await self.session.get(RefreshToken, token_id, populate_existing=True)
        return revoked

    async def revoke_all_for_user(self, user_id: UUID, now: datetime, revoked_by_ip: str) -> int:
        """Revoke every active refresh token of a user.

        Returns:
            Number of tokens revoked
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now,
            )
            .values(revoked_at=now, revoked_by_ip=revoked_by_ip)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def list_for_user(self, user_id: UUID) -> list[RefreshToken]:
        """List all of a user's refresh tokens, oldest first."""
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .order_by(RefreshToken.created_at)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


# Type alias for dependency injection
UserRepo = Annotated[UserRepository, Depends(UserRepository)]
