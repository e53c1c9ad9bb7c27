"""Authentication service for registration, login, and token rotation.

Every flow returns an AuthResult. Expected failures (duplicate email,
bad credentials, tenant access) and security-boundary failures (an
unusable refresh token) are values, not exceptions; only storage errors
and configuration errors propagate.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from chronicle.api.dependencies import DBSession
from chronicle.core.auth.backend import (
    access_token_expiration,
    create_access_token,
    generate_refresh_token,
    hash_token,
    refresh_token_expiration,
)
from chronicle.core.auth.schemas import (
    AuthFailureReason,
    AuthResult,
    TenantSummary,
    UserSummary,
)
from chronicle.core.constants import TENANT_SLUG_ATTEMPTS, UNKNOWN_IP_ADDRESS
from chronicle.core.database.base import utcnow
from chronicle.core.permissions.roles import Role
from chronicle.core.utils.text import generate_slug, with_random_suffix
from chronicle.modules.tenants.models import Membership, Tenant
from chronicle.modules.tenants.repos import MembershipRepository, TenantRepository
from chronicle.modules.users.models import RefreshToken, User
from chronicle.modules.users.repos import RefreshTokenRepository, UserRepository


logger = structlog.get_logger()

EMAIL_TAKEN_MESSAGE = "User with this email already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
NO_MEMBERSHIP_MESSAGE = "User is not associated with any tenant"
TENANT_NOT_AUTHORIZED_MESSAGE = "You do not have access to the specified tenant"
TENANT_INACTIVE_MESSAGE = "Tenant is deactivated"
INVALID_REFRESH_TOKEN_MESSAGE = "Invalid or expired refresh token"


def _invalid_refresh_token() -> AuthResult:
    return AuthResult.failed(
        AuthFailureReason.INVALID_REFRESH_TOKEN,
        INVALID_REFRESH_TOKEN_MESSAGE,
        unauthorized=True,
    )


class AuthService:
    """Service for authentication operations.

    Handles user registration, login, token refresh, and logout.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.user_repo = UserRepository(db)
        self.token_repo = RefreshTokenRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.membership_repo = MembershipRepository(db)

    async def register(
        self,
        email: str,
        password: str,
        first_name: str | None,
        last_name: str | None,
        tenant_name: str,
        ip_address: str | None = None,
    ) -> AuthResult:
        """Register a new user together with a new tenant they own.

        Args:
            email: User's email address
            password: Plain text password
            first_name: Optional given name
            last_name: Optional family name
            tenant_name: Name for the new tenant
            ip_address: Client IP address

        Returns:
            AuthResult with a token pair scoped to the new tenant, or an
            ``email_taken`` failure
        """
        if await self.user_repo.get_by_email(email) is not None:
            return AuthResult.failed(AuthFailureReason.EMAIL_TAKEN, EMAIL_TAKEN_MESSAGE)

        try:
            async with self.db.begin_nested():
                user = await self.user_repo.create(
                    email=email,
                    password=password,
                    first_name=first_name,
                    last_name=last_name,
                )
        except IntegrityError:
            # A concurrent registration inserted the same email first
            logger.info("registration_email_conflict")
            return AuthResult.failed(AuthFailureReason.EMAIL_TAKEN, EMAIL_TAKEN_MESSAGE)

        tenant = await self._create_tenant(tenant_name)

        membership = await self.membership_repo.create(
            Membership(user_id=user.id, tenant_id=tenant.id, role=Role.OWNER)
        )

        logger.info(
            "user_registered",
            user_id=str(user.id),
            tenant_id=str(tenant.id),
        )
        return await self._issue_tokens(user, tenant, membership.role, ip_address)

    async def _create_tenant(self, name: str) -> Tenant:
        """Insert a tenant under a free slug.

        A slug taken between the existence check and the insert is retried
        with a random suffix; the last attempt lets the IntegrityError out.
        """
        slug = generate_slug(name)
        for _ in range(TENANT_SLUG_ATTEMPTS - 1):
            if not await self.tenant_repo.slug_exists(slug):
                try:
                    async with self.db.begin_nested():
                        return await self.tenant_repo.create(Tenant(name=name, slug=slug))
                except IntegrityError:
                    logger.info("tenant_slug_conflict", slug=slug)
            slug = with_random_suffix(generate_slug(name))

        async with self.db.begin_nested():
            return await self.tenant_repo.create(Tenant(name=name, slug=slug))

    async def login(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        tenant_id: UUID | None = None,
    ) -> AuthResult:
        """Authenticate with email and password.

        Without ``tenant_id`` the user's earliest membership is used.

        Args:
            email: User's email address
            password: Plain text password
            ip_address: Client IP address
            tenant_id: Optional tenant to sign in to

        Returns:
            AuthResult with a token pair, or a failure
        """
        user = await self.user_repo.get_by_email(email)
        if (
            user is None
            or not self.user_repo.check_password(user, password)
            or not user.is_active
        ):
            logger.info(
                "login_failed",
                reason=AuthFailureReason.INVALID_CREDENTIALS.value,
                user_id=str(user.id) if user else None,
            )
            return AuthResult.failed(
                AuthFailureReason.INVALID_CREDENTIALS,
                INVALID_CREDENTIALS_MESSAGE,
            )

        memberships = await self.membership_repo.list_for_user(user.id)
        if not memberships:
            logger.info(
                "login_failed",
                reason=AuthFailureReason.NO_MEMBERSHIP.value,
                user_id=str(user.id),
            )
            return AuthResult.failed(AuthFailureReason.NO_MEMBERSHIP, NO_MEMBERSHIP_MESSAGE)

        if tenant_id is None:
            membership = memberships[0]
        else:
            membership = next((m for m in memberships if m.tenant_id == tenant_id), None)
            if membership is None:
                logger.info(
                    "login_failed",
                    reason=AuthFailureReason.TENANT_NOT_AUTHORIZED.value,
                    user_id=str(user.id),
                    tenant_id=str(tenant_id),
                )
                return AuthResult.failed(
                    AuthFailureReason.TENANT_NOT_AUTHORIZED,
                    TENANT_NOT_AUTHORIZED_MESSAGE,
                )

        tenant = await self.tenant_repo.get_by_id(membership.tenant_id)
        if tenant is None or not tenant.is_active:
            return AuthResult.failed(AuthFailureReason.TENANT_INACTIVE, TENANT_INACTIVE_MESSAGE)

        now = utcnow()
        await self.user_repo.record_login(user, now)
        logger.info("user_logged_in", user_id=str(user.id), tenant_id=str(tenant.id))
        return await self._issue_tokens(user, tenant, membership.role, ip_address, now)

    async def refresh(self, refresh_token: str | None, ip_address: str | None = None) -> AuthResult:
        """Rotate a refresh token and issue a new access token.

        The presented token is revoked with a pointer to its successor. Of
        several concurrent calls with the same token at most one succeeds;
        the others get the same failure as a replay of a used token.

        Args:
            refresh_token: The presented refresh secret
            ip_address: Client IP address

        Returns:
            AuthResult with a new token pair, or an unauthorized failure
        """
        if not refresh_token:
            return _invalid_refresh_token()

        now = utcnow()
        stored = await self.token_repo.get_by_hash(hash_token(refresh_token))
        if stored is None:
            return _invalid_refresh_token()
        if not stored.is_active(now):
            if stored.is_revoked:
                logger.warning(
                    "refresh_token_reuse_rejected",
                    token_id=str(stored.id),
                    user_id=str(stored.user_id),
                )
            return _invalid_refresh_token()

        user = await self.user_repo.get_by_id(stored.user_id)
        if user is None or not user.is_active:
            return _invalid_refresh_token()

        membership = await self.membership_repo.get_first_for_user(user.id)
        if membership is None:
            return _invalid_refresh_token()

        tenant = await self.tenant_repo.get_by_id(membership.tenant_id)
        if tenant is None or not tenant.is_active:
            return _invalid_refresh_token()

        new_refresh_token = generate_refresh_token()
        new_hash = hash_token(new_refresh_token)
        ip = ip_address or UNKNOWN_IP_ADDRESS

        rotated = await self.token_repo.revoke_if_active(
            stored.id,
            now,
            revoked_by_ip=ip,
            replaced_by_token_hash=new_hash,
        )
        if not rotated:
            logger.warning(
                "refresh_token_rotation_conflict",
                token_id=str(stored.id),
                user_id=str(user.id),
            )
            return _invalid_refresh_token()

        result = await self._issue_tokens(
            user,
            tenant,
            membership.role,
            ip_address,
            now,
            refresh_token=new_refresh_token,
        )
        logger.info("refresh_token_rotated", token_id=str(stored.id), user_id=str(user.id))
        return result

    async def logout(self, refresh_token: str | None, ip_address: str | None = None) -> AuthResult:
        """Revoke a refresh token without naming a successor.

        Unknown, revoked, or expired tokens are left alone and the call
        still succeeds.

        Args:
            refresh_token: The presented refresh secret
            ip_address: Client IP address
        """
        if refresh_token:
            stored = await self.token_repo.get_by_hash(hash_token(refresh_token))
            if stored is not None:
                revoked = await self.token_repo.revoke_if_active(
                    stored.id,
                    utcnow(),
                    revoked_by_ip=ip_address or UNKNOWN_IP_ADDRESS,
                )
                if revoked:
                    logger.info("user_logged_out", user_id=str(stored.user_id))
        return AuthResult.ok()

    async def logout_all(self, user_id: UUID, ip_address: str | None = None) -> int:
        """Logout from all devices by revoking every active refresh token.

        Args:
            user_id: The user's UUID
            ip_address: Client IP address

        Returns:
            Number of tokens revoked
        """
        count = await self.token_repo.revoke_all_for_user(
            user_id,
            utcnow(),
            ip_address or UNKNOWN_IP_ADDRESS,
        )
        logger.info("user_logged_out_everywhere", user_id=str(user_id), revoked=count)
        return count

    async def _issue_tokens(
        self,
        user: User,
        tenant: Tenant,
        role: Role,
        ip_address: str | None,
        now: datetime | None = None,
        refresh_token: str | None = None,
    ) -> AuthResult:
        """Create an access token and store a new refresh token.

        Args:
            user: The user to create tokens for
            tenant: The tenant the tokens are scoped to
            role: The user's role in that tenant
            ip_address: Client IP address
            now: Issue time
            refresh_token: Pre-generated refresh secret, used by rotation

        Returns:
            Successful AuthResult
        """
        now = now or utcnow()
        refresh_token = refresh_token or generate_refresh_token()

        await self.token_repo.create(
            RefreshToken(
                user_id=user.id,
                token_hash=hash_token(refresh_token),
                expires_at=refresh_token_expiration(now),
                created_at=now,
                created_by_ip=ip_address or UNKNOWN_IP_ADDRESS,
            )
        )

        return AuthResult.ok(
            access_token=create_access_token(user, tenant.id, role, now=now),
            refresh_token=refresh_token,
            expires_at=access_token_expiration(now),
            user=UserSummary(
                id=user.id,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
            ),
            tenant=TenantSummary(
                id=tenant.id,
                name=tenant.name,
                slug=tenant.slug,
                role=role,
            ),
        )


# Type alias for dependency injection
AuthSvc = Annotated[AuthService, Depends(AuthService)]
