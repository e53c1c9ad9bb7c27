"""Authentication API routes.

Provides endpoints for:
- User registration
- Login/logout
- Token refresh

The refresh secret is set as an HttpOnly, SameSite=Strict cookie scoped
to these routes. Clients that cannot keep cookies may send it in the
request body instead.
"""

from typing import Annotated, NoReturn

from fastapi import APIRouter, Cookie, Request, Response, status

from chronicle.config import settings
from chronicle.core.auth.dependencies import BearerPrincipal
from chronicle.core.auth.schemas import AuthFailureReason, AuthResult
from chronicle.core.auth.service import AuthSvc
from chronicle.core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    UnauthorizedError,
)
from chronicle.core.logging.middleware import get_client_ip
from chronicle.modules.users.repos import UserRepo
from chronicle.modules.users.schemas import (
    AuthResponse,
    LoginRequest,
    LogoutAllResponse,
    RefreshTokenRequest,
    RegisterRequest,
    UserResponse,
)


router = APIRouter(prefix="/auth", tags=["auth"])

REFRESH_COOKIE_PATH = "/api/v1/auth"

RefreshCookie = Annotated[str | None, Cookie(alias=settings.refresh_cookie_name)]


def _raise_for_failure(result: AuthResult) -> NoReturn:
    """Convert a failed AuthResult into the matching HTTP error."""
    failure = result.failure
    if failure is None:
        raise RuntimeError("AuthResult failed without a failure value")

    if failure.is_unauthorized:
        raise UnauthorizedError(failure.message, error_code=failure.reason.value)

    match failure.reason:
        case AuthFailureReason.EMAIL_TAKEN:
            raise ConflictError(failure.message, error_code=failure.reason.value)
        case AuthFailureReason.INVALID_CREDENTIALS:
            raise UnauthorizedError(failure.message, error_code=failure.reason.value)
        case AuthFailureReason.TENANT_NOT_AUTHORIZED:
            raise ForbiddenError(failure.message, error_code=failure.reason.value)
        case _:
            raise BadRequestError(failure.message, error_code=failure.reason.value)


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=refresh_token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        path=REFRESH_COOKIE_PATH,
        secure=settings.refresh_cookie_secure,
        httponly=True,
        samesite="strict",
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        path=REFRESH_COOKIE_PATH,
        secure=settings.refresh_cookie_secure,
        httponly=True,
        samesite="strict",
    )


def _to_response(result: AuthResult, response: Response) -> AuthResponse:
    if not result.success:
        _raise_for_failure(result)

    body = AuthResponse.model_validate(
        result.model_dump(
            include={"access_token", "refresh_token", "expires_at", "user", "tenant"}
        )
        | {"expires_in": settings.access_token_expire_minutes * 60}
    )
    _set_refresh_cookie(response, body.refresh_token)
    return body


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user and tenant",
    description="Creates a new tenant and user account. The user becomes the tenant's owner.",
)
async def register(
    data: RegisterRequest,
    service: AuthSvc,
    request: Request,
    response: Response,
) -> AuthResponse:
    """Register a new user and tenant."""
    result = await service.register(
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        tenant_name=data.tenant_name,
        ip_address=get_client_ip(request),
    )
    return _to_response(result, response)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login with email and password",
    description=(
        "Authenticate with email and password to receive access and refresh tokens. "
        "Without tenant_id the user's first tenant is used."
    ),
)
async def login(
    data: LoginRequest,
    service: AuthSvc,
    request: Request,
    response: Response,
) -> AuthResponse:
    """Login with email and password."""
    result = await service.login(
        email=data.email,
        password=data.password,
        ip_address=get_client_ip(request),
        tenant_id=data.tenant_id,
    )
    return _to_response(result, response)


@router.post(
    "/refresh",
    response_model=AuthResponse,
    summary="Refresh access token",
    description="Use a refresh token to obtain a new token pair. The old refresh token is revoked.",
)
async def refresh_token(
    service: AuthSvc,
    request: Request,
    response: Response,
    refresh_cookie: RefreshCookie = None,
    data: RefreshTokenRequest | None = None,
) -> AuthResponse:
    """Refresh the access token."""
    presented = refresh_cookie or (data.refresh_token if data else None)
    result = await service.refresh(presented, ip_address=get_client_ip(request))
    return _to_response(result, response)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout",
    description="Revoke the refresh token to logout from the current session.",
)
async def logout(
    service: AuthSvc,
    request: Request,
    response: Response,
    refresh_cookie: RefreshCookie = None,
    data: RefreshTokenRequest | None = None,
) -> None:
    """Logout by revoking the refresh token."""
    presented = refresh_cookie or (data.refresh_token if data else None)
    await service.logout(presented, ip_address=get_client_ip(request))
    _clear_refresh_cookie(response)


@router.post(
    "/logout-all",
    response_model=LogoutAllResponse,
    summary="Logout from all devices",
    description="Revoke all refresh tokens to logout from all devices.",
)
async def logout_all(
    principal: BearerPrincipal,
    service: AuthSvc,
    request: Request,
    response: Response,
) -> LogoutAllResponse:
    """Logout from all devices."""
    revoked = await service.logout_all(principal.actor.actor_id, ip_address=get_client_ip(request))
    _clear_refresh_cookie(response)
    return LogoutAllResponse(revoked=revoked)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Returns the authenticated user and the tenant and role they are acting with.",
)
async def get_me(
    principal: BearerPrincipal,
    users: UserRepo,
) -> UserResponse:
    """Get current user profile."""
    user = await users.get_by_id(principal.actor.actor_id)
    if user is None:
        raise UnauthorizedError("User not found", error_code="user_not_found")
    return UserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        tenant_id=principal.tenant_id,
        role=principal.role,
    )
