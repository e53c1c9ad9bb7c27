"""Exception handlers rendering every error as RFC 7807 Problem Details.

The error code is the last segment of the `type` URI. Internal errors
and misconfiguration both surface as a bare 500.
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from chronicle.config import ConfigurationError, settings
from chronicle.core.errors.exceptions import AppException


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()


class FieldError(BaseModel):
    """One failed field of a request body, query or path."""

    field: str
    message: str
    type: str | None = None


class ProblemDetail(BaseModel):
    """Problem Details body; exception details are merged in as extra members."""

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
    errors: list[FieldError] | None = None
    trace_id: str | None = None

    model_config = {"extra": "allow"}


def _get_trace_id(request: Request) -> str | None:
    return getattr(request.state, "trace_id", None)


def _get_error_type_uri(error_code: str) -> str:
    return f"{settings.api_docs_base_url}/errors/{error_code}"


def _internal_error_response(request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ProblemDetail(
            type=_get_error_type_uri("internal_error"),
            title="Internal Server Error",
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
            instance=str(request.url.path),
            trace_id=_get_trace_id(request),
        ).model_dump(exclude_none=True),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render a domain error; 401s also carry a Bearer challenge."""
    logger.warning(
        "app_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=str(request.url.path),
        details=exc.details,
    )

    content: dict[str, Any] = ProblemDetail(
        type=_get_error_type_uri(exc.error_code),
        title=exc.error_code.replace("_", " ").title(),
        status=exc.status_code,
        detail=exc.message,
        instance=str(request.url.path),
        trace_id=_get_trace_id(request),
    ).model_dump(exclude_none=True)

    # Details never override the standard members
    content = {**exc.details, **content}

    challenge = exc.status_code == status.HTTP_401_UNAUTHORIZED
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers={"WWW-Authenticate": "Bearer"} if challenge else None,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures as a 422 with per-field errors.

    Only the location, message and error type are returned; the rejected
    input is never echoed since it may be a password.
    """
    errors: list[FieldError] = []

    for error in exc.errors():
        field_parts = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(field_parts) if field_parts else "unknown"

        errors.append(
            FieldError(
                field=field,
                message=error.get("msg", "Invalid value"),
                type=error.get("type"),
            )
        )

    logger.warning(
        "validation_error",
        path=str(request.url.path),
        error_count=len(errors),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ProblemDetail(
            type=_get_error_type_uri("validation_error"),
            title="Validation Error",
            status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Request validation failed",
            instance=str(request.url.path),
            errors=errors,
            trace_id=_get_trace_id(request),
        ).model_dump(exclude_none=True),
    )


async def configuration_exception_handler(
    request: Request, exc: ConfigurationError
) -> JSONResponse:
    """Handle deployment misconfiguration surfaced during a request."""
    logger.critical(
        "configuration_error",
        path=str(request.url.path),
        error=str(exc),
    )
    return _internal_error_response(request)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled error by type and return an opaque 500."""
    logger.exception(
        "unhandled_exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
    )
    return _internal_error_response(request)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the Problem Details handlers on the app."""
    app.add_exception_handler(
        AppException, cast("ExceptionHandler", app_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(
        ConfigurationError, cast("ExceptionHandler", configuration_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
