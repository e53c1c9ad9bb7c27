"""Request correlation and access logging.

Access log lines never include headers or query values: both can carry
API keys and bearer tokens.
"""

import time
import uuid
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"
UNLOGGED_PATH_PREFIXES = ("/docs", "/redoc", "/openapi.json")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation ID.

    A client-supplied X-Request-ID is reused; otherwise one is generated.
    The ID is bound into the structlog context, exposed as the Problem
    Details ``trace_id`` and echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        request.state.trace_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request with status, duration and, once the
    credential has been resolved, the tenant and actor type."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path.startswith(UNLOGGED_PATH_PREFIXES):
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "request_failed",
                method=request.method,
                path=path,
                duration_ms=_elapsed_ms(started),
                error_type=type(exc).__name__,
            )
            raise

        fields: dict[str, Any] = {
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": _elapsed_ms(started),
            "client_ip": get_client_ip(request),
        }
        tenant_id = getattr(request.state, "tenant_id", None)
        if tenant_id is not None:
            fields["tenant_id"] = str(tenant_id)
            fields["actor"] = getattr(request.state, "actor", None)

        if response.status_code >= 500:
            logger.error("request_completed", **fields)
        elif response.status_code >= 400:
            logger.warning("request_completed", **fields)
        else:
            logger.info("request_completed", **fields)
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def get_client_ip(request: Request) -> str | None:
    """Client address for audit columns on refresh tokens.

    The first X-Forwarded-For hop wins, then X-Real-IP, then the socket
    peer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else None
