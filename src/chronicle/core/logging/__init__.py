"""Logging module with structured logging and request tracking."""

from chronicle.core.logging.config import configure_logging, redact_sensitive
from chronicle.core.logging.middleware import (
    RequestIdMiddleware,
    RequestLoggingMiddleware,
    get_client_ip,
)


__all__ = [
    "RequestIdMiddleware",
    "RequestLoggingMiddleware",
    "configure_logging",
    "get_client_ip",
    "redact_sensitive",
]
