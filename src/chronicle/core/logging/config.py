"""structlog configuration."""

import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

from chronicle.config import settings
from chronicle.core.constants import SENSITIVE_LOG_KEYS


REDACTED = "[redacted]"


def redact_sensitive(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Replace values of credential-bearing keys, including nested dicts."""

    def _scrub(mapping: MutableMapping[str, Any]) -> None:
        for key, value in mapping.items():
            if key.lower() in SENSITIVE_LOG_KEYS:
                mapping[key] = REDACTED
            elif isinstance(value, dict):
                _scrub(value)

    _scrub(event_dict)
    return event_dict


def configure_logging() -> None:
    """Configure structlog for the process.

    JSON output in production, console rendering otherwise.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_sensitive,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            (
                structlog.processors.JSONRenderer()
                if settings.is_production
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
