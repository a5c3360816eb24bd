"""Structlog configuration for structured logging.

JSON lines in production, coloured console output elsewhere. Request-scoped
fields such as the correlation id travel through contextvars, and credential
fields are masked before rendering so token traffic can be logged safely.
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.types import Processor

from supplierguard import __version__
from supplierguard.models.config import get_settings

SUPPLIERGUARD_ENV = os.getenv("SUPPLIERGUARD_ENV", "development")
IS_PRODUCTION = SUPPLIERGUARD_ENV == "production"
SERVICE_NAME = "supplierguard"

REDACTED = "***"
SECRET_KEYS = frozenset({"client_secret", "access_token", "authorization", "password"})


def add_service_info(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp service name, version and environment on every event."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    event_dict.setdefault("environment", SUPPLIERGUARD_ENV)
    return event_dict


def redact_secrets(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask credential-bearing fields, including inside nested dicts."""

    def scrub(value: Any) -> Any:
        if isinstance(value, dict):
            return {
                k: REDACTED if str(k).lower() in SECRET_KEYS else scrub(v)
                for k, v in value.items()
            }
        return value

    for key in list(event_dict):
        if key.lower() in SECRET_KEYS:
            event_dict[key] = REDACTED
        else:
            event_dict[key] = scrub(event_dict[key])
    return event_dict


def resolve_log_level(production: bool, configured: str | None = None) -> int:
    """Map ``Settings.log_level`` to a logging level, defaulting per environment."""
    name = (configured or ("INFO" if production else "DEBUG")).upper()
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def configure_structlog(production: bool = IS_PRODUCTION) -> None:
    """Configure structlog processors for the current environment."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_service_info,
        redact_secrets,
    ]

    if production:
        renderer: list[Processor] = [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    structlog.configure(
        processors=[*shared_processors, *renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = resolve_log_level(production, get_settings().log_level)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # httpx logs every request at INFO; the screening client logs its own events
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, usually for ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


configure_structlog()
