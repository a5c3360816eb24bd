"""Correlation ID handling for request tracing.

The id received in (or generated for) an inbound request is kept in a
ContextVar, bound to the structlog context and forwarded on outbound screening
calls.
"""

import uuid
from contextvars import ContextVar
from typing import Any

from .logging_config import bind_context, clear_context

CORRELATION_ID_HEADER = "X-Correlation-ID"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)
    bind_context(correlation_id=correlation_id)


def get_correlation_id() -> str | None:
    """Return the correlation id of the current context, if any."""
    return _correlation_id.get()


def reset_correlation_context() -> None:
    """Reset the correlation context (used by tests)."""
    _correlation_id.set(None)
    clear_context()


class CorrelationContext:
    """Context manager scoping a correlation id.

    Example:
        with CorrelationContext() as correlation_id:
            await service.perform_screening(supplier_id, [1, 2])
    """

    def __init__(self, correlation_id: str | None = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self._token: Any = None

    def __enter__(self) -> str:
        self._token = _correlation_id.set(self.correlation_id)
        bind_context(correlation_id=self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._token is not None:
            _correlation_id.reset(self._token)
