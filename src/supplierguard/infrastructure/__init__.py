"""Logging, tracing, metrics and resilience for SupplierGuard."""

from .correlation import (
    CORRELATION_ID_HEADER,
    CorrelationContext,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_context,
    set_correlation_id,
)
from .logging_config import bind_context, clear_context, configure_structlog, get_logger
from .metrics import (
    record_request,
    record_retry,
    record_screening,
    record_token_request,
    set_circuit_state,
)
from .resilience import (
    CircuitBreaker,
    CircuitState,
    ResiliencePipeline,
    RetryPolicy,
    is_retryable_exception,
    is_retryable_response,
)

__all__ = [
    # Logging
    "configure_structlog",
    "get_logger",
    "bind_context",
    "clear_context",
    # Correlation
    "CORRELATION_ID_HEADER",
    "CorrelationContext",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    "reset_correlation_context",
    # Metrics
    "record_request",
    "record_retry",
    "record_screening",
    "record_token_request",
    "set_circuit_state",
    # Resilience
    "CircuitBreaker",
    "CircuitState",
    "ResiliencePipeline",
    "RetryPolicy",
    "is_retryable_exception",
    "is_retryable_response",
]
