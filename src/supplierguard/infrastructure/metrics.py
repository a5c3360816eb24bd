"""Prometheus metrics for SupplierGuard.

Provides metrics collection for:
- API request rates and latencies
- Screening API calls, retries and circuit breaker state
- Token acquisition
"""

from prometheus_client import Counter, Gauge, Histogram, Info

# =============================================================================
# Application Info
# =============================================================================

app_info = Info("supplierguard_app", "Application information")
app_info.info({"version": "1.0.0", "service": "supplierguard"})

# =============================================================================
# Request Metrics
# =============================================================================

requests_total = Counter(
    "supplierguard_requests_total",
    "Total number of HTTP requests",
    ["endpoint", "method", "status"],
)

request_duration_seconds = Histogram(
    "supplierguard_request_duration_seconds",
    "HTTP request duration in seconds",
    ["endpoint"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# =============================================================================
# Screening Metrics
# =============================================================================

screening_requests_total = Counter(
    "supplierguard_screening_requests_total",
    "Screening operations by outcome",
    ["outcome"],  # clear / high_risk / rejected / rate_limited
)

screening_latency_seconds = Histogram(
    "supplierguard_screening_latency_seconds",
    "Latency of a logical screening call including retries",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

screening_retries_total = Counter(
    "supplierguard_screening_retries_total",
    "Retries scheduled by the resilience pipeline",
    ["reason"],  # status code or exception type
)

circuit_breaker_state = Gauge(
    "supplierguard_circuit_breaker_state",
    "Circuit breaker state (0=closed, 1=half_open, 2=open)",
    ["name"],
)

token_requests_total = Counter(
    "supplierguard_token_requests_total",
    "Token endpoint requests by status",
    ["status"],  # success / error
)

_STATE_VALUES = {"closed": 0, "half_open": 1, "open": 2}


# =============================================================================
# Helper Functions
# =============================================================================


def record_request(endpoint: str, method: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    requests_total.labels(endpoint=endpoint, method=method, status=str(status)).inc()
    request_duration_seconds.labels(endpoint=endpoint).observe(duration)


def record_screening(outcome: str, duration: float | None = None) -> None:
    """Record a screening outcome and, when known, its latency."""
    screening_requests_total.labels(outcome=outcome).inc()
    if duration is not None:
        screening_latency_seconds.observe(duration)


def record_retry(reason: str) -> None:
    screening_retries_total.labels(reason=reason).inc()


def set_circuit_state(name: str, state: str) -> None:
    circuit_breaker_state.labels(name=name).set(_STATE_VALUES.get(state, 0))


def record_token_request(success: bool) -> None:
    token_requests_total.labels(status="success" if success else "error").inc()
