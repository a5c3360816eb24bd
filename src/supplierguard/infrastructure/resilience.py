"""Resilience policies for outbound HTTP calls.

Two independent policies share an ``execute(operation)`` capability, where
``operation`` is a zero-argument coroutine function returning an
``httpx.Response``:

- ``RetryPolicy`` re-attempts transient failures with ``2**n`` second backoff.
- ``CircuitBreaker`` fails fast while a dependency keeps failing.

``ResiliencePipeline`` nests them: the breaker admits a logical call, then the
retry policy governs the attempts of the underlying transport call.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from supplierguard.exceptions import CircuitOpenError

from .logging_config import get_logger
from .metrics import record_retry, set_circuit_state

logger = get_logger(__name__)

T = TypeVar("T")
Operation = Callable[[], Awaitable[T]]

RETRYABLE_STATUS_CODES = frozenset({408, 429})


# =============================================================================
# Failure classification
# =============================================================================


def is_retryable_response(response: Any) -> bool:
    """True for HTTP 5xx, 408 and 429 responses."""
    if not isinstance(response, httpx.Response):
        return False
    return response.status_code >= 500 or response.status_code in RETRYABLE_STATUS_CODES


def is_retryable_exception(exc: BaseException) -> bool:
    """True for connection, read and timeout failures raised by httpx."""
    return isinstance(exc, httpx.TransportError)


def _describe_outcome(retry_state: RetryCallState) -> str:
    outcome = retry_state.outcome
    if outcome is None:
        return "unknown"
    if outcome.failed:
        return type(outcome.exception()).__name__
    return str(outcome.result().status_code)


def _last_outcome(retry_state: RetryCallState) -> Any:
    # Return the final response, or re-raise the final exception.
    return retry_state.outcome.result()


# =============================================================================
# Retry
# =============================================================================


class RetryPolicy:
    """Retry transient failures with pure exponential backoff.

    Retry ``n`` (1-based) waits ``2**n`` seconds: 2s, 4s, 8s for the default
    three retries. Once retries are exhausted the last outcome is surfaced as
    is: a retryable response is returned, a transport error is re-raised.
    Non-retryable outcomes, including task cancellation, pass straight through.
    """

    def __init__(
        self,
        max_retries: int = 3,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self._sleep = sleep

    @staticmethod
    def backoff_seconds(retry_number: int) -> float:
        return float(2**retry_number)

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        reason = _describe_outcome(retry_state)
        delay = retry_state.next_action.sleep if retry_state.next_action else None
        logger.warning(
            "http_retry_scheduled",
            attempt=retry_state.attempt_number,
            max_retries=self.max_retries,
            delay_seconds=delay,
            reason=reason,
        )
        record_retry(reason)

    async def execute(self, operation: Operation[T]) -> T:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=2),
            retry=(
                retry_if_exception_type(httpx.TransportError)
                | retry_if_result(is_retryable_response)
            ),
            sleep=self._sleep,
            before_sleep=self._before_sleep,
            retry_error_callback=_last_outcome,
        )
        return await retrying(operation)


# =============================================================================
# Circuit Breaker
# =============================================================================


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # calls pass through, failures counted
    OPEN = "open"  # calls fail fast until the cool-down elapses
    HALF_OPEN = "half_open"  # a single trial call is in flight


class _Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    NEUTRAL = "neutral"


class CircuitBreaker:
    """Consecutive-failure circuit breaker shared by all callers of an instance.

    Usage:
        breaker = CircuitBreaker("screening_api", failure_threshold=5)
        response = await breaker.execute(lambda: client.get("/health"))

    Only retryable-classified outcomes count as failures. Other exceptions
    (for example a token acquisition error) neither trip nor reset the breaker.
    """

    def __init__(
        self,
        name: str = "default",
        failure_threshold: int = 5,
        break_duration_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        self.name = name
        self.failure_threshold = failure_threshold
        self.break_duration_seconds = break_duration_seconds
        self._clock = clock
        self._lock = asyncio.Lock()
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: float | None = None
        self._trial_in_flight = False
        set_circuit_state(self.name, self._state.value)

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def _remaining_break(self) -> float:
        if self._opened_at is None:
            return 0.0
        return max(0.0, self.break_duration_seconds - (self._clock() - self._opened_at))

    def _transition(self, state: CircuitState) -> None:
        self._state = state
        set_circuit_state(self.name, state.value)

    async def _acquire(self) -> None:
        async with self._lock:
            if self._state is CircuitState.CLOSED:
                return

            if self._state is CircuitState.OPEN:
                remaining = self._remaining_break()
                if remaining > 0:
                    raise CircuitOpenError(self.name, remaining)
                self._transition(CircuitState.HALF_OPEN)
                logger.info("circuit_half_open", circuit=self.name)

            # HALF_OPEN: exactly one trial call at a time
            if self._trial_in_flight:
                raise CircuitOpenError(self.name, 0.0)
            self._trial_in_flight = True

    async def _record(self, outcome: _Outcome) -> None:
        async with self._lock:
            if self._state is CircuitState.HALF_OPEN:
                self._trial_in_flight = False
                if outcome is _Outcome.SUCCESS:
                    self._failure_count = 0
                    self._opened_at = None
                    self._transition(CircuitState.CLOSED)
                    logger.info("circuit_closed", circuit=self.name)
                elif outcome is _Outcome.FAILURE:
                    self._opened_at = self._clock()
                    self._transition(CircuitState.OPEN)
                    logger.warning(
                        "circuit_reopened",
                        circuit=self.name,
                        break_seconds=self.break_duration_seconds,
                    )
                return

            if self._state is not CircuitState.CLOSED:
                return

            if outcome is _Outcome.SUCCESS:
                self._failure_count = 0
            elif outcome is _Outcome.FAILURE:
                self._failure_count += 1
                if self._failure_count >= self.failure_threshold:
                    self._opened_at = self._clock()
                    self._transition(CircuitState.OPEN)
                    logger.warning(
                        "circuit_opened",
                        circuit=self.name,
                        failures=self._failure_count,
                        break_seconds=self.break_duration_seconds,
                    )

    async def execute(self, operation: Operation[T]) -> T:
        await self._acquire()
        try:
            result = await operation()
        except BaseException as exc:
            outcome = _Outcome.FAILURE if is_retryable_exception(exc) else _Outcome.NEUTRAL
            await asyncio.shield(self._record(outcome))
            raise
        await self._record(_Outcome.FAILURE if is_retryable_response(result) else _Outcome.SUCCESS)
        return result

    async def reset(self) -> None:
        """Force the breaker closed (used by tests and admin tooling)."""
        async with self._lock:
            self._failure_count = 0
            self._opened_at = None
            self._trial_in_flight = False
            self._transition(CircuitState.CLOSED)


# =============================================================================
# Pipeline
# =============================================================================


class ResiliencePipeline:
    """Circuit breaker around retry around the transport call."""

    def __init__(self, circuit_breaker: CircuitBreaker, retry_policy: RetryPolicy):
        self.circuit_breaker = circuit_breaker
        self.retry_policy = retry_policy

    @classmethod
    def from_settings(cls, settings: Any, name: str = "screening_api") -> "ResiliencePipeline":
        return cls(
            CircuitBreaker(
                name,
                failure_threshold=settings.circuit_breaker_threshold,
                break_duration_seconds=settings.circuit_breaker_break_seconds,
            ),
            RetryPolicy(max_retries=settings.screening_api_retry_count),
        )

    async def execute(self, operation: Operation[T]) -> T:
        return await self.circuit_breaker.execute(
            lambda: self.retry_policy.execute(operation)
        )
