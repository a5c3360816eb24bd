"""HTTP client for the external high-risk screening API.

Every attempt fetches the bearer token from the token provider, so a retry
after a token refresh carries the new token. Transport calls go through the
resilience pipeline (circuit breaker around retry); responses are mapped to
``ScreeningResult`` or to the typed errors in ``supplierguard.exceptions``.
"""

import math
import time
from collections.abc import Sequence
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import httpx
from pydantic import ValidationError

from supplierguard.exceptions import ScreeningApiError, ScreeningTransportError
from supplierguard.infrastructure.correlation import CORRELATION_ID_HEADER, get_correlation_id
from supplierguard.infrastructure.logging_config import get_logger
from supplierguard.infrastructure.resilience import (
    CircuitBreaker,
    ResiliencePipeline,
    RetryPolicy,
)
from supplierguard.models.screening import (
    ScreeningErrorResponse,
    ScreeningRequest,
    ScreeningResult,
)

from .auth import TokenProvider

logger = get_logger(__name__)

USER_AGENT = "SupplierGuard/1.0"
DEFAULT_RETRY_AFTER_SECONDS = 60


def parse_retry_after(value: str | None, now: datetime | None = None) -> int | None:
    """Parse a ``Retry-After`` header given as delta seconds or an HTTP date."""
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return int(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0, math.ceil((when - now).total_seconds()))


class ScreeningApiClient:
    """Client for ``POST /api/screening/screen`` and ``GET /api/screening/health``."""

    SCREEN_PATH = "/api/screening/screen"
    HEALTH_PATH = "/api/screening/health"

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        pipeline: ResiliencePipeline | None = None,
        timeout_seconds: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.token_provider = token_provider
        self.pipeline = pipeline or ResiliencePipeline(
            CircuitBreaker("screening_api"), RetryPolicy()
        )
        self._client = http_client
        self._owns_client = http_client is None

    @classmethod
    def from_settings(
        cls,
        settings: Any,
        token_provider: TokenProvider | None = None,
        **kwargs: Any,
    ) -> "ScreeningApiClient":
        return cls(
            base_url=settings.screening_api_base_url,
            token_provider=token_provider or TokenProvider.from_settings(settings),
            pipeline=kwargs.pop("pipeline", None) or ResiliencePipeline.from_settings(settings),
            timeout_seconds=settings.screening_api_timeout_seconds,
            **kwargs,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                headers={"Accept": "application/json", "User-Agent": USER_AGENT},
            )
        return self._client

    async def _auth_headers(self) -> dict[str, str]:
        token = await self.token_provider.get_token()
        headers = {"Authorization": f"Bearer {token}"}
        correlation_id = get_correlation_id()
        if correlation_id:
            headers[CORRELATION_ID_HEADER] = correlation_id
        return headers

    # =========================================================================
    # Screening
    # =========================================================================

    async def screen(self, entity_name: str, sources: Sequence[int]) -> ScreeningResult:
        """Screen ``entity_name`` against the given sources.

        Raises:
            ValueError: Blank entity name or no sources.
            ScreeningTransportError: Connectivity failure, timeout or malformed body.
            ScreeningApiError: Upstream returned a non-success status.
            CircuitOpenError: The circuit is open; no request was sent.
            AuthError: The bearer token could not be obtained.
        """
        if not entity_name or not entity_name.strip():
            raise ValueError("Entity name cannot be empty.")
        if not sources:
            raise ValueError("At least one source must be specified.")

        request = ScreeningRequest(entity_name=entity_name, sources=list(sources))
        payload = request.model_dump(by_alias=True)
        client = await self._get_client()

        async def send() -> httpx.Response:
            headers = await self._auth_headers()
            return await client.post(self.SCREEN_PATH, json=payload, headers=headers)

        logger.info("screening_started", entity_name=entity_name, sources=list(sources))
        started = time.perf_counter()

        try:
            response = await self.pipeline.execute(send)
        except httpx.TimeoutException as exc:
            logger.error("screening_transport_error", entity_name=entity_name, error="timeout")
            raise ScreeningTransportError("Screening API request timed out") from exc
        except httpx.HTTPError as exc:
            logger.error("screening_transport_error", entity_name=entity_name, error=str(exc))
            raise ScreeningTransportError("Failed to connect to Screening API") from exc

        result = self._handle_response(response, entity_name)
        logger.info(
            "screening_completed",
            entity_name=entity_name,
            total_hits=result.total_hits,
            duration_seconds=round(time.perf_counter() - started, 3),
        )
        return result

    def _handle_response(self, response: httpx.Response, entity_name: str) -> ScreeningResult:
        if response.is_success:
            return self._parse_result(response)

        error_response = self._parse_error(response)

        if response.status_code == 429:
            retry_after = None
            if error_response is not None:
                retry_after = error_response.retry_after_seconds()
            if retry_after is None:
                retry_after = parse_retry_after(response.headers.get("Retry-After"))
            if retry_after is None:
                retry_after = DEFAULT_RETRY_AFTER_SECONDS
            logger.warning(
                "screening_rate_limited", entity_name=entity_name, retry_after=retry_after
            )
            raise ScreeningApiError(
                f"Rate limit exceeded. Retry after {retry_after} seconds.",
                status_code=429,
                error_response=error_response,
                retry_after_seconds=retry_after,
            )

        message = (error_response.message if error_response else "") or (
            f"Screening API returned status code {response.status_code}"
        )
        logger.error(
            "screening_api_error",
            entity_name=entity_name,
            status_code=response.status_code,
            message=message,
        )
        raise ScreeningApiError(
            message, status_code=response.status_code, error_response=error_response
        )

    @staticmethod
    def _parse_result(response: httpx.Response) -> ScreeningResult:
        if not response.content.strip():
            logger.error("screening_transport_error", error="empty response")
            raise ScreeningTransportError("Screening API returned null response")

        try:
            body = response.json()
        except ValueError as exc:
            logger.error("screening_transport_error", error="invalid json")
            raise ScreeningTransportError("Invalid response from Screening API") from exc

        if not body:
            logger.error("screening_transport_error", error="empty response")
            raise ScreeningTransportError("Screening API returned null response")

        try:
            return ScreeningResult.model_validate(body)
        except ValidationError as exc:
            logger.error("screening_transport_error", error="schema mismatch")
            raise ScreeningTransportError("Invalid response from Screening API") from exc

    @staticmethod
    def _parse_error(response: httpx.Response) -> ScreeningErrorResponse | None:
        try:
            body = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict):
            return None
        try:
            return ScreeningErrorResponse.model_validate(body)
        except ValidationError:
            return None

    # =========================================================================
    # Health
    # =========================================================================

    async def health_check(self) -> bool:
        """Return True when the screening API reports healthy. Never raises."""
        try:
            client = await self._get_client()
            headers = await self._auth_headers()
            response = await client.get(self.HEALTH_PATH, headers=headers)
            healthy = response.is_success
            logger.info("screening_health_checked", healthy=healthy)
            return healthy
        except Exception as exc:
            logger.error("screening_health_check_failed", error=str(exc))
            return False

    async def close(self) -> None:
        """Close the HTTP client and the token provider."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
        await self.token_provider.close()
