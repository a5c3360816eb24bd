"""OAuth client-credentials token provider for the screening API.

The provider owns a single cached bearer token. Readers check it without
locking; refreshes are serialised behind an ``asyncio.Lock`` and re-check the
cache once inside it, so concurrent callers collapse into one token request.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from supplierguard.exceptions import AuthConfigError, AuthRequestError
from supplierguard.infrastructure.logging_config import get_logger
from supplierguard.infrastructure.metrics import record_token_request
from supplierguard.infrastructure.resilience import RetryPolicy

logger = get_logger(__name__)

DEFAULT_EXPIRY_MARGIN_SECONDS = 300
# Auth0 issues 24h machine-to-machine tokens when expires_in is omitted
DEFAULT_EXPIRES_IN_SECONDS = 86400


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CachedToken:
    """An access token and the absolute instant it expires."""

    access_token: str
    expires_at: datetime

    def is_usable(self, now: datetime, margin_seconds: float = DEFAULT_EXPIRY_MARGIN_SECONDS) -> bool:
        return now < self.expires_at - timedelta(seconds=margin_seconds)


class TokenProvider:
    """Acquires and caches client-credentials tokens from an Auth0 tenant.

    Args:
        domain: Identity provider domain, e.g. ``tenant.us.auth0.com``.
        client_id: Machine-to-machine application id.
        client_secret: Application secret.
        audience: API identifier the token is requested for.
        http_client: Optional client used for token requests.
        clock: Returns the current UTC time; injectable for tests.
        margin_seconds: Safety margin subtracted from the token expiry.
        retry_policy: Optional retry policy applied to the token request.
    """

    def __init__(
        self,
        domain: str,
        client_id: str,
        client_secret: str,
        audience: str,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] = utcnow,
        margin_seconds: float = DEFAULT_EXPIRY_MARGIN_SECONDS,
        timeout_seconds: float = 30.0,
        retry_policy: RetryPolicy | None = None,
    ):
        self.domain = domain
        self.client_id = client_id
        self.client_secret = client_secret
        self.audience = audience
        self.margin_seconds = margin_seconds
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._retry_policy = retry_policy
        self._client = http_client
        self._owns_client = http_client is None
        self._lock = asyncio.Lock()
        self._token: CachedToken | None = None

    @classmethod
    def from_settings(cls, settings: Any, **kwargs: Any) -> "TokenProvider":
        return cls(
            domain=settings.auth0_domain,
            client_id=settings.auth0_client_id,
            client_secret=settings.auth0_client_secret,
            audience=settings.auth0_audience,
            margin_seconds=settings.token_expiry_margin_seconds,
            **kwargs,
        )

    @property
    def token_url(self) -> str:
        domain = self.domain.rstrip("/")
        if domain.startswith(("http://", "https://")):
            return f"{domain}/oauth/token"
        return f"https://{domain}/oauth/token"

    @property
    def cached_token(self) -> CachedToken | None:
        return self._token

    def invalidate(self) -> None:
        """Drop the cached token so the next call fetches a fresh one."""
        self._token = None

    async def get_token(self) -> str:
        """Return a usable bearer token, fetching one if needed.

        Raises:
            AuthConfigError: Domain, client id, secret or audience is missing.
            AuthRequestError: The token endpoint failed or returned garbage.
        """
        token = self._token
        if token is not None and token.is_usable(self._clock(), self.margin_seconds):
            logger.debug("auth_token_cached")
            return token.access_token

        async with self._lock:
            token = self._token
            if token is not None and token.is_usable(self._clock(), self.margin_seconds):
                return token.access_token

            self._token = await self._request_token()
            return self._token.access_token

    def _check_config(self) -> None:
        required = {
            "domain": self.domain,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "audience": self.audience,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise AuthConfigError(missing)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_seconds)
        return self._client

    async def _request_token(self) -> CachedToken:
        self._check_config()
        client = await self._get_client()
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "audience": self.audience,
            "grant_type": "client_credentials",
        }

        logger.info("auth_token_requested", domain=self.domain, audience=self.audience)

        async def post() -> httpx.Response:
            return await client.post(self.token_url, json=payload)

        try:
            if self._retry_policy is not None:
                response = await self._retry_policy.execute(post)
            else:
                response = await post()
        except httpx.HTTPError as exc:
            record_token_request(success=False)
            logger.error("auth_token_failed", error=str(exc))
            raise AuthRequestError(f"Failed to reach Auth0 token endpoint: {exc}") from exc

        if not response.is_success:
            record_token_request(success=False)
            logger.error(
                "auth_token_failed",
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise AuthRequestError(
                f"Failed to obtain Auth0 access token. Status: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
            access_token = body["access_token"]
            expires_in = int(body.get("expires_in") or DEFAULT_EXPIRES_IN_SECONDS)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            record_token_request(success=False)
            logger.error("auth_token_failed", error="invalid token response")
            raise AuthRequestError(
                "Invalid Auth0 token response", status_code=response.status_code
            ) from exc

        if not access_token or not isinstance(access_token, str):
            record_token_request(success=False)
            raise AuthRequestError("Invalid Auth0 token response", status_code=response.status_code)

        record_token_request(success=True)
        logger.info("auth_token_obtained", expires_in=expires_in)
        return CachedToken(
            access_token=access_token,
            expires_at=self._clock() + timedelta(seconds=expires_in),
        )

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
