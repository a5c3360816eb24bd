"""Unit tests for the OAuth client-credentials token provider."""

import asyncio
import json
from datetime import timedelta

import httpx
import pytest

from supplierguard.exceptions import AuthConfigError, AuthRequestError
from supplierguard.infrastructure.resilience import RetryPolicy
from supplierguard.integrations.auth import CachedToken, TokenProvider


class TokenEndpoint:
    """MockTransport handler issuing numbered tokens."""

    def __init__(self, expires_in=3600, status_code=200, body=None):
        self.expires_in = expires_in
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        await asyncio.sleep(0)
        if self.body is not None:
            return httpx.Response(self.status_code, content=self.body)
        payload = {"access_token": f"token-{len(self.requests)}", "token_type": "Bearer"}
        if self.expires_in is not None:
            payload["expires_in"] = self.expires_in
        return httpx.Response(self.status_code, json=payload)


def build_provider(endpoint, clock, **overrides) -> TokenProvider:
    options = {
        "domain": "tenant.auth0.test",
        "client_id": "client",
        "client_secret": "secret",
        "audience": "https://screening.test",
        "http_client": httpx.AsyncClient(transport=httpx.MockTransport(endpoint)),
        "clock": clock,
    }
    options.update(overrides)
    return TokenProvider(**options)


class TestCachedToken:
    """Tests for the CachedToken expiry check."""

    def test_usable_before_margin(self, clock):
        token = CachedToken("abc", clock.now + timedelta(seconds=3600))
        assert token.is_usable(clock.now, margin_seconds=300)

    def test_unusable_inside_margin(self, clock):
        token = CachedToken("abc", clock.now + timedelta(seconds=200))
        assert not token.is_usable(clock.now, margin_seconds=300)


class TestTokenAcquisition:
    """Tests for fetching tokens from the identity provider."""

    @pytest.mark.asyncio
    async def test_posts_client_credentials(self, clock):
        endpoint = TokenEndpoint()
        provider = build_provider(endpoint, clock)

        token = await provider.get_token()

        assert token == "token-1"
        request = endpoint.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://tenant.auth0.test/oauth/token"
        assert json.loads(request.content) == {
            "client_id": "client",
            "client_secret": "secret",
            "audience": "https://screening.test",
            "grant_type": "client_credentials",
        }

    @pytest.mark.asyncio
    async def test_cached_token_reused(self, clock):
        endpoint = TokenEndpoint()
        provider = build_provider(endpoint, clock)

        first = await provider.get_token()
        clock.advance(60)
        second = await provider.get_token()

        assert first == second == "token-1"
        assert len(endpoint.requests) == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_request(self, clock):
        endpoint = TokenEndpoint()
        provider = build_provider(endpoint, clock)

        tokens = await asyncio.gather(*(provider.get_token() for _ in range(5)))

        assert tokens == ["token-1"] * 5
        assert len(endpoint.requests) == 1

    @pytest.mark.asyncio
    async def test_refresh_at_expiry_margin(self, clock):
        """A 3600s token is reused until 300s before expiry, then refreshed."""
        endpoint = TokenEndpoint(expires_in=3600)
        provider = build_provider(endpoint, clock)
        await provider.get_token()

        clock.advance(3299)
        assert await provider.get_token() == "token-1"

        clock.advance(1)
        assert await provider.get_token() == "token-2"
        assert len(endpoint.requests) == 2

    @pytest.mark.asyncio
    async def test_missing_expires_in_defaults_to_one_day(self, clock):
        endpoint = TokenEndpoint(expires_in=None)
        provider = build_provider(endpoint, clock)

        await provider.get_token()

        assert provider.cached_token.expires_at == clock.now + timedelta(seconds=86400)

    @pytest.mark.asyncio
    async def test_invalidate_forces_refetch(self, clock):
        endpoint = TokenEndpoint()
        provider = build_provider(endpoint, clock)
        await provider.get_token()

        provider.invalidate()

        assert await provider.get_token() == "token-2"

    def test_token_url_accepts_scheme(self, clock):
        provider = build_provider(TokenEndpoint(), clock, domain="http://localhost:9000/")
        assert provider.token_url == "http://localhost:9000/oauth/token"


class TestTokenErrors:
    """Tests for token acquisition failures."""

    @pytest.mark.asyncio
    async def test_missing_configuration(self, clock):
        endpoint = TokenEndpoint()
        provider = build_provider(endpoint, clock, client_secret="", audience="")

        with pytest.raises(AuthConfigError) as exc_info:
            await provider.get_token()

        assert exc_info.value.missing == ["client_secret", "audience"]
        assert endpoint.requests == []

    @pytest.mark.asyncio
    async def test_non_success_status(self, clock):
        provider = build_provider(TokenEndpoint(status_code=401), clock)

        with pytest.raises(AuthRequestError) as exc_info:
            await provider.get_token()

        assert exc_info.value.status_code == 401
        assert "401" in str(exc_info.value)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"not json", b'{"token_type": "Bearer"}', b'{"access_token": ""}'])
    async def test_unusable_body(self, clock, body):
        provider = build_provider(TokenEndpoint(body=body), clock)

        with pytest.raises(AuthRequestError):
            await provider.get_token()

        assert provider.cached_token is None

    @pytest.mark.asyncio
    async def test_connection_failure(self, clock):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = build_provider(
            None, clock, http_client=httpx.AsyncClient(transport=httpx.MockTransport(refuse))
        )

        with pytest.raises(AuthRequestError, match="Failed to reach"):
            await provider.get_token()

    @pytest.mark.asyncio
    async def test_retry_policy_applied(self, clock, recording_sleep):
        calls = []

        def flaky(request):
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(503)
            return httpx.Response(200, json={"access_token": "late", "expires_in": 3600})

        provider = build_provider(
            None,
            clock,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(flaky)),
            retry_policy=RetryPolicy(max_retries=2, sleep=recording_sleep),
        )

        assert await provider.get_token() == "late"
        assert recording_sleep.delays == [2]

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_token(self, clock):
        endpoint = TokenEndpoint()
        provider = build_provider(endpoint, clock)
        await provider.get_token()
        clock.advance(4000)
        endpoint.status_code = 500

        with pytest.raises(AuthRequestError):
            await provider.get_token()

        assert provider.cached_token.access_token == "token-1"
