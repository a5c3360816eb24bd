"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from supplierguard.data.factory import reset_supplier_store
from supplierguard.data.sources.memory import InMemorySupplierStore
from supplierguard.infrastructure.correlation import reset_correlation_context
from supplierguard.infrastructure.resilience import CircuitBreaker, ResiliencePipeline, RetryPolicy
from supplierguard.integrations.auth import TokenProvider
from supplierguard.integrations.screening_client import ScreeningApiClient
from supplierguard.models.supplier import Supplier, SupplierData

BASE_URL = "http://screening.test"
TOKEN_URL = "https://tenant.auth0.test/oauth/token"


class FakeClock:
    """Controllable UTC clock for token expiry tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeMonotonic:
    """Controllable monotonic clock for circuit breaker tests."""

    def __init__(self):
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def supplier_fields(**overrides) -> dict:
    fields = {
        "legal_name": "Acme Corp",
        "commercial_name": "Acme",
        "tax_id": "20123456789",
        "phone_number": "+51987654321",
        "email": "contact@acme.test",
        "website": "www.acme.test",
        "physical_address": "Av. Principal 123, Lima",
        "country": "Peru",
        "annual_revenue": 15_000_000,
    }
    fields.update(overrides)
    return fields


def make_supplier(supplier_id: str = "S1", **overrides) -> Supplier:
    return Supplier(id=supplier_id, **SupplierData(**supplier_fields(**overrides)).model_dump())


def screening_payload(total_hits: int = 2, entity: str = "Acme Corp") -> dict:
    hits = [
        {
            "entityName": f"{entity} Holdings {i}",
            "source": "OFAC" if i % 2 else "OffshoreLeaks",
            "attributes": {"country": "PA", "program": "SDN"},
            "matchScore": 90 - i,
        }
        for i in range(total_hits)
    ]
    return {
        "searchedEntity": entity,
        "totalHits": total_hits,
        "hits": hits,
        "searchedAt": "2025-01-01T12:00:00Z",
        "executionTimeSeconds": 0.42,
        "errors": None,
    }


def token_response(access_token: str = "token-1", expires_in: int = 3600) -> httpx.Response:
    return httpx.Response(
        200,
        json={"access_token": access_token, "expires_in": expires_in, "token_type": "Bearer"},
    )


@pytest.fixture(autouse=True)
def _reset_state():
    """Isolate process-wide singletons between tests."""
    reset_correlation_context()
    reset_supplier_store()
    yield
    reset_supplier_store()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def monotonic():
    return FakeMonotonic()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def supplier():
    return make_supplier()


@pytest.fixture
def store(supplier):
    return InMemorySupplierStore([supplier])


@pytest.fixture
def token_provider(clock):
    """Token provider whose identity provider always issues ``token-1``."""
    transport = httpx.MockTransport(lambda request: token_response())
    return TokenProvider(
        domain="tenant.auth0.test",
        client_id="client",
        client_secret="secret",
        audience="https://screening.test",
        http_client=httpx.AsyncClient(transport=transport),
        clock=clock,
    )


@pytest.fixture
def make_client(token_provider, recording_sleep, monotonic):
    """Build a ScreeningApiClient around an httpx.MockTransport handler."""

    def factory(handler, max_retries: int = 3, failure_threshold: int = 5) -> ScreeningApiClient:
        pipeline = ResiliencePipeline(
            CircuitBreaker(
                "screening_api",
                failure_threshold=failure_threshold,
                break_duration_seconds=30,
                clock=monotonic,
            ),
            RetryPolicy(max_retries=max_retries, sleep=recording_sleep),
        )
        http_client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
        client = ScreeningApiClient(
            base_url=BASE_URL,
            token_provider=token_provider,
            pipeline=pipeline,
            http_client=http_client,
        )
        return client

    return factory


@pytest.fixture
def supplier_factory():
    return make_supplier


@pytest.fixture
def fields_factory():
    return supplier_fields


@pytest.fixture
def payload_factory():
    return screening_payload
