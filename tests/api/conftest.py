"""Fixtures for API tests."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from supplierguard.api.dependencies import set_screening_client
from supplierguard.api.main import app
from supplierguard.data.factory import set_supplier_store


@pytest.fixture
def screening_client():
    """Screening client double; configure ``screen`` per test."""
    mock = AsyncMock()
    mock.health_check.return_value = True
    return mock


@pytest.fixture
def client(monkeypatch, store, screening_client):
    """Create a test client for the API backed by the test store."""
    monkeypatch.setenv("SUPPLIERGUARD_ENV", "test")
    set_supplier_store(store)
    set_screening_client(screening_client)
    with TestClient(app) as client:
        yield client
    set_screening_client(None)


@pytest.fixture
def sample_supplier_request(fields_factory):
    """Valid create body for a supplier not in the store."""
    return fields_factory(
        legal_name="Nova Logistics SAC",
        commercial_name="Nova",
        tax_id="20555000111",
        email="hello@nova.test",
    )
