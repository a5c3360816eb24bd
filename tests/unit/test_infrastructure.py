"""Tests for infrastructure modules."""

import logging

from prometheus_client import REGISTRY

from supplierguard.infrastructure.correlation import (
    CorrelationContext,
    get_correlation_id,
    set_correlation_id,
)
from supplierguard.infrastructure.logging_config import (
    REDACTED,
    add_service_info,
    redact_secrets,
    resolve_log_level,
)
from supplierguard.infrastructure.metrics import (
    record_retry,
    record_screening,
    record_token_request,
    set_circuit_state,
)
from supplierguard.models.config import Settings


class TestLoggingProcessors:
    """Tests for custom structlog processors."""

    def test_service_info_added(self):
        event = add_service_info(None, "info", {"event": "x"})

        assert event["service"] == "supplierguard"
        assert "version" in event
        assert "environment" in event

    def test_secrets_redacted(self):
        event = redact_secrets(
            None,
            "info",
            {
                "event": "auth_token_requested",
                "client_secret": "s3cret",
                "headers": {"Authorization": "Bearer abc", "Accept": "application/json"},
                "domain": "tenant.auth0.test",
            },
        )

        assert event["client_secret"] == REDACTED
        assert event["headers"] == {"Authorization": REDACTED, "Accept": "application/json"}
        assert event["domain"] == "tenant.auth0.test"

    def test_log_level_defaults_per_environment(self):
        assert resolve_log_level(production=True) == logging.INFO
        assert resolve_log_level(production=False) == logging.DEBUG

    def test_configured_log_level_wins(self):
        assert resolve_log_level(production=True, configured="warning") == logging.WARNING
        assert resolve_log_level(production=False, configured="bogus") == logging.INFO

    def test_log_level_read_from_settings(self, monkeypatch):
        monkeypatch.setenv("SUPPLIERGUARD_LOG_LEVEL", "ERROR")

        assert Settings().log_level == "ERROR"


class TestCorrelation:
    """Tests for correlation id handling."""

    def test_set_and_get(self):
        set_correlation_id("abc")
        assert get_correlation_id() == "abc"

    def test_context_manager_restores_previous_id(self):
        set_correlation_id("outer")

        with CorrelationContext() as correlation_id:
            assert get_correlation_id() == correlation_id
            assert correlation_id != "outer"

        assert get_correlation_id() == "outer"

    def test_context_manager_accepts_explicit_id(self):
        with CorrelationContext("given") as correlation_id:
            assert correlation_id == "given"


class TestMetrics:
    """Tests for metric helpers."""

    def _value(self, name, labels=None):
        return REGISTRY.get_sample_value(name, labels or {}) or 0.0

    def test_record_screening(self):
        before = self._value("supplierguard_screening_requests_total", {"outcome": "clear"})

        record_screening("clear", 0.25)

        after = self._value("supplierguard_screening_requests_total", {"outcome": "clear"})
        assert after == before + 1

    def test_record_retry(self):
        before = self._value("supplierguard_screening_retries_total", {"reason": "503"})
        record_retry("503")
        assert self._value("supplierguard_screening_retries_total", {"reason": "503"}) == before + 1

    def test_record_token_request(self):
        before = self._value("supplierguard_token_requests_total", {"status": "error"})
        record_token_request(success=False)
        assert self._value("supplierguard_token_requests_total", {"status": "error"}) == before + 1

    def test_circuit_state_gauge(self):
        set_circuit_state("test_circuit", "open")
        assert self._value("supplierguard_circuit_breaker_state", {"name": "test_circuit"}) == 2

        set_circuit_state("test_circuit", "closed")
        assert self._value("supplierguard_circuit_breaker_state", {"name": "test_circuit"}) == 0
