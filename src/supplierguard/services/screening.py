"""Screening orchestration.

Validates the request, resolves the supplier, calls the screening client and
turns the upstream result into a ``ScreeningResultView``. Every integration
failure leaves this module as ``RequestRejected``; callers only ever see
``ValidationFailed``, ``NotFound`` or ``RequestRejected``.
"""

import time
from collections.abc import Sequence
from typing import Protocol

from supplierguard.data.interfaces import ISupplierStore
from supplierguard.exceptions import (
    IntegrationError,
    NotFound,
    RequestRejected,
    ScreeningApiError,
    ValidationFailed,
)
from supplierguard.infrastructure.logging_config import get_logger
from supplierguard.infrastructure.metrics import record_screening
from supplierguard.models.screening import ScreeningResult, ScreeningResultView, ScreeningSource

logger = get_logger(__name__)

MIN_SOURCES = 1
MAX_SOURCES = 3
DEFAULT_RETRY_AFTER_SECONDS = 60
ALL_SOURCES = [source.value for source in ScreeningSource]


class ScreeningClient(Protocol):
    """What the orchestration needs from a screening client."""

    async def screen(self, entity_name: str, sources: Sequence[int]) -> ScreeningResult: ...

    async def health_check(self) -> bool: ...


def validate_screening_request(
    supplier_id: str | None, sources: Sequence[int] | None
) -> dict[str, list[str]]:
    """Collect every rule a screening request violates, keyed by field."""
    errors: dict[str, list[str]] = {}

    def fail(field: str, message: str) -> None:
        errors.setdefault(field, []).append(message)

    if not supplier_id or not str(supplier_id).strip():
        fail("supplier_id", "Supplier ID is required.")

    sources = list(sources or [])
    if not sources:
        fail("sources", "At least one source must be specified.")
    if not MIN_SOURCES <= len(sources) <= MAX_SOURCES:
        fail("sources", f"You must select between {MIN_SOURCES} and {MAX_SOURCES} sources.")
    if any(source not in ALL_SOURCES for source in sources):
        fail(
            "sources",
            f"Invalid source. Valid sources are: {ScreeningSource.describe_all()}.",
        )
    if len(set(sources)) != len(sources):
        fail("sources", "Duplicate sources are not allowed.")
    return errors


class ScreeningService:
    """Screens suppliers against high-risk lists."""

    def __init__(self, supplier_store: ISupplierStore, screening_client: ScreeningClient):
        self.store = supplier_store
        self.client = screening_client

    async def perform_screening(
        self, supplier_id: str, sources: Sequence[int]
    ) -> ScreeningResultView:
        """Screen one supplier's legal name against ``sources``.

        Raises:
            ValidationFailed: ``sources`` or ``supplier_id`` is invalid.
            NotFound: No supplier with ``supplier_id`` exists.
            RequestRejected: The screening integration failed or rate-limited us.
        """
        errors = validate_screening_request(supplier_id, sources)
        if errors:
            raise ValidationFailed(errors)

        supplier = await self.store.get_by_id(supplier_id)
        if supplier is None:
            raise NotFound("Supplier", supplier_id)

        entity_name = supplier.screening_name
        started = time.perf_counter()
        try:
            result = await self.client.screen(entity_name, list(sources))
        except ScreeningApiError as exc:
            if exc.is_rate_limited:
                retry_after = exc.retry_after_seconds
                if retry_after is None and exc.error_response is not None:
                    retry_after = exc.error_response.retry_after_seconds()
                if retry_after is None:
                    retry_after = DEFAULT_RETRY_AFTER_SECONDS
                record_screening("rate_limited")
                logger.warning(
                    "screening_rejected",
                    supplier_id=supplier_id,
                    reason="rate_limited",
                    retry_after=retry_after,
                )
                raise RequestRejected(
                    "Screening API rate limit exceeded. "
                    f"Please retry after {retry_after} seconds.",
                    retry_after_seconds=retry_after,
                ) from exc
            raise self._rejected(supplier_id, exc) from exc
        except IntegrationError as exc:
            raise self._rejected(supplier_id, exc) from exc

        duration = time.perf_counter() - started
        view = ScreeningResultView.from_result(supplier.id, supplier.legal_name, result)
        record_screening("high_risk" if view.is_high_risk else "clear", duration)
        logger.info(
            "screening_performed",
            supplier_id=supplier_id,
            total_hits=view.total_hits,
            is_high_risk=view.is_high_risk,
        )
        return view

    @staticmethod
    def _rejected(supplier_id: str, exc: Exception) -> RequestRejected:
        record_screening("rejected")
        logger.error("screening_rejected", supplier_id=supplier_id, error=str(exc))
        return RequestRejected(f"Screening API error: {exc}")

    async def quick_screening(self, supplier_id: str) -> ScreeningResultView:
        """Screen against every available source."""
        return await self.perform_screening(supplier_id, ALL_SOURCES)

    async def check_screening_health(self) -> bool:
        return await self.client.health_check()
