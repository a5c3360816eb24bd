"""Health check endpoints."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from supplierguard import __version__
from supplierguard.data.factory import get_default_supplier_store
from supplierguard.services.screening import ScreeningService

from ..dependencies import get_screening_service
from ..schemas import HealthResponse, ReadinessResponse, ServiceHealth

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    screening: ScreeningService = Depends(get_screening_service),
) -> HealthResponse:
    """
    Health check endpoint.

    The supplier store is required; an unreachable screening API only
    degrades the service.
    """
    services = []
    overall_status = "healthy"

    start = time.perf_counter()
    store_ok = await get_default_supplier_store().health_check()
    services.append(
        ServiceHealth(
            name="supplier_store",
            status="healthy" if store_ok else "unhealthy",
            latency_ms=(time.perf_counter() - start) * 1000,
        )
    )
    if not store_ok:
        overall_status = "unhealthy"

    start = time.perf_counter()
    screening_ok = await screening.check_screening_health()
    services.append(
        ServiceHealth(
            name="screening_api",
            status="healthy" if screening_ok else "degraded",
            latency_ms=(time.perf_counter() - start) * 1000,
            message=None if screening_ok else "Screening API unreachable",
        )
    )
    if not screening_ok and overall_status == "healthy":
        overall_status = "degraded"

    return HealthResponse(status=overall_status, version=__version__, services=services)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """
    Readiness check endpoint.

    Used by load balancers for traffic routing; only local dependencies count.
    """
    checks = {"supplier_store": await get_default_supplier_store().health_check()}
    return ReadinessResponse(ready=all(checks.values()), checks=checks)


@router.get("/live")
async def liveness_check() -> dict:
    """Liveness check endpoint."""
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}
