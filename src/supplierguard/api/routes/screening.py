"""Supplier screening endpoints."""

from fastapi import APIRouter, Depends

from supplierguard.models.screening import ScreeningResultView
from supplierguard.services.screening import ScreeningService

from ..dependencies import get_screening_service
from ..schemas import ApiResponse, ScreeningRequestBody

router = APIRouter(prefix="/api/screening", tags=["Screening"])


def _screening_message(view: ScreeningResultView) -> str:
    if view.is_high_risk:
        return f"HIGH RISK: {view.total_hits} matches found in screening lists"
    return "No matches found - Supplier is clear"


@router.get("/health", response_model=ApiResponse)
async def screening_health(
    service: ScreeningService = Depends(get_screening_service),
) -> ApiResponse:
    """Reachability of the external screening API."""
    healthy = await service.check_screening_health()
    return ApiResponse.ok(
        {"healthy": healthy},
        "Screening API is healthy" if healthy else "Screening API is unavailable",
    )


@router.post("/{supplier_id}", response_model=ApiResponse)
async def screen_supplier(
    supplier_id: str,
    request: ScreeningRequestBody,
    service: ScreeningService = Depends(get_screening_service),
) -> ApiResponse:
    """Screen a supplier's legal name against the selected sources."""
    view = await service.perform_screening(supplier_id, request.sources)
    return ApiResponse.ok(view.model_dump(mode="json"), _screening_message(view))


@router.post("/{supplier_id}/quick", response_model=ApiResponse)
async def quick_screen_supplier(
    supplier_id: str,
    service: ScreeningService = Depends(get_screening_service),
) -> ApiResponse:
    """Screen a supplier against every source."""
    view = await service.quick_screening(supplier_id)
    return ApiResponse.ok(view.model_dump(mode="json"), _screening_message(view))
