"""Supplier CRUD endpoints."""

from fastapi import APIRouter, Depends, Query, status

from supplierguard.exceptions import ValidationFailed
from supplierguard.models.supplier import SupplierQuery
from supplierguard.services.suppliers import SupplierService

from ..dependencies import get_supplier_service
from ..schemas import (
    ApiResponse,
    SupplierPage,
    SupplierRequest,
    SupplierResponse,
    SupplierUpdateRequest,
)

router = APIRouter(prefix="/api/suppliers", tags=["Suppliers"])


@router.get("", response_model=ApiResponse)
async def list_suppliers(
    search_term: str | None = Query(None, description="Matches legal/commercial name, tax ID or email"),
    country: str | None = None,
    min_revenue: float | None = None,
    max_revenue: float | None = None,
    order_by: str = "last_modified_at",
    ascending: bool = False,
    page_number: int = 1,
    page_size: int = 10,
    service: SupplierService = Depends(get_supplier_service),
) -> ApiResponse:
    """Filtered, sorted and paginated supplier listing."""
    query = SupplierQuery(
        search_term=search_term,
        country=country,
        min_revenue=min_revenue,
        max_revenue=max_revenue,
        order_by=order_by,
        ascending=ascending,
        page_number=page_number,
        page_size=page_size,
    )
    page = await service.search(query)
    return ApiResponse.ok(
        SupplierPage.from_page(page).model_dump(mode="json"),
        f"Retrieved {len(page.items)} suppliers (page {page.page_number} of {page.total_pages})",
    )


@router.get("/all", response_model=ApiResponse)
async def list_all_suppliers(
    service: SupplierService = Depends(get_supplier_service),
) -> ApiResponse:
    suppliers = await service.list_all()
    return ApiResponse.ok(
        [SupplierResponse.from_domain(s).model_dump(mode="json") for s in suppliers],
        f"Retrieved {len(suppliers)} suppliers",
    )


@router.get("/{supplier_id}", response_model=ApiResponse)
async def get_supplier(
    supplier_id: str,
    service: SupplierService = Depends(get_supplier_service),
) -> ApiResponse:
    supplier = await service.get(supplier_id)
    return ApiResponse.ok(
        SupplierResponse.from_domain(supplier).model_dump(mode="json"),
        "Supplier retrieved successfully",
    )


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    request: SupplierRequest,
    service: SupplierService = Depends(get_supplier_service),
) -> ApiResponse:
    supplier = await service.create(**request.fields())
    return ApiResponse.ok(
        SupplierResponse.from_domain(supplier).model_dump(mode="json"),
        "Supplier created successfully",
    )


@router.put("/{supplier_id}", response_model=ApiResponse)
async def update_supplier(
    supplier_id: str,
    request: SupplierUpdateRequest,
    service: SupplierService = Depends(get_supplier_service),
) -> ApiResponse:
    if request.id is not None and request.id != supplier_id:
        raise ValidationFailed.single("id", "ID in URL does not match ID in body.")
    supplier = await service.update(supplier_id, **request.fields())
    return ApiResponse.ok(
        SupplierResponse.from_domain(supplier).model_dump(mode="json"),
        "Supplier updated successfully",
    )


@router.delete("/{supplier_id}", response_model=ApiResponse)
async def delete_supplier(
    supplier_id: str,
    service: SupplierService = Depends(get_supplier_service),
) -> ApiResponse:
    await service.delete(supplier_id)
    return ApiResponse.ok(message="Supplier deleted successfully")
