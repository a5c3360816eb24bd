"""API request and response schemas."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from supplierguard.models.supplier import PaginatedList, Supplier


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Envelope
# ============================================================================


class ApiResponse(BaseModel):
    """Envelope wrapping every API payload."""

    success: bool
    message: str | None = None
    data: Any = None
    errors: list[str] | None = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def ok(cls, data: Any = None, message: str | None = None) -> "ApiResponse":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, errors: list[str], message: str | None = None) -> "ApiResponse":
        return cls(success=False, message=message, errors=errors)


# ============================================================================
# Request Schemas
# ============================================================================


class SupplierRequest(BaseModel):
    """Create/update body. Field rules are enforced by the supplier model."""

    legal_name: str | None = None
    commercial_name: str | None = None
    tax_id: str | None = None
    phone_number: str | None = None
    email: str | None = None
    website: str | None = None
    physical_address: str | None = None
    country: str | None = None
    annual_revenue: float | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "legal_name": "Acme Corporation S.A.",
                "commercial_name": "ACME Corp",
                "tax_id": "20123456789",
                "phone_number": "+51987654321",
                "email": "contacto@acmecorp.com.pe",
                "website": "https://www.acmecorp.com.pe",
                "physical_address": "Av. Javier Prado Este 5250, Lima",
                "country": "Peru",
                "annual_revenue": 15000000,
            }
        }
    }

    def fields(self) -> dict[str, Any]:
        return self.model_dump()


class SupplierUpdateRequest(SupplierRequest):
    id: str | None = None

    def fields(self) -> dict[str, Any]:
        return self.model_dump(exclude={"id"})


class ScreeningRequestBody(BaseModel):
    """Sources to screen against: 1 (OffshoreLeaks), 2 (WorldBank), 3 (OFAC)."""

    sources: list[int] = Field(default_factory=list)

    model_config = {"json_schema_extra": {"example": {"sources": [1, 2, 3]}}}


# ============================================================================
# Response Schemas
# ============================================================================


class SupplierResponse(BaseModel):
    """A supplier as returned by the API."""

    id: str
    legal_name: str
    commercial_name: str
    tax_id: str
    phone_number: str
    email: str
    website: str | None = None
    physical_address: str
    country: str
    annual_revenue: float
    is_high_revenue: bool
    created_at: datetime
    last_modified_at: datetime | None = None

    @classmethod
    def from_domain(cls, supplier: Supplier) -> "SupplierResponse":
        return cls(
            **supplier.model_dump(exclude={"country"}),
            country=supplier.country.value,
            is_high_revenue=supplier.is_high_revenue,
        )


class SupplierPage(BaseModel):
    items: list[SupplierResponse]
    page_number: int
    page_size: int
    total_count: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool

    @classmethod
    def from_page(cls, page: PaginatedList[Supplier]) -> "SupplierPage":
        return cls(
            items=[SupplierResponse.from_domain(s) for s in page.items],
            page_number=page.page_number,
            page_size=page.page_size,
            total_count=page.total_count,
            total_pages=page.total_pages,
            has_previous_page=page.has_previous_page,
            has_next_page=page.has_next_page,
        )


# ============================================================================
# Health Schemas
# ============================================================================


class ServiceHealth(BaseModel):
    """Health status of a dependency."""

    name: str
    status: str  # "healthy", "degraded", "unhealthy"
    latency_ms: float | None = None
    message: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime = Field(default_factory=_utcnow)
    services: list[ServiceHealth] = Field(default_factory=list)


class ReadinessResponse(BaseModel):
    ready: bool
    checks: dict[str, bool] = Field(default_factory=dict)
