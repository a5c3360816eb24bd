"""Domain, screening and configuration models."""

from .config import Settings, get_settings
from .screening import (
    ScreeningErrorDetail,
    ScreeningErrorResponse,
    ScreeningHit,
    ScreeningRequest,
    ScreeningResult,
    ScreeningResultView,
    ScreeningSource,
)
from .supplier import (
    Country,
    PaginatedList,
    Supplier,
    SupplierData,
    SupplierQuery,
    SupplierSortField,
)

__all__ = [
    "Settings",
    "get_settings",
    "ScreeningSource",
    "ScreeningRequest",
    "ScreeningHit",
    "ScreeningResult",
    "ScreeningErrorDetail",
    "ScreeningErrorResponse",
    "ScreeningResultView",
    "Country",
    "Supplier",
    "SupplierData",
    "SupplierQuery",
    "SupplierSortField",
    "PaginatedList",
]
