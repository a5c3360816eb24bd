"""Application services."""

from .screening import ScreeningService, validate_screening_request
from .suppliers import SupplierService, validate_query

__all__ = [
    "ScreeningService",
    "SupplierService",
    "validate_screening_request",
    "validate_query",
]
