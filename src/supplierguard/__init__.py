"""SupplierGuard: supplier master data with resilient high-risk list screening."""

__version__ = "1.0.0"
