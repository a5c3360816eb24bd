"""FastAPI application for SupplierGuard."""
