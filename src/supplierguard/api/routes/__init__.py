"""API route modules."""

from .health import router as health_router
from .screening import router as screening_router
from .suppliers import router as suppliers_router

__all__ = ["health_router", "screening_router", "suppliers_router"]
