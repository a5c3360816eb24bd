"""FastAPI dependency providers.

The screening client is a process-wide instance so that every request shares
one token cache and one circuit breaker.
"""

from supplierguard.data.factory import get_default_supplier_store
from supplierguard.integrations.screening_client import ScreeningApiClient
from supplierguard.models.config import get_settings
from supplierguard.services.screening import ScreeningClient, ScreeningService
from supplierguard.services.suppliers import SupplierService

_screening_client: ScreeningClient | None = None


def get_screening_client() -> ScreeningClient:
    global _screening_client
    if _screening_client is None:
        _screening_client = ScreeningApiClient.from_settings(get_settings())
    return _screening_client


def set_screening_client(client: ScreeningClient | None) -> None:
    """Replace the shared client (useful for testing)."""
    global _screening_client
    _screening_client = client


async def close_screening_client() -> None:
    global _screening_client
    if isinstance(_screening_client, ScreeningApiClient):
        await _screening_client.close()
    _screening_client = None


def get_supplier_service() -> SupplierService:
    return SupplierService(get_default_supplier_store())


def get_screening_service() -> ScreeningService:
    return ScreeningService(get_default_supplier_store(), get_screening_client())
