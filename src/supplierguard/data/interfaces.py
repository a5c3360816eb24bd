"""Interfaces for supplier stores - enables swapping between in-memory and SQLite."""
from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from supplierguard.models.supplier import Supplier, SupplierQuery


# ============================================================================
# Protocol (for type checking)
# ============================================================================

@runtime_checkable
class ISupplierStore(Protocol):
    """
    Protocol defining the interface for supplier persistence.

    Implementations keep ``Supplier`` aggregates keyed by id and guarantee tax
    id uniqueness only through ``exists_by_tax_id``; callers check before
    writing.
    """

    async def get_by_id(self, supplier_id: str) -> Supplier | None:
        """
        Get a supplier by id.

        Args:
            supplier_id: Supplier identifier

        Returns:
            The supplier, or None if absent
        """
        ...

    async def get_by_tax_id(self, tax_id: str) -> Supplier | None:
        """Get a supplier by its normalised tax id."""
        ...

    async def list_all(self) -> list[Supplier]:
        """All suppliers, most recently modified first."""
        ...

    async def find(self, query: SupplierQuery) -> tuple[list[Supplier], int]:
        """
        Filter, sort and page suppliers.

        Args:
            query: Validated query options

        Returns:
            The requested page and the total count matching the filters
        """
        ...

    async def add(self, supplier: Supplier) -> Supplier:
        ...

    async def update(self, supplier: Supplier) -> Supplier:
        ...

    async def delete(self, supplier_id: str) -> bool:
        """Delete a supplier; returns False when it did not exist."""
        ...

    async def exists_by_tax_id(self, tax_id: str, exclude_id: str | None = None) -> bool:
        ...

    async def count(self) -> int:
        ...

    async def health_check(self) -> bool:
        """
        Check if the store is available.

        Returns:
            True if healthy, False otherwise
        """
        ...


# ============================================================================
# Abstract Base Class (for implementations that want inheritance)
# ============================================================================

class BaseSupplierStore(ABC):
    """
    Abstract base class for supplier store implementations.

    Provides the derived lookups on top of the primitive operations.
    """

    @abstractmethod
    async def get_by_id(self, supplier_id: str) -> Supplier | None:
        pass

    @abstractmethod
    async def get_by_tax_id(self, tax_id: str) -> Supplier | None:
        pass

    @abstractmethod
    async def list_all(self) -> list[Supplier]:
        pass

    @abstractmethod
    async def find(self, query: SupplierQuery) -> tuple[list[Supplier], int]:
        pass

    @abstractmethod
    async def add(self, supplier: Supplier) -> Supplier:
        pass

    @abstractmethod
    async def update(self, supplier: Supplier) -> Supplier:
        pass

    @abstractmethod
    async def delete(self, supplier_id: str) -> bool:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    async def exists_by_tax_id(self, tax_id: str, exclude_id: str | None = None) -> bool:
        """True when another supplier already uses ``tax_id``."""
        existing = await self.get_by_tax_id(tax_id)
        return existing is not None and existing.id != exclude_id

    async def add_many(self, suppliers: list[Supplier]) -> int:
        """Add suppliers whose tax id is not taken yet; returns how many were added."""
        added = 0
        for supplier in suppliers:
            if not await self.exists_by_tax_id(supplier.tax_id):
                await self.add(supplier)
                added += 1
        return added

    async def health_check(self) -> bool:
        return True
