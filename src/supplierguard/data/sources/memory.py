"""In-memory supplier store."""
import asyncio

from supplierguard.data.interfaces import BaseSupplierStore
from supplierguard.data.seed import sample_suppliers
from supplierguard.models.supplier import Supplier, SupplierQuery, SupplierSortField


class InMemorySupplierStore(BaseSupplierStore):
    """
    Dict-backed supplier store for development and tests.

    Filtering, sorting and paging happen in Python over a snapshot of the
    stored suppliers.
    """

    def __init__(self, suppliers: list[Supplier] | None = None, seed: bool = False):
        self._suppliers: dict[str, Supplier] = {}
        self._lock = asyncio.Lock()
        for supplier in suppliers or []:
            self._suppliers[supplier.id] = supplier
        if seed:
            for supplier in sample_suppliers():
                self._suppliers[supplier.id] = supplier

    async def get_by_id(self, supplier_id: str) -> Supplier | None:
        return self._suppliers.get(supplier_id)

    async def get_by_tax_id(self, tax_id: str) -> Supplier | None:
        return next((s for s in self._suppliers.values() if s.tax_id == tax_id), None)

    async def list_all(self) -> list[Supplier]:
        return sorted(self._suppliers.values(), key=lambda s: s.last_activity, reverse=True)

    async def find(self, query: SupplierQuery) -> tuple[list[Supplier], int]:
        matches = [s for s in self._suppliers.values() if query.matches(s)]
        field: SupplierSortField = query.sort_field
        matches.sort(key=field.sort_key, reverse=not query.ascending)
        page = matches[query.offset : query.offset + query.page_size]
        return page, len(matches)

    async def add(self, supplier: Supplier) -> Supplier:
        async with self._lock:
            self._suppliers[supplier.id] = supplier
        return supplier

    async def update(self, supplier: Supplier) -> Supplier:
        async with self._lock:
            self._suppliers[supplier.id] = supplier
        return supplier

    async def delete(self, supplier_id: str) -> bool:
        async with self._lock:
            return self._suppliers.pop(supplier_id, None) is not None

    async def count(self) -> int:
        return len(self._suppliers)
