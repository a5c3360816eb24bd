"""Supplier CRUD and search."""

from typing import Any

from supplierguard.data.interfaces import ISupplierStore
from supplierguard.exceptions import Conflict, NotFound, ValidationFailed
from supplierguard.infrastructure.logging_config import get_logger
from supplierguard.models.supplier import (
    PaginatedList,
    Supplier,
    SupplierData,
    SupplierQuery,
    SupplierSortField,
)

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100


def validate_query(query: SupplierQuery) -> dict[str, list[str]]:
    """Collect every rule ``query`` violates, keyed by field."""
    errors: dict[str, list[str]] = {}

    def fail(field: str, message: str) -> None:
        errors.setdefault(field, []).append(message)

    if query.page_number < 1:
        fail("page_number", "Page number must be at least 1.")
    if not 1 <= query.page_size <= MAX_PAGE_SIZE:
        fail("page_size", f"Page size must be between 1 and {MAX_PAGE_SIZE}.")
    if query.min_revenue is not None and query.min_revenue < 0:
        fail("min_revenue", "Minimum revenue cannot be negative.")
    if query.max_revenue is not None and query.max_revenue < 0:
        fail("max_revenue", "Maximum revenue cannot be negative.")
    if (
        query.min_revenue is not None
        and query.max_revenue is not None
        and query.min_revenue > query.max_revenue
    ):
        fail("min_revenue", "Minimum revenue cannot be greater than maximum revenue.")
    if SupplierSortField.parse(query.order_by) is None:
        allowed = ", ".join(field.value for field in SupplierSortField)
        fail("order_by", f"Invalid sort field. Allowed values: {allowed}.")
    return errors


class SupplierService:
    """Application service over an ``ISupplierStore``."""

    def __init__(self, store: ISupplierStore):
        self.store = store

    async def get(self, supplier_id: str) -> Supplier:
        supplier = await self.store.get_by_id(supplier_id)
        if supplier is None:
            raise NotFound("Supplier", supplier_id)
        return supplier

    async def list_all(self) -> list[Supplier]:
        return await self.store.list_all()

    async def search(self, query: SupplierQuery) -> PaginatedList[Supplier]:
        errors = validate_query(query)
        if errors:
            raise ValidationFailed(errors)
        items, total = await self.store.find(query)
        return PaginatedList[Supplier](
            items=items,
            page_number=query.page_number,
            page_size=query.page_size,
            total_count=total,
        )

    async def create(self, **fields: Any) -> Supplier:
        data = SupplierData.from_input(**fields)
        if await self.store.exists_by_tax_id(data.tax_id):
            raise Conflict(f"A supplier with tax ID {data.tax_id} already exists.")
        supplier = await self.store.add(Supplier.create(data))
        logger.info("supplier_created", supplier_id=supplier.id, tax_id=supplier.tax_id)
        return supplier

    async def update(self, supplier_id: str, **fields: Any) -> Supplier:
        existing = await self.get(supplier_id)
        data = SupplierData.from_input(**fields)
        if await self.store.exists_by_tax_id(data.tax_id, exclude_id=supplier_id):
            raise Conflict(f"A supplier with tax ID {data.tax_id} already exists.")
        supplier = await self.store.update(existing.apply(data))
        logger.info("supplier_updated", supplier_id=supplier_id)
        return supplier

    async def delete(self, supplier_id: str) -> None:
        if not await self.store.delete(supplier_id):
            raise NotFound("Supplier", supplier_id)
        logger.info("supplier_deleted", supplier_id=supplier_id)
