"""Supplier store implementations."""
from supplierguard.data.sources.memory import InMemorySupplierStore
from supplierguard.data.sources.sqlite import SQLiteSupplierStore

__all__ = [
    "InMemorySupplierStore",
    "SQLiteSupplierStore",
]
