"""Data layer: supplier store interfaces, SQLite schema and store factory."""

from supplierguard.data.factory import (
    StoreConfig,
    get_default_supplier_store,
    get_supplier_store,
    load_config,
    reset_supplier_store,
    set_supplier_store,
)
from supplierguard.data.interfaces import BaseSupplierStore, ISupplierStore

__all__ = [
    # Interfaces
    "ISupplierStore",
    "BaseSupplierStore",
    # Factory
    "StoreConfig",
    "load_config",
    "get_supplier_store",
    "get_default_supplier_store",
    "set_supplier_store",
    "reset_supplier_store",
]
