"""Factory for creating supplier store instances based on configuration."""
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from supplierguard.data.interfaces import ISupplierStore
from supplierguard.infrastructure.logging_config import get_logger
from supplierguard.models.config import get_settings

logger = get_logger(__name__)


# ============================================================================
# Configuration Models
# ============================================================================

class StoreConfig(BaseModel):
    """Supplier store configuration for one environment."""
    type: str = "memory"
    sqlite_path: str | None = None
    seed: bool = True


class EnvironmentConfig(BaseModel):
    """Environment-specific configuration."""
    environments: dict[str, StoreConfig] = Field(default_factory=dict)
    default: str = "development"


# ============================================================================
# Factory Functions
# ============================================================================

def _expand_env_vars(value: Any) -> Any:
    """Recursively expand ``${VAR}`` values from the environment."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            return os.environ.get(value[2:-1], value)
        return value
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(v) for v in value]
    return value


def load_config(config_path: str | Path | None = None) -> StoreConfig:
    """
    Load supplier store configuration from YAML.

    Args:
        config_path: Path to config file. If None, uses default locations.

    Returns:
        StoreConfig for the environment named by SUPPLIERGUARD_ENV
    """
    if config_path is None:
        possible_paths = [
            Path("config/data-sources.yaml"),
            Path(__file__).parent.parent.parent.parent / "config" / "data-sources.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = path
                break

    if config_path is None or not Path(config_path).exists():
        settings = get_settings()
        return StoreConfig(
            type=settings.data_source,
            sqlite_path=settings.sqlite_path,
            seed=settings.seed_sample_data,
        )

    with open(config_path) as f:
        raw_config = yaml.safe_load(f) or {}

    config = EnvironmentConfig(**_expand_env_vars(raw_config))
    env = os.environ.get("SUPPLIERGUARD_ENV", config.default)
    return config.environments.get(env, StoreConfig())


def get_supplier_store(config: StoreConfig | None = None) -> ISupplierStore:
    """
    Create the supplier store named by ``config``.

    Raises:
        ValueError: If the store type is unknown
    """
    if config is None:
        config = load_config()

    if config.type == "memory":
        from supplierguard.data.sources.memory import InMemorySupplierStore
        store: ISupplierStore = InMemorySupplierStore(seed=config.seed)

    elif config.type == "sqlite":
        from supplierguard.data.sources.sqlite import SQLiteSupplierStore
        store = SQLiteSupplierStore(config.sqlite_path or "data/supplierguard.db")

    else:
        raise ValueError(f"Unknown supplier store type: {config.type}")

    logger.info("supplier_store_created", type=config.type)
    return store


# ============================================================================
# Singleton Instance
# ============================================================================

_store_instance: ISupplierStore | None = None


def get_default_supplier_store() -> ISupplierStore:
    """Get or create the process-wide supplier store."""
    global _store_instance
    if _store_instance is None:
        _store_instance = get_supplier_store()
    return _store_instance


def reset_supplier_store() -> None:
    """Reset the default store (useful for testing)."""
    global _store_instance
    _store_instance = None


def set_supplier_store(store: ISupplierStore) -> None:
    """Replace the default store (useful for testing/dependency injection)."""
    global _store_instance
    _store_instance = store
