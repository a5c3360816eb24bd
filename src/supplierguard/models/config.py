"""Configuration settings for the supplier service."""

from functools import lru_cache

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

# =============================================================================
# Application Settings
# =============================================================================


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = ConfigDict(
        env_prefix="SUPPLIERGUARD_",
        env_file=".env",
        extra="ignore",
    )

    env: str = "development"
    log_level: str | None = None  # defaults to INFO in production, DEBUG elsewhere

    # Screening API Configuration
    screening_api_base_url: str = "http://localhost:5000"
    screening_api_timeout_seconds: float = 60.0
    screening_api_retry_count: int = 3

    # Circuit Breaker Configuration
    circuit_breaker_threshold: int = 5
    circuit_breaker_break_seconds: float = 30.0

    # Auth0 (client credentials) Configuration
    auth0_domain: str = ""
    auth0_client_id: str = ""
    auth0_client_secret: str = ""
    auth0_audience: str = ""
    token_expiry_margin_seconds: int = 300

    # Supplier Store Configuration
    data_source: str = "memory"  # "memory" or "sqlite"
    sqlite_path: str = "data/supplierguard.db"
    seed_sample_data: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
