"""Outbound integrations: identity provider and screening API."""

from .auth import CachedToken, TokenProvider
from .screening_client import ScreeningApiClient, parse_retry_after

__all__ = [
    "CachedToken",
    "TokenProvider",
    "ScreeningApiClient",
    "parse_retry_after",
]
