"""Exception hierarchy for SupplierGuard.

Two families live here:

- Caller-facing errors (``ValidationFailed``, ``NotFound``, ``Conflict``,
  ``RequestRejected``) raised by the service layer and mapped to HTTP status
  codes by the API.
- Integration errors raised by the token provider, the resilience policies and
  the screening client. The screening service translates these into
  ``RequestRejected`` so transport detail never leaks past it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from supplierguard.models.screening import ScreeningErrorResponse


class SupplierGuardError(Exception):
    """Base exception for all SupplierGuard errors."""


# =============================================================================
# Caller-facing errors
# =============================================================================


class ValidationFailed(SupplierGuardError):
    """Raised when input violates one or more validation rules.

    Attributes:
        errors: Violated rules grouped by field name.
    """

    def __init__(self, errors: dict[str, list[str]]):
        super().__init__("One or more validation failures have occurred.")
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str) -> ValidationFailed:
        return cls({field: [message]})

    def messages(self) -> list[str]:
        """Flatten errors into ``"field: message"`` strings."""
        return [f"{field}: {message}" for field, items in self.errors.items() for message in items]


class NotFound(SupplierGuardError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, key: object):
        super().__init__(f'Entity "{entity}" ({key}) was not found.')
        self.entity = entity
        self.key = key


class Conflict(SupplierGuardError):
    """Raised when an operation would violate a uniqueness constraint."""


class RequestRejected(SupplierGuardError):
    """Raised when a downstream dependency rejected or failed the request.

    Attributes:
        retry_after_seconds: Hint from a rate-limited upstream, if any.
    """

    def __init__(self, message: str, retry_after_seconds: int | None = None):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


# =============================================================================
# Integration errors
# =============================================================================


class IntegrationError(SupplierGuardError):
    """Base class for failures talking to external systems."""


class AuthError(IntegrationError):
    """Token acquisition failed."""


class AuthConfigError(AuthError):
    """Required identity-provider configuration is missing."""

    def __init__(self, missing: list[str]):
        super().__init__(f"Auth0 configuration missing: {', '.join(missing)}")
        self.missing = missing


class AuthRequestError(AuthError):
    """The token endpoint failed or returned an unusable body."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CircuitOpenError(IntegrationError):
    """Raised without touching the network while a circuit is open."""

    def __init__(self, name: str, retry_in_seconds: float):
        super().__init__(
            f"Circuit '{name}' is open; calls are suspended for {retry_in_seconds:.1f}s"
        )
        self.name = name
        self.retry_in_seconds = retry_in_seconds


class ScreeningError(IntegrationError):
    """Base class for screening client failures."""


class ScreeningTransportError(ScreeningError):
    """Connectivity, timeout or malformed-response failure."""


class ScreeningApiError(ScreeningError):
    """The screening API answered with a non-success status.

    Attributes:
        status_code: HTTP status returned upstream.
        error_response: Parsed structured error body, when one was returned.
        retry_after_seconds: Rate-limit hint for 429 responses.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        error_response: ScreeningErrorResponse | None = None,
        retry_after_seconds: int | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_response = error_response
        self.retry_after_seconds = retry_after_seconds

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429
