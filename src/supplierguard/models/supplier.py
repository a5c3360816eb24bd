"""Supplier domain model."""

import math
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, TypeVar
from urllib.parse import urlparse
from uuid import uuid4

from pydantic import BaseModel, Field, ValidationError, field_validator

from supplierguard.exceptions import ValidationFailed

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", re.IGNORECASE)
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")

HIGH_REVENUE_THRESHOLD = 10_000_000
MAX_ANNUAL_REVENUE = 1_000_000_000_000

T = TypeVar("T")


class Country(str, Enum):
    """Supported supplier countries; values are display names."""

    # South America
    ARGENTINA = "Argentina"
    BOLIVIA = "Bolivia"
    BRAZIL = "Brazil"
    CHILE = "Chile"
    COLOMBIA = "Colombia"
    ECUADOR = "Ecuador"
    PARAGUAY = "Paraguay"
    PERU = "Peru"
    URUGUAY = "Uruguay"
    VENEZUELA = "Venezuela"
    # North America
    CANADA = "Canada"
    MEXICO = "Mexico"
    UNITED_STATES = "United States"
    # Central America & Caribbean
    COSTA_RICA = "Costa Rica"
    CUBA = "Cuba"
    DOMINICAN_REPUBLIC = "Dominican Republic"
    EL_SALVADOR = "El Salvador"
    GUATEMALA = "Guatemala"
    HONDURAS = "Honduras"
    NICARAGUA = "Nicaragua"
    PANAMA = "Panama"
    # Europe
    AUSTRIA = "Austria"
    BELGIUM = "Belgium"
    DENMARK = "Denmark"
    FINLAND = "Finland"
    FRANCE = "France"
    GERMANY = "Germany"
    GREECE = "Greece"
    IRELAND = "Ireland"
    ITALY = "Italy"
    NETHERLANDS = "Netherlands"
    NORWAY = "Norway"
    POLAND = "Poland"
    PORTUGAL = "Portugal"
    SPAIN = "Spain"
    SWEDEN = "Sweden"
    SWITZERLAND = "Switzerland"
    UNITED_KINGDOM = "United Kingdom"
    # Asia
    CHINA = "China"
    INDIA = "India"
    INDONESIA = "Indonesia"
    JAPAN = "Japan"
    MALAYSIA = "Malaysia"
    PHILIPPINES = "Philippines"
    SINGAPORE = "Singapore"
    SOUTH_KOREA = "South Korea"
    TAIWAN = "Taiwan"
    THAILAND = "Thailand"
    VIETNAM = "Vietnam"
    # Oceania
    AUSTRALIA = "Australia"
    NEW_ZEALAND = "New Zealand"
    # Africa
    EGYPT = "Egypt"
    KENYA = "Kenya"
    NIGERIA = "Nigeria"
    SOUTH_AFRICA = "South Africa"
    # Middle East
    ISRAEL = "Israel"
    SAUDI_ARABIA = "Saudi Arabia"
    UNITED_ARAB_EMIRATES = "United Arab Emirates"

    OTHER = "Other"

    @classmethod
    def parse(cls, name: str | None) -> "Country":
        """Parse a country from its display or enum name; unknown names map to OTHER."""
        if not name or not name.strip():
            return cls.OTHER
        key = re.sub(r"[\s_]", "", name).lower()
        for country in cls:
            if key in (country.name.replace("_", "").lower(), country.value.replace(" ", "").lower()):
                return country
        return cls.OTHER


def _require_text(value: Any, label: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{label} is required.")
    return str(value).strip()


class SupplierData(BaseModel):
    """Validated, normalised supplier fields.

    Every field validator raises a plain ``ValueError`` with a user-facing
    message; ``from_input`` collects them into a single ``ValidationFailed``.
    """

    legal_name: str
    commercial_name: str
    tax_id: str
    phone_number: str
    email: str
    website: str | None = None
    physical_address: str
    country: Country
    annual_revenue: float

    @field_validator("legal_name", "commercial_name", mode="before")
    @classmethod
    def _company_name(cls, value: Any, info) -> str:
        label = "Legal name" if info.field_name == "legal_name" else "Commercial name"
        value = _require_text(value, label)
        if len(value) < 2:
            raise ValueError(f"{label} must be at least 2 characters.")
        if len(value) > 200:
            raise ValueError(f"{label} cannot exceed 200 characters.")
        return value

    @field_validator("tax_id", mode="before")
    @classmethod
    def _tax_id(cls, value: Any) -> str:
        digits = "".join(ch for ch in _require_text(value, "Tax ID") if ch.isdigit())
        if len(digits) != 11:
            raise ValueError("Tax ID must be exactly 11 digits.")
        return digits

    @field_validator("phone_number", mode="before")
    @classmethod
    def _phone_number(cls, value: Any) -> str:
        cleaned = "".join(
            ch for ch in _require_text(value, "Phone number") if ch.isdigit() or ch == "+"
        )
        if not cleaned:
            raise ValueError("Phone number must contain digits.")
        if not 7 <= len(cleaned) <= 20:
            raise ValueError("Phone number must be between 7 and 20 characters.")
        if not PHONE_PATTERN.match(cleaned):
            raise ValueError("Invalid phone number format.")
        return cleaned

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: Any) -> str:
        value = _require_text(value, "Email").lower()
        if len(value) > 100:
            raise ValueError("Email cannot exceed 100 characters.")
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email format.")
        return value

    @field_validator("website", mode="before")
    @classmethod
    def _website(cls, value: Any) -> str | None:
        if value is None or not str(value).strip():
            return None
        value = str(value).strip()
        if not value.lower().startswith(("http://", "https://")):
            value = f"https://{value}"
        if len(value) > 255:
            raise ValueError("Website URL cannot exceed 255 characters.")
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Invalid website URL format.")
        return value

    @field_validator("physical_address", mode="before")
    @classmethod
    def _physical_address(cls, value: Any) -> str:
        value = _require_text(value, "Physical address")
        if len(value) < 5:
            raise ValueError("Address must be at least 5 characters.")
        if len(value) > 500:
            raise ValueError("Address cannot exceed 500 characters.")
        return value

    @field_validator("country", mode="before")
    @classmethod
    def _country(cls, value: Any) -> Country:
        if isinstance(value, Country):
            return value
        return Country.parse(_require_text(value, "Country"))

    @field_validator("annual_revenue", mode="before")
    @classmethod
    def _annual_revenue(cls, value: Any) -> float:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("Annual revenue is required.")
        try:
            amount = float(value)
        except (TypeError, ValueError):
            raise ValueError("Annual revenue must be a number.") from None
        if not math.isfinite(amount):
            raise ValueError("Annual revenue must be a number.")
        if amount < 0:
            raise ValueError("Annual revenue cannot be negative.")
        if amount >= MAX_ANNUAL_REVENUE:
            raise ValueError("Annual revenue exceeds maximum allowed value.")
        return round(amount, 2)

    @classmethod
    def from_input(cls, **fields: Any) -> "SupplierData":
        """Validate raw input, raising ``ValidationFailed`` with every violation."""
        try:
            return cls(**fields)
        except ValidationError as exc:
            raise ValidationFailed(_group_errors(exc)) from exc


def _group_errors(exc: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "__root__"
        message = error["msg"].removeprefix("Value error, ")
        if error["type"] == "missing":
            message = f"{field.replace('_', ' ').capitalize()} is required."
        errors.setdefault(field, []).append(message)
    return errors


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Supplier(SupplierData):
    """Supplier aggregate as stored."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: datetime = Field(default_factory=utcnow)
    last_modified_at: datetime | None = None

    @property
    def screening_name(self) -> str:
        """Name searched against high-risk lists."""
        return self.legal_name

    @property
    def is_high_revenue(self) -> bool:
        return self.annual_revenue > HIGH_REVENUE_THRESHOLD

    @property
    def last_activity(self) -> datetime:
        return self.last_modified_at or self.created_at

    @classmethod
    def create(cls, data: SupplierData) -> "Supplier":
        return cls(**data.model_dump())

    def apply(self, data: SupplierData) -> "Supplier":
        """Return a copy with ``data`` applied and the modification time bumped."""
        return self.model_copy(update={**data.model_dump(), "last_modified_at": utcnow()})


# ============================================================================
# Querying
# ============================================================================


class SupplierSortField(str, Enum):
    """Fields a supplier listing can be ordered by."""

    LEGAL_NAME = "legal_name"
    COMMERCIAL_NAME = "commercial_name"
    TAX_ID = "tax_id"
    COUNTRY = "country"
    ANNUAL_REVENUE = "annual_revenue"
    CREATED_AT = "created_at"
    LAST_MODIFIED_AT = "last_modified_at"

    @classmethod
    def parse(cls, name: str | None) -> "SupplierSortField | None":
        """Case-insensitive lookup accepting ``legal_name``, ``LegalName`` or ``legalName``."""
        if not name:
            return None
        key = name.replace("_", "").lower()
        for field in cls:
            if field.value.replace("_", "") == key:
                return field
        return None

    def sort_key(self, supplier: Supplier) -> Any:
        if self is SupplierSortField.COUNTRY:
            return supplier.country.value
        if self is SupplierSortField.LAST_MODIFIED_AT:
            return supplier.last_activity
        value = getattr(supplier, self.value)
        return value.lower() if isinstance(value, str) else value


class SupplierQuery(BaseModel):
    """Filter, sort and paging options for supplier listings.

    Values are validated by the supplier service so that every violation is
    reported at once.
    """

    search_term: str | None = None
    country: str | None = None
    min_revenue: float | None = None
    max_revenue: float | None = None
    order_by: str = SupplierSortField.LAST_MODIFIED_AT.value
    ascending: bool = False
    page_number: int = 1
    page_size: int = 10

    @property
    def sort_field(self) -> SupplierSortField:
        return SupplierSortField.parse(self.order_by) or SupplierSortField.LAST_MODIFIED_AT

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size

    def matches(self, supplier: Supplier) -> bool:
        """In-memory filter: case-insensitive substring over name, tax id and email."""
        if self.search_term:
            term = self.search_term.strip().lower()
            haystack = (
                supplier.legal_name,
                supplier.commercial_name,
                supplier.tax_id,
                supplier.email,
            )
            if not any(term in value.lower() for value in haystack):
                return False
        if self.country and supplier.country is not Country.parse(self.country):
            return False
        if self.min_revenue is not None and supplier.annual_revenue < self.min_revenue:
            return False
        if self.max_revenue is not None and supplier.annual_revenue > self.max_revenue:
            return False
        return True


class PaginatedList(BaseModel, Generic[T]):
    """One page of results plus paging metadata."""

    items: list[T]
    page_number: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages
