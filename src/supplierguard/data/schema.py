"""SQLAlchemy schema for supplier data."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Index, String
from sqlalchemy.orm import declarative_base

from supplierguard.models.supplier import Country, Supplier

Base = declarative_base()


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo; values are always written in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SupplierRecord(Base):
    """Supplier row."""

    __tablename__ = "suppliers"

    id = Column(String(36), primary_key=True)
    legal_name = Column(String(200), nullable=False, index=True)
    commercial_name = Column(String(200), nullable=False, index=True)
    tax_id = Column(String(11), unique=True, nullable=False)
    phone_number = Column(String(20), nullable=False)
    email = Column(String(100), nullable=False, index=True)
    website = Column(String(255))
    physical_address = Column(String(500), nullable=False)
    country = Column(String(50), nullable=False, index=True)
    annual_revenue = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_modified_at = Column(DateTime(timezone=True))

    __table_args__ = (Index("ix_suppliers_country_revenue", "country", "annual_revenue"),)

    @classmethod
    def from_domain(cls, supplier: Supplier) -> "SupplierRecord":
        record = cls(id=supplier.id)
        record.apply(supplier)
        return record

    def apply(self, supplier: Supplier) -> None:
        """Copy every mutable field from the domain model."""
        self.legal_name = supplier.legal_name
        self.commercial_name = supplier.commercial_name
        self.tax_id = supplier.tax_id
        self.phone_number = supplier.phone_number
        self.email = supplier.email
        self.website = supplier.website
        self.physical_address = supplier.physical_address
        self.country = supplier.country.name
        self.annual_revenue = supplier.annual_revenue
        self.created_at = supplier.created_at
        self.last_modified_at = supplier.last_modified_at

    def to_domain(self) -> Supplier:
        return Supplier(
            id=self.id,
            legal_name=self.legal_name,
            commercial_name=self.commercial_name,
            tax_id=self.tax_id,
            phone_number=self.phone_number,
            email=self.email,
            website=self.website,
            physical_address=self.physical_address,
            country=Country[self.country],
            annual_revenue=self.annual_revenue,
            created_at=_as_utc(self.created_at),
            last_modified_at=_as_utc(self.last_modified_at),
        )

    def __repr__(self) -> str:
        return f"<SupplierRecord(legal_name='{self.legal_name}', tax_id='{self.tax_id}')>"
