"""Screening request/response models.

Upstream payloads are camelCase; models accept either spelling and serialise
with aliases when talking to the screening API.
"""

from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ScreeningSource(IntEnum):
    """High-risk lists the screening API can search."""

    OFFSHORE_LEAKS = 1
    WORLD_BANK = 2
    OFAC = 3

    @property
    def display_name(self) -> str:
        return _SOURCE_NAMES[self]

    @classmethod
    def describe_all(cls) -> str:
        """Human-readable list used in validation messages."""
        return ", ".join(f"{source.value} ({source.display_name})" for source in cls)


_SOURCE_NAMES = {
    ScreeningSource.OFFSHORE_LEAKS: "OffshoreLeaks",
    ScreeningSource.WORLD_BANK: "WorldBank",
    ScreeningSource.OFAC: "OFAC",
}


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Screening API payloads
# ============================================================================


class ScreeningRequest(_CamelModel):
    """Body of ``POST /api/screening/screen``."""

    entity_name: str
    sources: list[int]


class ScreeningHit(_CamelModel):
    """A single match returned by a screening source."""

    entity_name: str
    source: str
    attributes: dict[str, str] = Field(default_factory=dict)
    match_score: float | None = Field(None, ge=0, le=100)


class ScreeningResult(_CamelModel):
    """Successful screening API response."""

    searched_entity: str
    total_hits: int = Field(..., ge=0)
    hits: list[ScreeningHit] = Field(default_factory=list)
    searched_at: datetime
    execution_time_seconds: float = 0.0
    errors: list[str] | None = None

    @property
    def is_high_risk(self) -> bool:
        return self.total_hits > 0


class ScreeningErrorDetail(_CamelModel):
    """One entry of the ``errors`` array in an error body."""

    field: str | None = None
    message: str = ""
    retry_after: int | None = None


class ScreeningErrorResponse(_CamelModel):
    """Structured error body returned by the screening API."""

    status: int | None = None
    message: str = ""
    errors: list[ScreeningErrorDetail] | None = None
    timestamp: datetime | None = None

    def retry_after_seconds(self) -> int | None:
        """First ``retryAfter`` hint carried by the error details."""
        for detail in self.errors or []:
            if detail.retry_after is not None:
                return detail.retry_after
        return None


# ============================================================================
# Caller-facing view
# ============================================================================


class ScreeningResultView(BaseModel):
    """Screening outcome for a supplier, annotated with the risk verdict."""

    supplier_id: str
    supplier_name: str
    searched_entity: str
    total_hits: int
    hits: list[ScreeningHit] = Field(default_factory=list)
    searched_at: datetime
    execution_time_seconds: float
    errors: list[str] | None = None
    is_high_risk: bool

    @classmethod
    def from_result(
        cls, supplier_id: str, supplier_name: str, result: ScreeningResult
    ) -> "ScreeningResultView":
        return cls(
            supplier_id=supplier_id,
            supplier_name=supplier_name,
            searched_entity=result.searched_entity,
            total_hits=result.total_hits,
            hits=list(result.hits),
            searched_at=result.searched_at,
            execution_time_seconds=result.execution_time_seconds,
            errors=result.errors,
            is_high_risk=result.is_high_risk,
        )
