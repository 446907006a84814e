"""Base model for all domain records."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from authrepo.domain.value.common import as_utc


class DomainModel(BaseModel):
    """Base class for all domain records.

    Records are immutable; changes produce a new instance via
    ``model_copy(update=...)``. Datetime fields always hold aware UTC
    values, so records read from either store compare the same way.
    """

    model_config = ConfigDict(
        frozen=True,  # All domain models are immutable
        arbitrary_types_allowed=True,  # Allow custom value objects
    )

    @field_validator("*", mode="after")
    @classmethod
    def _datetimes_as_utc(cls, value: Any) -> Any:
        return as_utc(value)


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)
