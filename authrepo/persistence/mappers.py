"""Mappers for converting between database rows and domain records.

Table columns carry the record field names, so mapping is by name. Domain
records are immutable pydantic models, so rows are validated into new
instances rather than mapped with the ORM.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from sqlalchemy import Table

from authrepo.domain.repository.store import T


def record_to_row(record: BaseModel, table: Table) -> dict[str, Any]:
    """Convert a domain record to a dict of column values.

    Args:
        record: Domain record
        table: Target table

    Returns:
        Dict suitable for insertion/update
    """
    data = record.model_dump()
    return {column.name: data.get(column.name) for column in table.columns}


def row_to_record(model: type[T], row: Mapping[str, Any]) -> T:
    """Convert a database row to a domain record.

    Args:
        model: Record type
        row: Database row mapping

    Returns:
        Domain record
    """
    return model.model_validate(dict(row))
