"""Pydantic models for common definitions."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from waltz.models.enums import EntityKind


class EntityReference(BaseModel):
    """Pointer to any Waltz entity, optionally carrying its display name."""

    model_config = ConfigDict(frozen=True)

    kind: EntityKind
    id: int
    name: str | None = None
    description: str | None = None


def mk_ref(kind: EntityKind | str, entity_id: int, name: str | None = None, description: str | None = None) -> EntityReference:
    return EntityReference(kind=EntityKind(kind), id=entity_id, name=name, description=description)


class ErrorDetail(BaseModel):
    """Error detail in API responses."""

    model_config = ConfigDict(extra="forbid")

    code: str
    message: str
    details: dict[str, Any] | list[Any] | str | None = None
    trace_id: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response envelope."""

    model_config = ConfigDict(extra="forbid")

    schema_version: str = "1.0"
    error: ErrorDetail
