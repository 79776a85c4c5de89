"""Pydantic models for the entities that attestations hang off."""

from pydantic import BaseModel, ConfigDict, Field

from waltz.models.enums import EntityLifecycleStatus


class ApplicationCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=255)
    asset_code: str | None = None
    description: str | None = None


class ApplicationUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    entity_lifecycle_status: EntityLifecycleStatus | None = None
    is_removed: bool | None = None


class NamedEntityCreate(BaseModel):
    """Create payload for measurable categories and change initiatives."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
