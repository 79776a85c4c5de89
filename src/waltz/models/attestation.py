"""Pydantic models for attestation runs and instances."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from waltz.models.common import EntityReference
from waltz.models.enums import EntityKind


class AttestationInstance(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | None = None
    attestation_run_id: int
    parent_entity: EntityReference
    attested_at: datetime | None = None
    attested_by: str | None = None
    attested_entity_kind: EntityKind
    attested_entity_id: int | None = None


class AttestEntityCommand(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entity_reference: EntityReference
    attested_entity_kind: EntityKind
    attested_entity_id: int | None = None


class LatestMeasurableAttestationInfo(BaseModel):
    """Most recent attestation of one measurable category for an entity."""

    model_config = ConfigDict(frozen=True)

    category_ref: EntityReference
    attestation_instance_ref: EntityReference
    attestation_run_ref: EntityReference
    issued_on: date
    due_date: date
    attested_at: datetime | None = None
    attested_by: str | None = None


class AttestationTarget(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entity_reference: EntityReference
    recipients: list[str] = Field(..., min_length=1)


class AttestationRunCreateCommand(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    attested_entity_kind: EntityKind
    attested_entity_id: int | None = None
    due_date: date
    targets: list[AttestationTarget] = Field(default_factory=list)


class AttestationRun(BaseModel):
    id: int
    name: str
    description: str | None = None
    attested_entity_kind: EntityKind
    attested_entity_id: int | None = None
    issued_by: str
    issued_on: date
    due_date: date


class IdSelectionOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entity_reference: EntityReference
