"""String enums shared by the API models and the persistence layer."""

from enum import StrEnum


class EntityKind(StrEnum):
    APPLICATION = "APPLICATION"
    ATTESTATION = "ATTESTATION"
    ATTESTATION_RUN = "ATTESTATION_RUN"
    CHANGE_INITIATIVE = "CHANGE_INITIATIVE"
    LOGICAL_DATA_FLOW = "LOGICAL_DATA_FLOW"
    MEASURABLE = "MEASURABLE"
    MEASURABLE_CATEGORY = "MEASURABLE_CATEGORY"
    PHYSICAL_FLOW = "PHYSICAL_FLOW"


class EntityLifecycleStatus(StrEnum):
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    REMOVED = "REMOVED"


class Operation(StrEnum):
    ADD = "ADD"
    ATTEST = "ATTEST"
    REMOVE = "REMOVE"
    UPDATE = "UPDATE"
