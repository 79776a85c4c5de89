"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from waltz.db.models.entity import (
    ApplicationRow,
    ChangeInitiativeRow,
    MeasurableCategoryRow,
    MeasurableRow,
)
from waltz.db.models.attestation import (
    AttestationInstanceRecipientRow,
    AttestationInstanceRow,
    AttestationRunRow,
)
from waltz.db.models.change_log import ChangeLogRow

__all__ = [
    "ApplicationRow",
    "ChangeInitiativeRow",
    "MeasurableCategoryRow",
    "MeasurableRow",
    "AttestationRunRow",
    "AttestationInstanceRow",
    "AttestationInstanceRecipientRow",
    "ChangeLogRow",
]
