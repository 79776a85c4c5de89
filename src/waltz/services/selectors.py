"""Id selectors yielding attestation instance ids for a selection scope."""

from sqlalchemy import Select, select

from waltz.db.models.attestation import AttestationInstanceRow, AttestationRunRow
from waltz.errors.exceptions import ValidationError
from waltz.models.attestation import IdSelectionOptions
from waltz.models.enums import EntityKind

_PARENT_KINDS = {EntityKind.APPLICATION, EntityKind.CHANGE_INITIATIVE}


def attestation_instance_id_selector(options: IdSelectionOptions) -> Select:
    """Return a ``SELECT id`` over attestation instances in the given scope."""
    ref = options.entity_reference

    if ref.kind in _PARENT_KINDS:
        return select(AttestationInstanceRow.id).where(
            AttestationInstanceRow.parent_entity_kind == ref.kind.value,
            AttestationInstanceRow.parent_entity_id == ref.id,
        )

    if ref.kind == EntityKind.ATTESTATION_RUN:
        return select(AttestationInstanceRow.id).where(
            AttestationInstanceRow.attestation_run_id == ref.id
        )

    if ref.kind == EntityKind.MEASURABLE_CATEGORY:
        return (
            select(AttestationInstanceRow.id)
            .join(AttestationRunRow, AttestationRunRow.id == AttestationInstanceRow.attestation_run_id)
            .where(
                AttestationRunRow.attested_entity_kind == EntityKind.MEASURABLE_CATEGORY.value,
                AttestationRunRow.attested_entity_id == ref.id,
            )
        )

    raise ValidationError(f"Cannot select attestation instances for entity kind '{ref.kind}'")
