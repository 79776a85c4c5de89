"""Attestation run creation."""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from waltz.db.models.attestation import AttestationRunRow
from waltz.errors.exceptions import ConflictError
from waltz.models.attestation import (
    AttestationInstance,
    AttestationRunCreateCommand,
    AttestationTarget,
    AttestEntityCommand,
)
from waltz.repositories.attestation_instance_recipient_repo import AttestationInstanceRecipientRepository
from waltz.repositories.attestation_instance_repo import AttestationInstanceRepository
from waltz.repositories.attestation_run_repo import AttestationRunRepository

logger = logging.getLogger(__name__)


def _ad_hoc_run_name(command: AttestEntityCommand) -> str:
    return f"{command.attested_entity_kind.value.replace('_', ' ').title()} Attestation"


async def create(session: AsyncSession, user_id: str, command: AttestationRunCreateCommand) -> AttestationRunRow:
    """Store a run and raise one instance, with recipients, per target.

    Flushes but does not commit; the caller owns the transaction.
    """
    seen = set()
    for target in command.targets:
        key = (target.entity_reference.kind, target.entity_reference.id)
        if key in seen:
            raise ConflictError(
                f"Run targets {key[0].value} {key[1]} more than once"
            )
        seen.add(key)

    run = await AttestationRunRepository(session).create(
        name=command.name,
        description=command.description,
        attested_entity_kind=command.attested_entity_kind.value,
        attested_entity_id=command.attested_entity_id,
        issued_by=user_id,
        issued_on=date.today(),
        due_date=command.due_date,
    )

    instance_repo = AttestationInstanceRepository(session)
    recipient_repo = AttestationInstanceRecipientRepository(session)
    for target in command.targets:
        instance_id = await instance_repo.create(
            AttestationInstance(
                attestation_run_id=run.id,
                parent_entity=target.entity_reference,
                attested_entity_kind=command.attested_entity_kind,
            )
        )
        for recipient in sorted(set(target.recipients)):
            await recipient_repo.create(attestation_instance_id=instance_id, user_id=recipient)

    logger.info(
        "Attestation run created",
        extra={"run_id": run.id, "targets": len(command.targets), "issued_by": user_id},
    )
    return run


async def create_run_for_entity(session: AsyncSession, user_id: str, command: AttestEntityCommand) -> AttestationRunRow:
    """Raise an ad-hoc run for a single entity, with the user as its only recipient."""
    run_command = AttestationRunCreateCommand(
        name=_ad_hoc_run_name(command),
        description=f"Ad-hoc attestation raised by {user_id}",
        attested_entity_kind=command.attested_entity_kind,
        attested_entity_id=command.attested_entity_id,
        due_date=date.today(),
        targets=[AttestationTarget(entity_reference=command.entity_reference, recipients=[user_id])],
    )
    return await create(session, user_id, run_command)
