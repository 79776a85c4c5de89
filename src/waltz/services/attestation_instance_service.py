"""Attestation instance workflow: attesting and housekeeping."""

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from waltz.errors.exceptions import AuthorizationError, NotFoundError
from waltz.models.attestation import AttestEntityCommand
from waltz.models.enums import EntityKind, Operation
from waltz.repositories.attestation_instance_recipient_repo import AttestationInstanceRecipientRepository
from waltz.repositories.attestation_instance_repo import AttestationInstanceRepository
from waltz.repositories.change_log_repo import ChangeLogRepository
from waltz.services import attestation_run_service

logger = logging.getLogger(__name__)


async def attest_instance(session: AsyncSession, instance_id: int, user_id: str) -> bool:
    """Attest a single instance on behalf of one of its recipients.

    Returns False when the instance had already been attested.
    """
    instance_repo = AttestationInstanceRepository(session)
    instance = await instance_repo.get_by_id(instance_id)
    if instance is None:
        raise NotFoundError("Attestation instance", instance_id)

    if not await AttestationInstanceRecipientRepository(session).is_recipient(instance_id, user_id):
        raise AuthorizationError(f"User '{user_id}' is not a recipient of attestation {instance_id}")

    attested = await instance_repo.attest_instance(instance_id, user_id, datetime.now(timezone.utc))
    if attested:
        kind_label = instance.attested_entity_kind.value.replace("_", " ").lower()
        await ChangeLogRepository(session).write(
            parent=instance.parent_entity,
            operation=Operation.ATTEST,
            message=f"Attestation of {kind_label} (run {instance.attestation_run_id})",
            user_id=user_id,
            child_kind=EntityKind.ATTESTATION,
        )
        logger.info("Attestation instance attested", extra={"instance_id": instance_id, "user_id": user_id})
    else:
        logger.info("Attestation instance already attested", extra={"instance_id": instance_id})
    return attested


async def attest_for_entity(session: AsyncSession, user_id: str, command: AttestEntityCommand) -> bool:
    """Attest every pending instance the user holds for an entity.

    When the user has nothing pending, an ad-hoc run is raised for the entity
    and its single instance is attested immediately.
    """
    instance_repo = AttestationInstanceRepository(session)
    pending = await instance_repo.find_for_entity_by_recipient(command, user_id, unattested_only=True)

    if not pending:
        run = await attestation_run_service.create_run_for_entity(session, user_id, command)
        pending = await instance_repo.find_by_run_id(run.id)

    results = [await attest_instance(session, instance.id, user_id) for instance in pending]
    return all(results)


async def cleanup_orphans(session: AsyncSession) -> int:
    removed = await AttestationInstanceRepository(session).cleanup_orphans()
    logger.info("Removed orphan attestation instances", extra={"count": removed})
    return removed
