"""Attestation instance API routes."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from waltz.dependencies import RequireAdmin, get_current_user, get_db
from waltz.errors.exceptions import NotFoundError
from waltz.models.attestation import (
    AttestationInstance,
    AttestEntityCommand,
    IdSelectionOptions,
    LatestMeasurableAttestationInfo,
)
from waltz.models.common import mk_ref
from waltz.models.enums import EntityKind
from waltz.repositories.attestation_instance_recipient_repo import AttestationInstanceRecipientRepository
from waltz.repositories.attestation_instance_repo import AttestationInstanceRepository
from waltz.services import attestation_instance_service
from waltz.services.selectors import attestation_instance_id_selector

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attestation-instances", tags=["Attestations"])


@router.post("/attest/{instance_id}")
async def attest_instance(
    instance_id: int,
    db: AsyncSession = Depends(get_db),
    user: dict = Depends(get_current_user),
) -> bool:
    attested = await attestation_instance_service.attest_instance(db, instance_id, user["sub"])
    await db.commit()
    return attested


@router.post("/attest-entity")
async def attest_entity(
    command: AttestEntityCommand,
    db: AsyncSession = Depends(get_db),
    user: dict = Depends(get_current_user),
) -> bool:
    attested = await attestation_instance_service.attest_for_entity(db, user["sub"], command)
    await db.commit()
    return attested


@router.get("/entity/{kind}/{entity_id}")
async def find_by_entity(
    kind: EntityKind,
    entity_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[AttestationInstance]:
    return await AttestationInstanceRepository(db).find_by_entity_reference(mk_ref(kind, entity_id))


@router.get("/user")
async def find_for_current_user(
    unattested_only: bool = True,
    db: AsyncSession = Depends(get_db),
    user: dict = Depends(get_current_user),
) -> list[AttestationInstance]:
    return await AttestationInstanceRepository(db).find_by_recipient(user["sub"], unattested_only)


@router.get("/historical/user")
async def find_historical_for_current_user(
    db: AsyncSession = Depends(get_db),
    user: dict = Depends(get_current_user),
) -> list[AttestationInstance]:
    return await AttestationInstanceRepository(db).find_historical_for_pending_by_user_id(user["sub"])


@router.get("/run/{run_id}")
async def find_by_run(
    run_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[AttestationInstance]:
    return await AttestationInstanceRepository(db).find_by_run_id(run_id)


@router.post("/selector")
async def find_by_selector(
    options: IdSelectionOptions,
    db: AsyncSession = Depends(get_db),
) -> list[AttestationInstance]:
    selector = attestation_instance_id_selector(options)
    return await AttestationInstanceRepository(db).find_by_id_selector(selector)


@router.get("/latest/measurable-category/{kind}/{entity_id}")
async def find_latest_measurable_attestations(
    kind: EntityKind,
    entity_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[LatestMeasurableAttestationInfo]:
    infos = await AttestationInstanceRepository(db).find_latest_measurable_attestations(mk_ref(kind, entity_id))
    return sorted(infos, key=lambda i: i.category_ref.name or "")


@router.post("/cleanup-orphans", dependencies=[RequireAdmin])
async def cleanup_orphans(db: AsyncSession = Depends(get_db)) -> int:
    removed = await attestation_instance_service.cleanup_orphans(db)
    await db.commit()
    return removed


@router.get("/{instance_id}")
async def get_instance(
    instance_id: int,
    db: AsyncSession = Depends(get_db),
) -> AttestationInstance:
    instance = await AttestationInstanceRepository(db).get_by_id(instance_id)
    if instance is None:
        raise NotFoundError("Attestation instance", instance_id)
    return instance


@router.get("/{instance_id}/recipients")
async def find_recipients(
    instance_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[str]:
    if await AttestationInstanceRepository(db).get_by_id(instance_id) is None:
        raise NotFoundError("Attestation instance", instance_id)
    return await AttestationInstanceRecipientRepository(db).find_user_ids_by_instance_id(instance_id)
