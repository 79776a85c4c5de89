"""Attestation run API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from waltz.db.models.attestation import AttestationRunRow
from waltz.dependencies import RequireAttestationAdmin, get_current_user, get_db
from waltz.errors.exceptions import NotFoundError
from waltz.models.attestation import AttestationRun, AttestationRunCreateCommand
from waltz.models.common import mk_ref
from waltz.models.enums import EntityKind
from waltz.repositories.attestation_run_repo import AttestationRunRepository
from waltz.services import attestation_run_service

router = APIRouter(prefix="/attestation-runs", tags=["Attestations"])


def _to_run(row: AttestationRunRow) -> AttestationRun:
    return AttestationRun(
        id=row.id,
        name=row.name,
        description=row.description,
        attested_entity_kind=EntityKind(row.attested_entity_kind),
        attested_entity_id=row.attested_entity_id,
        issued_by=row.issued_by,
        issued_on=row.issued_on,
        due_date=row.due_date,
    )


@router.post("", status_code=201, dependencies=[RequireAttestationAdmin])
async def create_run(
    command: AttestationRunCreateCommand,
    db: AsyncSession = Depends(get_db),
    user: dict = Depends(get_current_user),
) -> AttestationRun:
    run = await attestation_run_service.create(db, user["sub"], command)
    await db.commit()
    return _to_run(run)


@router.get("")
async def list_runs(db: AsyncSession = Depends(get_db)) -> list[AttestationRun]:
    return [_to_run(r) for r in await AttestationRunRepository(db).list_all()]


@router.get("/entity/{kind}/{entity_id}")
async def find_runs_by_entity(
    kind: EntityKind,
    entity_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[AttestationRun]:
    runs = await AttestationRunRepository(db).find_by_parent_entity(mk_ref(kind, entity_id))
    return [_to_run(r) for r in runs]


@router.get("/{run_id}")
async def get_run(run_id: int, db: AsyncSession = Depends(get_db)) -> AttestationRun:
    run = await AttestationRunRepository(db).get(run_id)
    if run is None:
        raise NotFoundError("Attestation run", run_id)
    return _to_run(run)
