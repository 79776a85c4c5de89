"""Routes for the entities attestations are raised against."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from waltz.db.models.entity import ApplicationRow
from waltz.dependencies import get_current_user, get_db
from waltz.errors.exceptions import NotFoundError
from waltz.models.entity import ApplicationCreate, ApplicationUpdate, NamedEntityCreate
from waltz.models.enums import EntityKind, EntityLifecycleStatus, Operation
from waltz.models.common import mk_ref
from waltz.repositories.change_log_repo import ChangeLogRepository
from waltz.repositories.entity_repo import (
    ApplicationRepository,
    ChangeInitiativeRepository,
    MeasurableCategoryRepository,
)

router = APIRouter(tags=["Entities"])


def _app_dict(app: ApplicationRow) -> dict:
    return {
        "id": app.id,
        "kind": EntityKind.APPLICATION.value,
        "name": app.name,
        "asset_code": app.asset_code,
        "description": app.description,
        "entity_lifecycle_status": app.entity_lifecycle_status,
        "is_removed": app.is_removed,
    }


@router.post("/applications", status_code=201)
async def create_application(
    body: ApplicationCreate,
    db: AsyncSession = Depends(get_db),
    user: dict = Depends(get_current_user),
) -> dict:
    app = await ApplicationRepository(db).create(
        name=body.name,
        asset_code=body.asset_code,
        description=body.description,
        entity_lifecycle_status=EntityLifecycleStatus.ACTIVE.value,
        is_removed=False,
    )
    await ChangeLogRepository(db).write(
        parent=mk_ref(EntityKind.APPLICATION, app.id),
        operation=Operation.ADD,
        message=f"Application '{app.name}' created",
        user_id=user["sub"],
    )
    await db.commit()
    return _app_dict(app)


@router.get("/applications/{app_id}")
async def get_application(app_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    app = await ApplicationRepository(db).get(app_id)
    if app is None:
        raise NotFoundError("Application", app_id)
    return _app_dict(app)


@router.patch("/applications/{app_id}")
async def update_application(
    app_id: int,
    body: ApplicationUpdate,
    db: AsyncSession = Depends(get_db),
    user: dict = Depends(get_current_user),
) -> dict:
    repo = ApplicationRepository(db)
    app = await repo.get(app_id)
    if app is None:
        raise NotFoundError("Application", app_id)

    changes = body.model_dump(exclude_none=True)
    if changes:
        await repo.update(app, **changes)
        await ChangeLogRepository(db).write(
            parent=mk_ref(EntityKind.APPLICATION, app.id),
            operation=Operation.UPDATE,
            message=f"Application updated: {', '.join(sorted(changes))}",
            user_id=user["sub"],
        )
        await db.commit()
    return _app_dict(app)


@router.post("/measurable-categories", status_code=201)
async def create_measurable_category(
    body: NamedEntityCreate,
    db: AsyncSession = Depends(get_db),
    user: dict = Depends(get_current_user),
) -> dict:
    category = await MeasurableCategoryRepository(db).create(name=body.name, description=body.description)
    await db.commit()
    return {
        "id": category.id,
        "kind": EntityKind.MEASURABLE_CATEGORY.value,
        "name": category.name,
        "description": category.description,
    }


@router.post("/change-initiatives", status_code=201)
async def create_change_initiative(
    body: NamedEntityCreate,
    db: AsyncSession = Depends(get_db),
    user: dict = Depends(get_current_user),
) -> dict:
    initiative = await ChangeInitiativeRepository(db).create(name=body.name, description=body.description)
    await db.commit()
    return {
        "id": initiative.id,
        "kind": EntityKind.CHANGE_INITIATIVE.value,
        "name": initiative.name,
        "description": initiative.description,
    }
