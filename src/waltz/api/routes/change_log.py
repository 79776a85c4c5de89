"""Change log API routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from waltz.dependencies import get_db
from waltz.models.common import mk_ref
from waltz.models.enums import EntityKind
from waltz.repositories.change_log_repo import ChangeLogRepository

router = APIRouter(tags=["ChangeLog"])


@router.get("/change-log/{kind}/{entity_id}")
async def find_change_log(
    kind: EntityKind,
    entity_id: int,
    limit: int | None = Query(None, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    entries = await ChangeLogRepository(db).find_by_parent(mk_ref(kind, entity_id), limit=limit)
    return [
        {
            "id": e.id,
            "parent_kind": e.parent_kind,
            "parent_id": e.parent_id,
            "child_kind": e.child_kind,
            "operation": e.operation,
            "message": e.message,
            "user_id": e.user_id,
            "severity": e.severity,
            "created_at": e.created_at.isoformat() if e.created_at else None,
        }
        for e in entries
    ]
