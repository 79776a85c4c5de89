"""Change log repository."""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from waltz.db.models.change_log import ChangeLogRow
from waltz.models.common import EntityReference
from waltz.models.enums import EntityKind, Operation
from waltz.repositories.base import BaseRepository


class ChangeLogRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ChangeLogRow)

    async def write(
        self,
        parent: EntityReference,
        operation: Operation,
        message: str,
        user_id: str,
        child_kind: EntityKind | None = None,
    ) -> ChangeLogRow:
        return await self.create(
            parent_kind=parent.kind.value,
            parent_id=parent.id,
            child_kind=child_kind.value if child_kind else None,
            operation=operation.value,
            message=message,
            user_id=user_id,
            created_at=datetime.now(timezone.utc),
        )

    async def find_by_parent(self, parent: EntityReference, limit: int | None = None) -> list[ChangeLogRow]:
        stmt = (
            select(ChangeLogRow)
            .where(
                ChangeLogRow.parent_kind == parent.kind.value,
                ChangeLogRow.parent_id == parent.id,
            )
            .order_by(ChangeLogRow.created_at.desc(), ChangeLogRow.id.desc())
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
