"""Attestation run repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from waltz.db.models.attestation import AttestationInstanceRow, AttestationRunRow
from waltz.models.common import EntityReference
from waltz.repositories.base import BaseRepository


class AttestationRunRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, AttestationRunRow)

    async def find_by_parent_entity(self, ref: EntityReference) -> list[AttestationRunRow]:
        """Runs with at least one instance raised against the given entity."""
        stmt = (
            select(AttestationRunRow)
            .where(
                AttestationRunRow.id.in_(
                    select(AttestationInstanceRow.attestation_run_id).where(
                        AttestationInstanceRow.parent_entity_kind == ref.kind.value,
                        AttestationInstanceRow.parent_entity_id == ref.id,
                    )
                )
            )
            .order_by(AttestationRunRow.issued_on.desc(), AttestationRunRow.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
