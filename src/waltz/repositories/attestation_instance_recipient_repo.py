"""Attestation instance recipient repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from waltz.db.models.attestation import AttestationInstanceRecipientRow
from waltz.repositories.base import BaseRepository


class AttestationInstanceRecipientRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, AttestationInstanceRecipientRow)

    async def find_user_ids_by_instance_id(self, instance_id: int) -> list[str]:
        stmt = (
            select(AttestationInstanceRecipientRow.user_id)
            .where(AttestationInstanceRecipientRow.attestation_instance_id == instance_id)
            .order_by(AttestationInstanceRecipientRow.user_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def is_recipient(self, instance_id: int, user_id: str) -> bool:
        stmt = select(AttestationInstanceRecipientRow.id).where(
            AttestationInstanceRecipientRow.attestation_instance_id == instance_id,
            AttestationInstanceRecipientRow.user_id == user_id,
        )
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None
