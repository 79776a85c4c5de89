"""Repositories for the entities attestations are raised against."""

from sqlalchemy.ext.asyncio import AsyncSession

from waltz.db.models.entity import ApplicationRow, ChangeInitiativeRow, MeasurableCategoryRow
from waltz.repositories.base import BaseRepository


class ApplicationRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ApplicationRow)


class MeasurableCategoryRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, MeasurableCategoryRow)


class ChangeInitiativeRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ChangeInitiativeRow)
