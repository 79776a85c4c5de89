"""Tables for the entities attestations are raised against."""

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from waltz.db.base import Base, TimestampMixin
from waltz.models.enums import EntityLifecycleStatus


class ApplicationRow(Base, TimestampMixin):
    __tablename__ = "application"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    asset_code: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(String(4000), nullable=True)
    entity_lifecycle_status: Mapped[str] = mapped_column(
        String(64), nullable=False, default=EntityLifecycleStatus.ACTIVE.value
    )
    is_removed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class MeasurableCategoryRow(Base):
    __tablename__ = "measurable_category"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(4000), nullable=True)


class MeasurableRow(Base):
    __tablename__ = "measurable"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    measurable_category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("measurable_category.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class ChangeInitiativeRow(Base):
    __tablename__ = "change_initiative"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(4000), nullable=True)
