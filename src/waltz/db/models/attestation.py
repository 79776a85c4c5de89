"""Attestation tables."""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from waltz.db.base import Base


class AttestationRunRow(Base):
    __tablename__ = "attestation_run"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(4000), nullable=True)
    attested_entity_kind: Mapped[str] = mapped_column(String(64), nullable=False)
    attested_entity_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    issued_by: Mapped[str] = mapped_column(String(255), nullable=False)
    issued_on: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)


class AttestationInstanceRow(Base):
    __tablename__ = "attestation_instance"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    attestation_run_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("attestation_run.id"), nullable=False, index=True
    )
    parent_entity_kind: Mapped[str] = mapped_column(String(64), nullable=False)
    parent_entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    attested_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    attested_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    attested_entity_kind: Mapped[str] = mapped_column(String(64), nullable=False)


class AttestationInstanceRecipientRow(Base):
    __tablename__ = "attestation_instance_recipient"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    attestation_instance_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("attestation_instance.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
