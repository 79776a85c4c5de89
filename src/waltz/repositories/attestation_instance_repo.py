"""Attestation instance repository.

Every instance query selects the instance columns together with the resolved
parent entity name and the attested entity id of the owning run, so callers
always receive fully populated :class:`AttestationInstance` models rather than
ORM rows.
"""

from datetime import datetime

from sqlalchemy import Select, and_, delete, func, or_, select, update
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from waltz.db.inline_select import mk_name_field
from waltz.db.models.attestation import (
    AttestationInstanceRecipientRow,
    AttestationInstanceRow,
    AttestationRunRow,
)
from waltz.db.models.entity import ApplicationRow, MeasurableCategoryRow
from waltz.models.attestation import (
    AttestationInstance,
    AttestEntityCommand,
    LatestMeasurableAttestationInfo,
)
from waltz.models.common import EntityReference, mk_ref
from waltz.models.enums import EntityKind, EntityLifecycleStatus

ENTITY_NAME_FIELD = mk_name_field(
    AttestationInstanceRow.parent_entity_id,
    AttestationInstanceRow.parent_entity_kind,
    list(EntityKind),
).label("entity_name")


def _to_domain(row: Row) -> AttestationInstance:
    instance, entity_name, attested_entity_id = row
    return AttestationInstance(
        id=instance.id,
        attestation_run_id=instance.attestation_run_id,
        parent_entity=mk_ref(instance.parent_entity_kind, instance.parent_entity_id, entity_name),
        attested_at=instance.attested_at,
        attested_by=instance.attested_by,
        attested_entity_kind=EntityKind(instance.attested_entity_kind),
        attested_entity_id=attested_entity_id,
    )


class AttestationInstanceRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _select_instances(self) -> Select:
        return (
            select(AttestationInstanceRow, ENTITY_NAME_FIELD, AttestationRunRow.attested_entity_id)
            .select_from(AttestationInstanceRow)
            .join(AttestationRunRow, AttestationRunRow.id == AttestationInstanceRow.attestation_run_id)
        )

    async def _fetch(self, stmt: Select) -> list[AttestationInstance]:
        result = await self.session.execute(stmt)
        return [_to_domain(row) for row in result.all()]

    async def get_by_id(self, instance_id: int) -> AttestationInstance | None:
        stmt = self._select_instances().where(AttestationInstanceRow.id == instance_id)
        result = await self.session.execute(stmt)
        row = result.one_or_none()
        return _to_domain(row) if row else None

    async def create(self, attestation_instance: AttestationInstance) -> int:
        if attestation_instance is None:
            raise ValueError("attestation_instance cannot be None")

        row = AttestationInstanceRow(
            attestation_run_id=attestation_instance.attestation_run_id,
            parent_entity_kind=attestation_instance.parent_entity.kind.value,
            parent_entity_id=attestation_instance.parent_entity.id,
            attested_entity_kind=attestation_instance.attested_entity_kind.value,
        )
        self.session.add(row)
        await self.session.flush()
        return row.id

    async def find_by_recipient(self, user_id: str, unattested_only: bool) -> list[AttestationInstance]:
        stmt = (
            self._select_instances()
            .join(
                AttestationInstanceRecipientRow,
                AttestationInstanceRecipientRow.attestation_instance_id == AttestationInstanceRow.id,
            )
            .where(AttestationInstanceRecipientRow.user_id == user_id)
        )
        if unattested_only:
            stmt = stmt.where(AttestationInstanceRow.attested_at.is_(None))
        return await self._fetch(stmt)

    async def find_historical_for_pending_by_user_id(self, user_id: str) -> list[AttestationInstance]:
        """Completed attestations for every parent entity the user still has pending."""
        pending_instance = aliased(AttestationInstanceRow)
        pending_parents = (
            select(pending_instance.parent_entity_kind, pending_instance.parent_entity_id)
            .distinct()
            .join(
                AttestationInstanceRecipientRow,
                AttestationInstanceRecipientRow.attestation_instance_id == pending_instance.id,
            )
            .where(
                AttestationInstanceRecipientRow.user_id == user_id,
                pending_instance.attested_at.is_(None),
            )
            .subquery("pending_parents")
        )

        stmt = (
            self._select_instances()
            .join(
                pending_parents,
                and_(
                    pending_parents.c.parent_entity_kind == AttestationInstanceRow.parent_entity_kind,
                    pending_parents.c.parent_entity_id == AttestationInstanceRow.parent_entity_id,
                ),
            )
            .where(AttestationInstanceRow.attested_at.is_not(None))
            .order_by(AttestationInstanceRow.attested_at.desc())
        )
        return await self._fetch(stmt)

    async def find_by_entity_reference(self, ref: EntityReference) -> list[AttestationInstance]:
        stmt = self._select_instances().where(
            AttestationInstanceRow.parent_entity_kind == ref.kind.value,
            AttestationInstanceRow.parent_entity_id == ref.id,
        )
        return await self._fetch(stmt)

    async def attest_instance(self, instance_id: int, attested_by: str, at: datetime) -> bool:
        """Mark an instance attested. Already-attested instances are left untouched."""
        stmt = (
            update(AttestationInstanceRow)
            .where(
                AttestationInstanceRow.id == instance_id,
                AttestationInstanceRow.attested_at.is_(None),
            )
            .values(attested_by=attested_by, attested_at=at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def find_by_run_id(self, run_id: int) -> list[AttestationInstance]:
        stmt = self._select_instances().where(AttestationInstanceRow.attestation_run_id == run_id)
        return await self._fetch(stmt)

    async def cleanup_orphans(self) -> int:
        """Delete unattested application attestations whose application is gone.

        Returns the number of instances removed.
        """
        orphan_ids_stmt = (
            select(AttestationInstanceRow.id)
            .distinct()
            .outerjoin(
                ApplicationRow,
                ApplicationRow.id == AttestationInstanceRow.parent_entity_id,
            )
            .where(
                AttestationInstanceRow.parent_entity_kind == EntityKind.APPLICATION.value,
                AttestationInstanceRow.attested_at.is_(None),
                or_(
                    ApplicationRow.id.is_(None),
                    ApplicationRow.entity_lifecycle_status == EntityLifecycleStatus.REMOVED.value,
                    ApplicationRow.is_removed.is_(True),
                ),
            )
        )
        orphan_ids = list((await self.session.execute(orphan_ids_stmt)).scalars().all())
        if not orphan_ids:
            return 0

        await self.session.execute(
            delete(AttestationInstanceRecipientRow)
            .where(AttestationInstanceRecipientRow.attestation_instance_id.in_(orphan_ids))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(
            delete(AttestationInstanceRow)
            .where(AttestationInstanceRow.id.in_(orphan_ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def find_for_entity_by_recipient(
        self,
        command: AttestEntityCommand,
        user_id: str,
        unattested_only: bool,
    ) -> list[AttestationInstance]:
        stmt = (
            self._select_instances()
            .join(
                AttestationInstanceRecipientRow,
                AttestationInstanceRecipientRow.attestation_instance_id == AttestationInstanceRow.id,
            )
            .where(
                AttestationInstanceRecipientRow.user_id == user_id,
                AttestationRunRow.attested_entity_kind == command.attested_entity_kind.value,
                # == None renders IS NULL for ad-hoc runs without a specific attested entity
                AttestationRunRow.attested_entity_id == command.attested_entity_id,
                AttestationInstanceRow.parent_entity_id == command.entity_reference.id,
                AttestationInstanceRow.parent_entity_kind == command.entity_reference.kind.value,
            )
        )
        if unattested_only:
            stmt = stmt.where(AttestationInstanceRow.attested_at.is_(None))
        return await self._fetch(stmt)

    async def find_by_id_selector(self, selector: Select) -> list[AttestationInstance]:
        """Attested instances whose id is produced by ``selector``."""
        stmt = self._select_instances().where(
            AttestationInstanceRow.id.in_(selector),
            AttestationInstanceRow.attested_at.is_not(None),
        )
        return await self._fetch(stmt)

    async def find_latest_measurable_attestations(
        self, ref: EntityReference
    ) -> set[LatestMeasurableAttestationInfo]:
        """Latest attestation per measurable category raised against ``ref``."""
        latest_attestation = (
            func.first_value(AttestationInstanceRow.id)
            .over(
                partition_by=AttestationRunRow.attested_entity_id,
                order_by=AttestationInstanceRow.attested_at.desc().nulls_last(),
            )
            .label("latest_attestation")
        )

        attestations_with_category = (
            select(
                latest_attestation,
                MeasurableCategoryRow.id.label("category_id"),
                MeasurableCategoryRow.name.label("category_name"),
                MeasurableCategoryRow.description.label("category_description"),
                AttestationInstanceRow.id.label("instance_id"),
                AttestationInstanceRow.attested_at,
                AttestationInstanceRow.attested_by,
                AttestationRunRow.id.label("run_id"),
                AttestationRunRow.name.label("run_name"),
                AttestationRunRow.issued_on,
                AttestationRunRow.due_date,
            )
            .select_from(AttestationInstanceRow)
            .join(AttestationRunRow, AttestationInstanceRow.attestation_run_id == AttestationRunRow.id)
            .join(
                MeasurableCategoryRow,
                and_(
                    AttestationRunRow.attested_entity_kind == EntityKind.MEASURABLE_CATEGORY.value,
                    AttestationRunRow.attested_entity_id == MeasurableCategoryRow.id,
                ),
            )
            .where(
                AttestationInstanceRow.parent_entity_id == ref.id,
                AttestationInstanceRow.parent_entity_kind == ref.kind.value,
            )
            .subquery("attestations_with_category")
        )

        stmt = select(attestations_with_category).where(
            attestations_with_category.c.latest_attestation == attestations_with_category.c.instance_id
        )
        result = await self.session.execute(stmt)

        return {
            LatestMeasurableAttestationInfo(
                category_ref=mk_ref(
                    EntityKind.MEASURABLE_CATEGORY,
                    r.category_id,
                    r.category_name,
                    r.category_description,
                ),
                attestation_instance_ref=mk_ref(EntityKind.ATTESTATION, r.instance_id),
                attestation_run_ref=mk_ref(EntityKind.ATTESTATION_RUN, r.run_id, r.run_name),
                issued_on=r.issued_on,
                due_date=r.due_date,
                attested_at=r.attested_at,
                attested_by=r.attested_by,
            )
            for r in result.all()
        }
