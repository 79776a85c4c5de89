"""Inline select fields resolving an entity's name from its (kind, id) pair.

Tables that hold attestable entities store the parent as two loose columns
rather than a foreign key, so the display name has to be looked up per kind.
:func:`mk_name_field` turns that into a single ``CASE`` expression of
correlated scalar subselects which can be added to any select.
"""

from collections.abc import Iterable

from sqlalchemy import ColumnElement, case, null, select
from sqlalchemy.orm import aliased

from waltz.db.models.attestation import AttestationRunRow
from waltz.db.models.entity import (
    ApplicationRow,
    ChangeInitiativeRow,
    MeasurableCategoryRow,
    MeasurableRow,
)
from waltz.models.enums import EntityKind

# kind -> ORM class exposing ``id`` and ``name``
_NAME_TABLES = {
    EntityKind.APPLICATION: ApplicationRow,
    EntityKind.ATTESTATION_RUN: AttestationRunRow,
    EntityKind.CHANGE_INITIATIVE: ChangeInitiativeRow,
    EntityKind.MEASURABLE: MeasurableRow,
    EntityKind.MEASURABLE_CATEGORY: MeasurableCategoryRow,
}


def mk_name_field(id_column, kind_column, kinds: Iterable[EntityKind]) -> ColumnElement:
    """Build a CASE expression yielding the name of the referenced entity.

    Kinds without a name table are skipped and resolve to NULL.
    """
    whens = []
    for kind in kinds:
        kind = EntityKind(kind)
        model = _NAME_TABLES.get(kind)
        if model is None:
            continue
        table = aliased(model)
        name_lookup = (
            select(table.name)
            .where(table.id == id_column)
            .correlate_except(table)
            .scalar_subquery()
        )
        whens.append((kind_column == kind.value, name_lookup))

    if not whens:
        return null()
    return case(*whens, else_=null())
