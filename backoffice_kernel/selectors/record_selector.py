"""
Module: backoffice_kernel.selectors.record_selector
Responsibility: Kind-generic, read-only lookups used to plan cascades:
    existence checks (optionally row-locked), id resolution by field
    criteria, and reading pointer columns off a set of rows.
Architecture position: Kernel > Selectors.  May import from models/ and
    selectors/base.py.

Invariants enforced:
    - Large id sets are split into IN (...) batches of at most
      ``batch_size`` bound parameters.
    - Criteria name mapped columns only; anything else is a ValueError,
      never a silently ignored filter.

Failure modes:
    - ValueError on unknown field names or more than one collection
      criterion in a single lookup.
    - SQLAlchemy errors propagate; the store layer translates them.
"""

from collections.abc import Collection, Iterator
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import InstrumentedAttribute, Session

from backoffice_kernel.db.base import Base
from backoffice_kernel.domain.record_ref import RecordKind, RecordRef
from backoffice_kernel.domain.record_store import RecordInfo
from backoffice_kernel.models import model_for
from backoffice_kernel.selectors.base import BaseSelector

DEFAULT_BATCH_SIZE = 500


def chunked(values: Collection[str], size: int) -> Iterator[list[str]]:
    """Yield ``values`` in sorted batches of at most ``size``."""
    ordered = sorted(values)
    for start in range(0, len(ordered), size):
        yield ordered[start:start + size]


def _is_collection(value: Any) -> bool:
    return isinstance(value, (set, frozenset, list, tuple))


def _column(model: type[Base], kind: RecordKind, field: str) -> InstrumentedAttribute:
    if field not in model.__table__.c:
        raise ValueError(f"{kind.value} has no field {field!r}")
    return getattr(model, field)


class RecordSelector(BaseSelector):
    """
    Read-only record lookups keyed by RecordKind.

    Contract:
        Returns ids and RecordInfo DTOs, never ORM instances.
    """

    def __init__(self, session: Session, batch_size: int = DEFAULT_BATCH_SIZE):
        super().__init__(session)
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.batch_size = batch_size

    def find_by_id(
        self, kind: RecordKind, record_id: str, *, for_update: bool = False
    ) -> RecordInfo | None:
        """
        Look up one record.

        Args:
            kind: Record kind to look in.
            record_id: Primary key.
            for_update: Lock the row (SELECT ... FOR UPDATE) until the
                current transaction ends.  Dialects without row locks
                ignore it.

        Returns:
            RecordInfo, or None when no such row exists.
        """
        model = model_for(kind)
        name_column = model.__table__.c.get("name")
        columns = [model.id] if name_column is None else [model.id, model.name]

        stmt = select(*columns).where(model.id == record_id)
        if for_update:
            stmt = stmt.with_for_update()

        row = self.session.execute(stmt).first()
        if row is None:
            return None
        name = row[1] if name_column is not None else None
        return RecordInfo(ref=RecordRef(kind, row[0]), name=name)

    def find_ids(self, kind: RecordKind, **criteria: Any) -> set[str]:
        """
        Ids of ``kind`` rows matching all criteria.

        A scalar value matches by equality, None by IS NULL, and a
        set/list/tuple by IN (batched).  At most one collection criterion
        is allowed per call.
        """
        model = model_for(kind)
        conditions = []
        batched: tuple[InstrumentedAttribute, list[str]] | None = None

        for field, value in criteria.items():
            column = _column(model, kind, field)
            if value is None:
                conditions.append(column.is_(None))
            elif _is_collection(value):
                if batched is not None:
                    raise ValueError(
                        f"find_ids({kind.value}) accepts one collection criterion, "
                        f"got {batched[0].key!r} and {field!r}"
                    )
                batched = (column, list(value))
            else:
                conditions.append(column == value)

        if batched is None:
            return set(self.session.scalars(select(model.id).where(*conditions)))

        column, values = batched
        found: set[str] = set()
        for chunk in chunked(values, self.batch_size):
            found.update(
                self.session.scalars(
                    select(model.id).where(*conditions, column.in_(chunk))
                )
            )
        return found

    def find_referenced_ids(
        self, kind: RecordKind, field: str, ids: Collection[str]
    ) -> set[str]:
        """Distinct non-null ``field`` values over the ``kind`` rows in ``ids``."""
        model = model_for(kind)
        column = _column(model, kind, field)

        found: set[str] = set()
        for chunk in chunked(ids, self.batch_size):
            found.update(
                self.session.scalars(
                    select(column)
                    .where(model.id.in_(chunk), column.is_not(None))
                    .distinct()
                )
            )
        return found
