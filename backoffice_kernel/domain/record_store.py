"""RecordStore -- the store capabilities the cascade is written against.

The planner and executor never touch a Session directly; they call these
operations.  SqlRecordStore (services/sql_record_store.py) is the
SQLAlchemy implementation; tests may substitute their own.
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar, runtime_checkable

from backoffice_kernel.domain.record_ref import RecordKind, RecordRef

T = TypeVar("T")


@dataclass(frozen=True)
class RecordInfo:
    """Identity of a found record, plus its display name when it has one."""

    ref: RecordRef
    name: str | None = None


@runtime_checkable
class RecordStore(Protocol):
    """Protocol for typed find/delete access and atomic units of work.

    Errors: implementations raise StoreUnavailableError for transient
    infrastructure failures and ConstraintViolationError when the store
    rejects an operation on integrity grounds.
    """

    def find_by_id(
        self, kind: RecordKind, record_id: str, *, for_update: bool = False
    ) -> RecordInfo | None:
        """Return the record, or None.  ``for_update`` row-locks it until
        the enclosing unit of work ends."""
        ...

    def find_ids(self, kind: RecordKind, **criteria: Any) -> set[str]:
        """Ids of ``kind`` matching every criterion.

        A scalar criterion matches by equality, a collection by membership.
        """
        ...

    def find_referenced_ids(
        self, kind: RecordKind, field: str, ids: Collection[str]
    ) -> set[str]:
        """Distinct non-null values of ``field`` on the ``kind`` rows in ``ids``."""
        ...

    def delete_many(self, kind: RecordKind, ids: Collection[str]) -> int:
        """Delete the ``kind`` rows in ``ids``; return rows affected."""
        ...

    def delete(self, kind: RecordKind, record_id: str) -> int:
        """Delete one row; return rows affected (0 or 1)."""
        ...

    def run_in_transaction(
        self, fn: Callable[["RecordStore"], T], *, read_only: bool = False
    ) -> T:
        """Run ``fn`` as one unit of work: all of it commits or none of it does.

        With ``read_only`` the unit of work is always rolled back.
        """
        ...
