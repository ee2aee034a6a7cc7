"""
SqlRecordStore -- SQLAlchemy implementation of the RecordStore protocol.

Responsibility:
    Typed find/delete operations per record kind over a caller-supplied
    Session, plus the unit of work (``run_in_transaction``) that the
    cascade runs inside.

Architecture position:
    Kernel > Services -- imperative shell.  Reads delegate to
    RecordSelector; deletes are bulk ``DELETE ... WHERE id IN (...)``
    statements, batched like the reads.

Transaction boundaries:
    - Session with no open transaction: ``run_in_transaction`` begins one
      and commits it (or rolls it back).  The store owns the unit of work.
    - Session already inside a caller's transaction: the unit of work is a
      SAVEPOINT.  Failure rolls back to the savepoint; success releases it
      and the caller still decides whether to commit.

Failure modes (translated from SQLAlchemy):
    - IntegrityError  -> ConstraintViolationError
    - OperationalError, InterfaceError, DisconnectionError, pool
      TimeoutError  -> StoreUnavailableError (retryable)
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from sqlalchemy import delete
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import Session

from backoffice_kernel.domain.record_ref import RecordKind
from backoffice_kernel.domain.record_store import RecordInfo
from backoffice_kernel.exceptions import ConstraintViolationError, StoreUnavailableError
from backoffice_kernel.logging_config import get_logger
from backoffice_kernel.models import model_for
from backoffice_kernel.selectors.record_selector import (
    DEFAULT_BATCH_SIZE,
    RecordSelector,
    chunked,
)
from backoffice_kernel.services.base import BaseService

logger = get_logger("services.sql_record_store")

T = TypeVar("T")

_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)


@contextmanager
def translate_store_errors(kind: RecordKind | None, operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as kernel store errors."""
    kind_value = kind.value if kind is not None else None
    try:
        yield
    except IntegrityError as e:
        raise ConstraintViolationError(
            f"{operation} on {kind_value or 'store'} violated a constraint: {e.orig}",
            kind=kind_value,
            operation=operation,
        ) from e
    except _UNAVAILABLE_ERRORS as e:
        raise StoreUnavailableError(
            f"{operation} on {kind_value or 'store'} failed: store unavailable ({type(e).__name__})",
            kind=kind_value,
            operation=operation,
        ) from e


class SqlRecordStore(BaseService):
    """
    RecordStore backed by a SQLAlchemy Session.

    Contract:
        Every method may raise StoreUnavailableError or
        ConstraintViolationError; no raw SQLAlchemy error escapes.
    """

    def __init__(self, session: Session, batch_size: int = DEFAULT_BATCH_SIZE):
        super().__init__(session)
        self._selector = RecordSelector(session, batch_size=batch_size)
        self.batch_size = batch_size

    # =========================================================================
    # Reads
    # =========================================================================

    def find_by_id(
        self, kind: RecordKind, record_id: str, *, for_update: bool = False
    ) -> RecordInfo | None:
        with translate_store_errors(kind, "find_by_id"):
            return self._selector.find_by_id(kind, record_id, for_update=for_update)

    def find_ids(self, kind: RecordKind, **criteria: Any) -> set[str]:
        with translate_store_errors(kind, "find_ids"):
            return self._selector.find_ids(kind, **criteria)

    def find_referenced_ids(
        self, kind: RecordKind, field: str, ids: Collection[str]
    ) -> set[str]:
        with translate_store_errors(kind, "find_referenced_ids"):
            return self._selector.find_referenced_ids(kind, field, ids)

    # =========================================================================
    # Deletes
    # =========================================================================

    def delete_many(self, kind: RecordKind, ids: Collection[str]) -> int:
        """
        Delete the ``kind`` rows whose id is in ``ids``.

        Returns:
            Rows actually deleted; ids that no longer exist count zero.
        """
        if not ids:
            return 0

        model = model_for(kind)
        deleted = 0
        with translate_store_errors(kind, "delete_many"):
            for chunk in chunked(ids, self.batch_size):
                result = self.session.execute(
                    delete(model).where(model.id.in_(chunk))
                )
                deleted += result.rowcount

        logger.debug(
            "records_deleted",
            extra={"kind": kind.value, "requested": len(ids), "deleted": deleted},
        )
        return deleted

    def delete(self, kind: RecordKind, record_id: str) -> int:
        return self.delete_many(kind, (record_id,))

    # =========================================================================
    # Unit of work
    # =========================================================================

    def run_in_transaction(
        self, fn: Callable[[SqlRecordStore], T], *, read_only: bool = False
    ) -> T:
        """
        Run ``fn(self)`` as one atomic unit of work.

        Postconditions:
            - ``fn`` returned: changes are committed (or the savepoint
              released), unless ``read_only``, in which case they are
              rolled back.
            - ``fn`` raised (anything, including cancellation): every
              change made inside is rolled back and the error re-raised.
        """
        with translate_store_errors(None, "transaction"):
            nested = self.session.in_transaction()
            txn = self.session.begin_nested() if nested else self.session.begin()
            logger.debug(
                "unit_of_work_started",
                extra={"savepoint": nested, "read_only": read_only},
            )

            try:
                result = fn(self)
            except BaseException:
                if txn.is_active:
                    txn.rollback()
                logger.debug("unit_of_work_rolled_back", extra={"savepoint": nested})
                raise

            if read_only:
                txn.rollback()
                logger.debug("unit_of_work_discarded", extra={"savepoint": nested})
                return result

            try:
                txn.commit()
            except BaseException:
                if txn.is_active:
                    txn.rollback()
                raise
            logger.debug("unit_of_work_committed", extra={"savepoint": nested})
            return result
