"""
ProjectDeletionService -- delete a project and everything that depends on it.

Responsibility:
    The single entry point the HTTP layer calls to remove a project.
    Plans and executes the PROJECT_CASCADE inside one unit of work and
    returns a DeletionReport; or, as a dry run, reports what would be
    removed without removing anything.

Architecture position:
    Kernel > Services -- orchestration over CascadePlanner,
    CascadeExecutor and the report builder.  Written against the
    RecordStore protocol; ``delete_project_cascade()`` /
    ``preview_project_deletion()`` at module level wire it to the
    SQLAlchemy session factory.

Invariants enforced:
    - Atomicity: plan and execution share one transaction.  Either every
      step commits or none does; the caller never receives a partial
      report.
    - Serialization: the project row is locked before planning, so a
      second cascade for the same project waits, then finds it gone.
    - Retry: only StoreUnavailableError is retried, and always the whole
      cascade, never a single step.

Failure modes:
    - InvalidRecordIdError: empty or non-string project id.
    - ProjectNotFoundError: no such project (not retried).
    - ConstraintViolationError: a record outside the cascade still
      references a row the cascade deletes (not retried).
    - StoreUnavailableError: still failing after ``max_attempts``.

Usage:
    report = delete_project_cascade(project_id)
    print(f"Deleted {report.project_name}: {report.to_dict()['deleted']}")
"""

from __future__ import annotations

import time
from collections.abc import Callable
from uuid import uuid4

from sqlalchemy.orm import Session, sessionmaker

from backoffice_config.schema import CascadeSettings, Settings, StoreSettings
from backoffice_kernel.db.engine import get_session_factory
from backoffice_kernel.domain.cascade_graph import PROJECT_CASCADE, CascadeGraph
from backoffice_kernel.domain.deletion_report import (
    DeletionReport,
    build_deletion_report,
    build_preview_report,
)
from backoffice_kernel.domain.record_store import RecordStore
from backoffice_kernel.exceptions import InvalidRecordIdError, StoreUnavailableError
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_kernel.services.cascade_executor import CascadeExecutor
from backoffice_kernel.services.cascade_planner import CascadePlanner
from backoffice_kernel.services.sql_record_store import SqlRecordStore

logger = get_logger("services.project_deletion")


def validate_record_id(kind: str, record_id: object) -> str:
    """Return ``record_id`` if it is a non-blank string, else raise."""
    if not isinstance(record_id, str) or not record_id.strip():
        raise InvalidRecordIdError(kind, record_id)
    return record_id


class ProjectDeletionService:
    """
    Cascading project deletion over a RecordStore.

    Contract:
        ``delete_project_cascade`` either returns a report of everything
        it removed or raises and leaves the store unchanged.
    """

    def __init__(
        self,
        store: RecordStore,
        settings: CascadeSettings | None = None,
        graph: CascadeGraph = PROJECT_CASCADE,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._store = store
        self._settings = settings or CascadeSettings()
        self._graph = graph
        self._sleep = sleep

    def delete_project_cascade(self, project_id: str) -> DeletionReport:
        """
        Delete the project and every record that references it.

        Raises:
            InvalidRecordIdError, ProjectNotFoundError,
            ConstraintViolationError, StoreUnavailableError.
        """
        validate_record_id("project", project_id)
        max_attempts = self._settings.max_attempts

        with LogContext.bind(project_id=project_id, cascade_id=str(uuid4())):
            logger.info("cascade_started", extra={"max_attempts": max_attempts})

            attempt = 1
            while True:
                try:
                    report = self._store.run_in_transaction(
                        lambda store: self._cascade(store, project_id)
                    )
                except StoreUnavailableError:
                    if attempt >= max_attempts:
                        logger.error(
                            "cascade_failed",
                            extra={"attempt": attempt, "retryable": True},
                            exc_info=True,
                        )
                        raise
                    delay = self._settings.retry_backoff_seconds * attempt
                    logger.warning(
                        "cascade_retry",
                        extra={"attempt": attempt, "delay_seconds": delay},
                        exc_info=True,
                    )
                    self._sleep(delay)
                    attempt += 1
                    continue
                except Exception:
                    logger.error(
                        "cascade_failed",
                        extra={"attempt": attempt, "retryable": False},
                        exc_info=True,
                    )
                    raise

                logger.info(
                    "cascade_completed",
                    extra={
                        "attempt": attempt,
                        "project_name": report.project_name,
                        "deleted": report.to_dict()["deleted"],
                    },
                )
                return report

    def preview_project_deletion(self, project_id: str) -> DeletionReport:
        """
        Report what ``delete_project_cascade`` would remove, removing nothing.

        The plan is built in a unit of work that is always rolled back and
        takes no row lock.

        Raises:
            InvalidRecordIdError, ProjectNotFoundError, StoreUnavailableError.
        """
        validate_record_id("project", project_id)

        with LogContext.bind(project_id=project_id):
            plan = self._store.run_in_transaction(
                lambda store: CascadePlanner(store, self._graph).plan(
                    project_id, lock_root=False
                ),
                read_only=True,
            )
            report = build_preview_report(plan)
            logger.info(
                "cascade_preview",
                extra={
                    "project_name": report.project_name,
                    "would_delete": report.to_dict()["deleted"],
                },
            )
            return report

    def _cascade(self, store: RecordStore, project_id: str) -> DeletionReport:
        plan = CascadePlanner(store, self._graph).plan(project_id)
        results = CascadeExecutor(store).execute(plan)
        return build_deletion_report(plan, results)


# =============================================================================
# Session-factory entry points
# =============================================================================


def _build_service(
    session: Session, settings: Settings | None
) -> ProjectDeletionService:
    store_settings = settings.store if settings else StoreSettings()
    cascade_settings = settings.cascade if settings else CascadeSettings()
    store = SqlRecordStore(session, batch_size=store_settings.in_clause_batch_size)
    return ProjectDeletionService(store, cascade_settings)


def delete_project_cascade(
    project_id: str,
    session_factory: sessionmaker[Session] | None = None,
    settings: Settings | None = None,
) -> DeletionReport:
    """
    Delete a project and its dependents in a fresh session.

    Args:
        project_id: Project to delete.
        session_factory: Defaults to the engine's factory
            (``init_engine_from_url`` must have been called).
        settings: Batch size and retry policy; defaults apply when None.
    """
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        return _build_service(session, settings).delete_project_cascade(project_id)
    finally:
        session.close()


def preview_project_deletion(
    project_id: str,
    session_factory: sessionmaker[Session] | None = None,
    settings: Settings | None = None,
) -> DeletionReport:
    """Dry-run counterpart of ``delete_project_cascade``."""
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        return _build_service(session, settings).preview_project_deletion(project_id)
    finally:
        session.close()
