"""
CascadeExecutor -- run a DeletionPlan step by step.

A thin runner: it does not reinterpret the plan.  It must be called inside
the unit of work the plan was built in; the first failing step aborts the
run and the unit of work rolls everything back.  Steps are never retried
individually.
"""

from __future__ import annotations

from backoffice_kernel.domain.deletion_plan import DeletionPlan, DeletionStep, StepResult
from backoffice_kernel.domain.record_store import RecordStore
from backoffice_kernel.exceptions import CascadeStepFailedError
from backoffice_kernel.logging_config import get_logger

logger = get_logger("services.cascade_executor")


class CascadeExecutor:
    def __init__(self, store: RecordStore):
        self._store = store

    def execute(self, plan: DeletionPlan) -> list[StepResult]:
        """
        Execute every step of ``plan`` in order.

        Returns:
            One StepResult per step, in plan order.  Zero-row steps are
            included.

        Raises:
            StoreUnavailableError / ConstraintViolationError: from the store.
            CascadeStepFailedError: the root row was gone by the time its
                step ran.
        """
        results: list[StepResult] = []
        for step in plan.steps:
            try:
                deleted = self._run_step(step)
            except Exception:
                logger.error(
                    "cascade_step_failed",
                    extra={
                        "step_index": step.index,
                        "kind": step.kind.value,
                        "target_count": step.size,
                        "completed_steps": len(results),
                    },
                    exc_info=True,
                )
                raise

            if deleted != step.size:
                # Rows removed by someone else between planning and now
                logger.warning(
                    "cascade_step_count_mismatch",
                    extra={
                        "step_index": step.index,
                        "kind": step.kind.value,
                        "target_count": step.size,
                        "deleted": deleted,
                    },
                )
            logger.debug(
                "cascade_step_completed",
                extra={"step": step.describe(), "deleted": deleted},
            )
            results.append(StepResult(step=step, deleted=deleted))

        return results

    def _run_step(self, step: DeletionStep) -> int:
        if not step.ids:
            return 0

        if step.is_root:
            (root_id,) = step.ids
            deleted = self._store.delete(step.kind, root_id)
            if deleted != 1:
                raise CascadeStepFailedError(
                    step.index, step.kind.value, f"{root_id} no longer exists"
                )
            return deleted

        return self._store.delete_many(step.kind, step.ids)
