"""
DeletionReport -- caller-facing summary of a project cascade.

Pure and stateless: given a plan and the per-step results of executing it
(or just the plan, for a dry run), produce counts per record kind plus the
deleted project's identity for the caller's confirmation message.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from backoffice_kernel.domain.cascade_graph import PROJECT_CASCADE
from backoffice_kernel.domain.deletion_plan import DeletionPlan, StepResult
from backoffice_kernel.domain.record_ref import RecordKind

REPORTED_KINDS: tuple[RecordKind, ...] = PROJECT_CASCADE.kinds()


@dataclass(frozen=True)
class DeletionReport:
    """Counts per kind removed (or, when ``dry_run``, that would be removed)."""

    project_id: str
    project_name: str
    counts: dict[RecordKind, int] = field(default_factory=dict)
    dry_run: bool = False

    def count(self, kind: RecordKind) -> int:
        return self.counts.get(kind, 0)

    @property
    def projects(self) -> int:
        return self.count(RecordKind.PROJECT)

    @property
    def invoices(self) -> int:
        return self.count(RecordKind.INVOICE)

    @property
    def payments(self) -> int:
        return self.count(RecordKind.PAYMENT)

    @property
    def transactions(self) -> int:
        return self.count(RecordKind.TRANSACTION)

    @property
    def contracts(self) -> int:
        return self.count(RecordKind.CONTRACT)

    @property
    def documents(self) -> int:
        return self.count(RecordKind.DOCUMENT)

    @property
    def dependents_deleted(self) -> int:
        return sum(n for k, n in self.counts.items() if k is not RecordKind.PROJECT)

    @property
    def has_dependents(self) -> bool:
        return self.dependents_deleted > 0

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe form for the HTTP layer."""
        return {
            "project": {"id": self.project_id, "name": self.project_name},
            "dry_run": self.dry_run,
            "deleted": {k.plural: self.count(k) for k in REPORTED_KINDS},
        }


def _zeroed() -> dict[RecordKind, int]:
    return {kind: 0 for kind in REPORTED_KINDS}


def build_deletion_report(
    plan: DeletionPlan, results: Sequence[StepResult]
) -> DeletionReport:
    """
    Sum executed step counts per kind.

    Preconditions:
        ``results`` holds exactly one entry per plan step, in plan order.

    Raises:
        ValueError: if ``results`` does not line up with ``plan.steps``.
    """
    if len(results) != len(plan.steps):
        raise ValueError(
            f"Expected {len(plan.steps)} step results, got {len(results)}"
        )

    counts = _zeroed()
    for step, result in zip(plan.steps, results):
        if result.step != step:
            raise ValueError(f"Result for {result.step.describe()} does not match {step.describe()}")
        counts[step.kind] = counts.get(step.kind, 0) + result.deleted

    return DeletionReport(
        project_id=plan.root.record_id,
        project_name=plan.root_name,
        counts=counts,
    )


def build_preview_report(plan: DeletionPlan) -> DeletionReport:
    """Report the planned counts without anything having been deleted."""
    counts = _zeroed()
    for step in plan.steps:
        counts[step.kind] = counts.get(step.kind, 0) + step.size

    return DeletionReport(
        project_id=plan.root.record_id,
        project_name=plan.root_name,
        counts=counts,
        dry_run=True,
    )
