"""
DeletionPlan -- ordered, fully resolved deletion steps for one cascade.

A plan is produced by the CascadePlanner and consumed by the
CascadeExecutor.  Every step carries the exact ids it will delete, so
executing a step never depends on rows an earlier step already removed.
"""

from __future__ import annotations

from dataclasses import dataclass

from backoffice_kernel.domain.cascade_graph import CascadeEdge
from backoffice_kernel.domain.record_ref import RecordKind, RecordRef


@dataclass(frozen=True)
class DeletionStep:
    """One ``DELETE ... WHERE id IN (ids)`` against a single kind."""

    index: int
    kind: RecordKind
    ids: frozenset[str]
    edge: CascadeEdge | None = None  # None for the root step

    @property
    def is_root(self) -> bool:
        return self.edge is None

    @property
    def size(self) -> int:
        return len(self.ids)

    def describe(self) -> str:
        via = "root" if self.edge is None else self.edge.describe()
        return f"#{self.index} {self.kind.value} x{self.size} ({via})"


@dataclass(frozen=True)
class StepResult:
    """Rows actually removed by one executed step."""

    step: DeletionStep
    deleted: int


@dataclass(frozen=True)
class DeletionPlan:
    """
    Steps for deleting ``root`` and everything that depends on it.

    Guarantees:
        - Steps are indexed 0..n-1 in execution order.
        - The root step is last and targets exactly the root id.
        - No id is targeted by two steps of the same kind.
    """

    root: RecordRef
    root_name: str
    steps: tuple[DeletionStep, ...]

    def __post_init__(self) -> None:
        if not self.steps or not self.steps[-1].is_root:
            raise ValueError("Deletion plan must end with the root step")
        if self.steps[-1].ids != frozenset({self.root.record_id}):
            raise ValueError(f"Root step must target exactly {self.root}")

        claimed: dict[RecordKind, set[str]] = {}
        for position, step in enumerate(self.steps):
            if step.index != position:
                raise ValueError(f"Step {step.describe()} is at position {position}")
            seen = claimed.setdefault(step.kind, set())
            overlap = seen & step.ids
            if overlap:
                raise ValueError(
                    f"Step {step.describe()} re-targets {len(overlap)} "
                    f"{step.kind.value} id(s)"
                )
            seen.update(step.ids)

    def targets(self, kind: RecordKind) -> frozenset[str]:
        """All ids of ``kind`` the plan deletes."""
        return frozenset().union(*(s.ids for s in self.steps if s.kind is kind))

    @property
    def dependent_steps(self) -> tuple[DeletionStep, ...]:
        return self.steps[:-1]

    @property
    def total_targets(self) -> int:
        return sum(s.size for s in self.steps)
