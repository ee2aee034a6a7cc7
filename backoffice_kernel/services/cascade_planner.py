"""
CascadePlanner -- resolve a cascade graph into concrete deletion steps.

Responsibility:
    Given a root id, lock and verify the root record, then walk the
    CascadeGraph to resolve the exact ids each edge reaches, and emit one
    DeletionStep per edge in graph order followed by the root step.

Architecture position:
    Kernel > Services.  Written against the RecordStore protocol; it
    performs reads only and must be called inside the same unit of work
    as the executor, so the plan describes the rows the deletes act on.

Invariants enforced:
    - Every step's id set is resolved before any step runs; no step
      depends on rows an earlier step removed.
    - No id is targeted twice: an id reached by several edges of the same
      kind (a transaction linked to the project AND settling one of its
      payments) belongs to the earliest step only.

Failure modes:
    - ProjectNotFoundError / RecordNotFoundError if the root is missing.
    - Store errors propagate unchanged.
"""

from __future__ import annotations

from collections import defaultdict

from backoffice_kernel.domain.cascade_graph import (
    PROJECT_CASCADE,
    CascadeEdge,
    CascadeGraph,
    EdgeDirection,
)
from backoffice_kernel.domain.deletion_plan import DeletionPlan, DeletionStep
from backoffice_kernel.domain.record_ref import RecordKind, RecordRef
from backoffice_kernel.domain.record_store import RecordStore
from backoffice_kernel.exceptions import ProjectNotFoundError, RecordNotFoundError
from backoffice_kernel.logging_config import get_logger

logger = get_logger("services.cascade_planner")


class CascadePlanner:
    """
    Produces a DeletionPlan for one root record.

    Contract:
        ``plan()`` is read-only against the store apart from the row lock
        taken on the root when ``lock_root`` is set.
    """

    def __init__(self, store: RecordStore, graph: CascadeGraph = PROJECT_CASCADE):
        self._store = store
        self._graph = graph

    def plan(self, root_id: str, *, lock_root: bool = True) -> DeletionPlan:
        """
        Build the ordered deletion plan for ``root_id``.

        Args:
            root_id: Id of the root record (a project for PROJECT_CASCADE).
            lock_root: Take a row lock on the root so concurrent cascades
                for the same record serialize behind this one.

        Raises:
            ProjectNotFoundError: The project does not exist.
        """
        root_kind = self._graph.root
        root = self._store.find_by_id(root_kind, root_id, for_update=lock_root)
        if root is None:
            if root_kind is RecordKind.PROJECT:
                raise ProjectNotFoundError(root_id)
            raise RecordNotFoundError(root_kind.value, root_id)

        reached = self._resolve(root_id)

        steps: list[DeletionStep] = []
        claimed: dict[RecordKind, set[str]] = defaultdict(set)
        for index, edge in enumerate(self._graph.edges):
            ids = reached[edge] - claimed[edge.kind]
            claimed[edge.kind].update(ids)
            steps.append(DeletionStep(index=index, kind=edge.kind, ids=frozenset(ids), edge=edge))
        steps.append(
            DeletionStep(index=len(steps), kind=root_kind, ids=frozenset({root_id}))
        )

        plan = DeletionPlan(
            root=RecordRef(root_kind, root_id),
            root_name=root.name or "",
            steps=tuple(steps),
        )
        logger.info(
            "cascade_plan_built",
            extra={
                "root": str(plan.root),
                "steps": [step.describe() for step in plan.steps],
                "total_targets": plan.total_targets,
            },
        )
        return plan

    def _resolve(self, root_id: str) -> dict[CascadeEdge, frozenset[str]]:
        """Ids reached by each edge, resolving parents before dependents."""
        by_kind: dict[RecordKind, frozenset[str]] = {self._graph.root: frozenset({root_id})}
        by_edge: dict[CascadeEdge, frozenset[str]] = {}

        for kind in self._graph.resolution_order()[1:]:
            ids: set[str] = set()
            for edge in self._graph.edges_into(kind):
                found = self._resolve_edge(edge, by_kind[edge.parent])
                by_edge[edge] = found
                ids.update(found)
            by_kind[kind] = frozenset(ids)

        return by_edge

    def _resolve_edge(self, edge: CascadeEdge, parent_ids: frozenset[str]) -> frozenset[str]:
        if not parent_ids:
            return frozenset()

        if edge.direction is EdgeDirection.REFERENCED:
            return frozenset(
                self._store.find_referenced_ids(edge.parent, edge.field, parent_ids)
            )

        criteria: dict[str, object] = {edge.field: parent_ids}
        if edge.discriminator is not None:
            criteria[edge.discriminator] = edge.parent.value
        return frozenset(self._store.find_ids(edge.kind, **criteria))
