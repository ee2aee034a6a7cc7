"""
CascadeGraph -- declarative dependency graph for cascading deletes.

Responsibility:
    Describes, as pure data, which record kinds must be removed together
    with a root record and through which fields they are reached.  The
    planner walks this description; it contains no per-kind deletion code,
    so adding a dependent kind is a new ``CascadeEdge``, not a new code
    path.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Edge semantics:
    REFERENCING  -- the dependent row holds ``field`` pointing at a parent
                    id (``payments.invoice_id -> invoices.id``).
    REFERENCED   -- the parent row holds ``field`` pointing at the
                    dependent id (``payments.transaction_id ->
                    transactions.id``): the dependent is found by reading
                    the parent rows, not by filtering the dependent table.
    discriminator -- on REFERENCING edges, the dependent column that must
                    equal the parent kind's tag.  Used for polymorphic
                    references that have no foreign key
                    (``documents.related_type = 'project'``).

Ordering:
    Edge order IS deletion order; the root is always deleted last.  A
    graph is rejected unless every row holding a foreign key is deleted
    before the row it points at, so the plan also runs against a store
    that enforces foreign keys without ON DELETE CASCADE.

Failure modes:
    - CascadeGraphError on a self-edge, an unreachable parent, a
      resolution cycle, or an edge order that would delete a referenced
      row before its referrer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from backoffice_kernel.domain.record_ref import RecordKind
from backoffice_kernel.exceptions import CascadeGraphError


class EdgeDirection(str, Enum):
    """Which side of the relation holds the pointer column."""

    REFERENCING = "referencing"
    REFERENCED = "referenced"


@dataclass(frozen=True)
class CascadeEdge:
    """One dependency: records of ``kind`` die with records of ``parent``."""

    kind: RecordKind
    parent: RecordKind
    field: str
    direction: EdgeDirection = EdgeDirection.REFERENCING
    discriminator: str | None = None

    def __post_init__(self) -> None:
        if self.discriminator is not None and self.direction is not EdgeDirection.REFERENCING:
            raise CascadeGraphError(
                f"{self.describe()}: discriminator only applies to referencing edges"
            )

    @property
    def is_polymorphic(self) -> bool:
        return self.discriminator is not None

    @property
    def enforces_foreign_key(self) -> bool:
        """Polymorphic references have no FK, so their order is free."""
        return not self.is_polymorphic

    def describe(self) -> str:
        if self.direction is EdgeDirection.REFERENCED:
            return f"{self.parent.value}.{self.field} -> {self.kind.value}"
        if self.is_polymorphic:
            return (
                f"{self.kind.value}.{self.field} -> {self.parent.value} "
                f"[{self.discriminator}={self.parent.value}]"
            )
        return f"{self.kind.value}.{self.field} -> {self.parent.value}"


@dataclass(frozen=True)
class CascadeGraph:
    """
    Root kind plus its dependency edges in deletion order.

    Contract:
        Construction validates the graph; an instance is always safe to
        plan against.
    """

    root: RecordKind
    edges: tuple[CascadeEdge, ...]

    def __post_init__(self) -> None:
        self._validate()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def edges_into(self, kind: RecordKind) -> tuple[CascadeEdge, ...]:
        """Edges whose dependent is ``kind``, in deletion order."""
        return tuple(e for e in self.edges if e.kind is kind)

    def kinds(self) -> tuple[RecordKind, ...]:
        """Every kind the cascade touches, in first-deleted order, root last."""
        seen: list[RecordKind] = []
        for edge in self.edges:
            if edge.kind not in seen:
                seen.append(edge.kind)
        seen.append(self.root)
        return tuple(seen)

    def resolution_order(self) -> tuple[RecordKind, ...]:
        """Kinds ordered so every parent is resolved before its dependents."""
        order: list[RecordKind] = [self.root]
        pending = [k for k in self.kinds() if k is not self.root]
        while pending:
            ready = [
                k for k in pending
                if all(e.parent in order for e in self.edges_into(k))
            ]
            if not ready:
                raise CascadeGraphError(
                    "resolution cycle between "
                    + ", ".join(k.value for k in pending)
                )
            for k in ready:
                order.append(k)
                pending.remove(k)
        return tuple(order)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate(self) -> None:
        if not self.edges:
            raise CascadeGraphError("graph has no edges")

        if len(set(self.edges)) != len(self.edges):
            raise CascadeGraphError("graph declares the same edge twice")

        dependents = {e.kind for e in self.edges}
        for edge in self.edges:
            if edge.kind is edge.parent:
                raise CascadeGraphError(f"{edge.describe()}: self-referencing edge")
            if edge.kind is self.root:
                raise CascadeGraphError(
                    f"{edge.describe()}: the root kind cannot be a dependent"
                )
            if edge.parent is not self.root and edge.parent not in dependents:
                raise CascadeGraphError(
                    f"{edge.describe()}: parent {edge.parent.value} is not reachable from "
                    f"{self.root.value}"
                )

        self.resolution_order()

        # Position of each kind's first and last deletion step; root is last.
        positions: dict[RecordKind, list[int]] = {}
        for index, edge in enumerate(self.edges):
            positions.setdefault(edge.kind, []).append(index)
        positions[self.root] = [len(self.edges)]

        for edge in self.edges:
            if not edge.enforces_foreign_key:
                continue
            if edge.direction is EdgeDirection.REFERENCING:
                referrer, referenced = edge.kind, edge.parent
            else:
                referrer, referenced = edge.parent, edge.kind
            if max(positions[referrer]) > min(positions[referenced]):
                raise CascadeGraphError(
                    f"{edge.describe()}: {referrer.value} rows must be deleted before "
                    f"{referenced.value} rows"
                )


PROJECT_CASCADE = CascadeGraph(
    root=RecordKind.PROJECT,
    edges=(
        CascadeEdge(RecordKind.PAYMENT, parent=RecordKind.INVOICE, field="invoice_id"),
        # Settlement transactions have no project_id of their own to find them by
        CascadeEdge(
            RecordKind.TRANSACTION,
            parent=RecordKind.PAYMENT,
            field="transaction_id",
            direction=EdgeDirection.REFERENCED,
        ),
        CascadeEdge(RecordKind.TRANSACTION, parent=RecordKind.PROJECT, field="project_id"),
        CascadeEdge(RecordKind.INVOICE, parent=RecordKind.PROJECT, field="project_id"),
        CascadeEdge(RecordKind.CONTRACT, parent=RecordKind.PROJECT, field="project_id"),
        CascadeEdge(
            RecordKind.DOCUMENT,
            parent=RecordKind.PROJECT,
            field="related_id",
            discriminator="related_type",
        ),
    ),
)
