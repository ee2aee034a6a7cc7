"""
Pure domain layer.

Record references, the cascade dependency graph, deletion plans, deletion
reports and the record store port.  NO dependencies on the ORM, the
database, or I/O.  All domain objects are immutable.
"""

from backoffice_kernel.domain.cascade_graph import (
    PROJECT_CASCADE,
    CascadeEdge,
    CascadeGraph,
    EdgeDirection,
)
from backoffice_kernel.domain.deletion_plan import DeletionPlan, DeletionStep, StepResult
from backoffice_kernel.domain.deletion_report import (
    DeletionReport,
    build_deletion_report,
    build_preview_report,
)
from backoffice_kernel.domain.record_ref import RecordKind, RecordRef
from backoffice_kernel.domain.record_store import RecordInfo, RecordStore

__all__ = [
    "PROJECT_CASCADE",
    "CascadeEdge",
    "CascadeGraph",
    "DeletionPlan",
    "DeletionReport",
    "DeletionStep",
    "EdgeDirection",
    "RecordInfo",
    "RecordKind",
    "RecordRef",
    "RecordStore",
    "StepResult",
    "build_deletion_report",
    "build_preview_report",
]
