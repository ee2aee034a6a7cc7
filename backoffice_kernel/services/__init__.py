"""Services for the back-office kernel (write side)."""

from backoffice_kernel.services.cascade_executor import CascadeExecutor
from backoffice_kernel.services.cascade_planner import CascadePlanner
from backoffice_kernel.services.project_deletion import (
    ProjectDeletionService,
    delete_project_cascade,
    preview_project_deletion,
)
from backoffice_kernel.services.sql_record_store import SqlRecordStore, translate_store_errors

__all__ = [
    "CascadeExecutor",
    "CascadePlanner",
    "ProjectDeletionService",
    "SqlRecordStore",
    "delete_project_cascade",
    "preview_project_deletion",
    "translate_store_errors",
]
