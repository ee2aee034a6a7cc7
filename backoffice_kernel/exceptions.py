"""
Typed Exception Hierarchy for the Back-office Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the kernel (the HTTP layer, CLI tooling, retry loops) decide what
to do with a failure by its TYPE, never by parsing its message:

    try:
        report = delete_project_cascade(project_id)
    except ProjectNotFoundError as e:
        return response(404, code=e.code, project_id=e.record_id)
    except StoreUnavailableError as e:
        return response(503, code=e.code)

Every exception carries:
  1. A static machine-readable ``code`` class attribute.
  2. Structured attributes (record kind, ids, step index) instead of
     information buried in the message string.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BackofficeKernelError (base)
    |
    +-- RecordError
    |   +-- RecordNotFoundError
    |   |   +-- ProjectNotFoundError
    |   +-- InvalidRecordIdError
    |
    +-- StoreError
    |   +-- StoreUnavailableError
    |   +-- ConstraintViolationError
    |
    +-- CascadeError
        +-- CascadeGraphError
        +-- CascadeStepFailedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                  | When Raised                  | Retry?
-----------|-----------------------|------------------------------|--------
Record     | RECORD_NOT_FOUND      | Record id doesn't exist      | no
           | PROJECT_NOT_FOUND     | Cascade target doesn't exist | no
           | INVALID_RECORD_ID     | Empty / non-string id        | no
-----------|-----------------------|------------------------------|--------
Store      | STORE_UNAVAILABLE     | Connection/lock/timeout      | yes
           | CONSTRAINT_VIOLATION  | FK or uniqueness failure     | no
-----------|-----------------------|------------------------------|--------
Cascade    | CASCADE_GRAPH_INVALID | Descriptor is malformed      | no
           | CASCADE_STEP_FAILED   | A planned step could not run | no

===============================================================================
"""


class BackofficeKernelError(Exception):
    """
    Base exception for all back-office kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "BACKOFFICE_KERNEL_ERROR"

    #: Whether repeating the whole operation may succeed.
    retryable: bool = False


# Record-related exceptions


class RecordError(BackofficeKernelError):
    """Base exception for record lookup and identity errors."""

    code: str = "RECORD_ERROR"


class RecordNotFoundError(RecordError):
    """Record of the given kind and id was not found."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class ProjectNotFoundError(RecordNotFoundError):
    """The project targeted by a cascade does not exist."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        super().__init__("project", project_id)


class InvalidRecordIdError(RecordError):
    """A record identifier is empty or not a string."""

    code: str = "INVALID_RECORD_ID"

    def __init__(self, kind: str, record_id: object):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"Invalid {kind} id: {record_id!r}")


# Store-related exceptions


class StoreError(BackofficeKernelError):
    """Base exception for failures surfaced by the record store."""

    code: str = "STORE_ERROR"

    def __init__(self, message: str, kind: str | None = None, operation: str | None = None):
        self.kind = kind
        self.operation = operation
        super().__init__(message)


class StoreUnavailableError(StoreError):
    """
    Transient infrastructure failure (connection lost, lock timeout, pool
    exhausted).

    The cascade is atomic, so the whole operation is safe to repeat.
    """

    code: str = "STORE_UNAVAILABLE"
    retryable: bool = True


class ConstraintViolationError(StoreError):
    """
    A foreign-key or uniqueness constraint rejected a store operation.

    Terminal: it means a record exists that the data model did not account
    for (e.g. a payment outside the project pointing at a project
    transaction).
    """

    code: str = "CONSTRAINT_VIOLATION"


# Cascade-related exceptions


class CascadeError(BackofficeKernelError):
    """Base exception for cascade planning and execution errors."""

    code: str = "CASCADE_ERROR"


class CascadeGraphError(CascadeError):
    """The dependency graph descriptor is malformed."""

    code: str = "CASCADE_GRAPH_INVALID"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid cascade graph: {reason}")


class CascadeStepFailedError(CascadeError):
    """A planned step could not be executed for a non-store reason."""

    code: str = "CASCADE_STEP_FAILED"

    def __init__(self, step_index: int, kind: str, reason: str):
        self.step_index = step_index
        self.kind = kind
        self.reason = reason
        super().__init__(f"Cascade step {step_index} ({kind}) failed: {reason}")
