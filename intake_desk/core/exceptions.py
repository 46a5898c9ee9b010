"""Exception hierarchy shared by the store, dispatcher and workflow layers."""


class IntakeDeskError(Exception):
    """Base exception for IntakeDesk operations."""
    pass


# =============================================================================
# STORE
# =============================================================================


class StoreError(IntakeDeskError):
    """Base exception for entity store operations."""
    pass


class RecordNotFoundError(StoreError):
    """Record does not exist."""

    def __init__(self, entity_name: str, record_id: str):
        super().__init__(f"{entity_name}.update: {record_id} not found")
        self.entity_name = entity_name
        self.record_id = record_id


class UnknownEntityError(StoreError):
    """Entity type is not one the store knows about."""
    pass


class RemoteRequestError(StoreError):
    """The remote backend answered with a non-success status."""

    def __init__(self, method: str, path: str, status_code: int | None = None):
        super().__init__(f"{method} {path} failed")
        self.method = method
        self.path = path
        self.status_code = status_code


# =============================================================================
# UPLOADS
# =============================================================================


class UploadError(IntakeDeskError):
    """File could not be turned into a reference."""
    pass


# =============================================================================
# WORKFLOW
# =============================================================================


class WorkflowError(IntakeDeskError):
    """Base exception for intake workflow actions."""
    pass


class FirmNotFoundError(WorkflowError):
    """No firm matches the given slug or id."""
    pass


class IntakeNotFoundError(WorkflowError):
    """Intake does not exist."""
    pass


class ConsentRequiredError(WorkflowError):
    """Public submission without the disclaimer acknowledged."""
    pass


class DuplicateTagError(WorkflowError):
    """Tag is already present on the intake."""
    pass


class AccessDeniedError(WorkflowError):
    """Client e-mail does not match the intake on record."""
    pass
