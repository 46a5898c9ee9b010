"""Core application utilities."""

from .config import Settings, get_settings
from .database import close_db, create_engine, create_session_factory, init_db, session_scope
from .exceptions import (
    AccessDeniedError,
    ConsentRequiredError,
    DuplicateTagError,
    FirmNotFoundError,
    IntakeDeskError,
    IntakeNotFoundError,
    RecordNotFoundError,
    RemoteRequestError,
    StoreError,
    UnknownEntityError,
    UploadError,
    WorkflowError,
)
from .http import ApiClient
from .storage import FileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Database
    "create_engine",
    "create_session_factory",
    "session_scope",
    "init_db",
    "close_db",
    # Storage
    "KeyValueStorage",
    "MemoryStorage",
    "FileStorage",
    # HTTP
    "ApiClient",
    # Exceptions
    "IntakeDeskError",
    "StoreError",
    "RecordNotFoundError",
    "RemoteRequestError",
    "UnknownEntityError",
    "UploadError",
    "WorkflowError",
    "FirmNotFoundError",
    "IntakeNotFoundError",
    "ConsentRequiredError",
    "DuplicateTagError",
    "AccessDeniedError",
]
