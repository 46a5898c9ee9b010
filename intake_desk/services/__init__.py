"""Business logic services for IntakeDesk."""

from .auth import (
    AuthService,
    LocalAuthService,
    RemoteAuthService,
    SessionContext,
    ensure_firm_for_user,
    find_firm_for_user,
)
from .entity_store import EntitySet, EntityStore
from .export import build_csv, encode_cell
from .functions import (
    FunctionDispatcher,
    FunctionResult,
    LocalFunctionDispatcher,
    RemoteFunctionDispatcher,
    fallback_summary,
)
from .uploads import LocalUploader, RemoteUploader, Uploader, UploadResult
from .urgency import UrgencyAssessment, UrgencyClassifier
from .workflow import ClientPortalView, IntakeWorkflow

__all__ = [
    # Entity store
    "EntitySet",
    "EntityStore",
    # Auth
    "AuthService",
    "LocalAuthService",
    "RemoteAuthService",
    "SessionContext",
    "ensure_firm_for_user",
    "find_firm_for_user",
    # Functions
    "FunctionDispatcher",
    "FunctionResult",
    "LocalFunctionDispatcher",
    "RemoteFunctionDispatcher",
    "fallback_summary",
    "UrgencyAssessment",
    "UrgencyClassifier",
    "build_csv",
    "encode_cell",
    # Uploads
    "Uploader",
    "LocalUploader",
    "RemoteUploader",
    "UploadResult",
    # Workflow
    "IntakeWorkflow",
    "ClientPortalView",
]
