"""Base schemas and common types for IntakeDesk records."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================


class IntakeStatus(str, Enum):
    """Lifecycle state of an intake. Any status may follow any other."""

    NEW = "new"
    URGENT = "urgent"
    REVIEWED = "reviewed"
    ARCHIVED = "archived"


class RiskLevel(str, Enum):
    """Outcome of the urgency heuristic, as written to ``ai_risk``."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def urgency(self) -> "UrgencyLevel":
        return UrgencyLevel(self.value.lower())


class UrgencyLevel(str, Enum):
    """Urgency as shown on the dashboard (``ai_urgency``)."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SenderType(str, Enum):
    """Who wrote a message."""

    STAFF = "staff"
    CLIENT = "client"


class EmailStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"


class EmailDirection(str, Enum):
    OUTBOUND = "outbound"
    INBOUND = "inbound"


class AssignmentRuleType(str, Enum):
    ROUND_ROBIN = "round_robin"
    PRACTICE_AREA = "practice_area"


# =============================================================================
# BASE SCHEMAS
# =============================================================================


# Fields the store owns. Caller-supplied values for these are ignored.
SYSTEM_FIELDS = frozenset({"id", "created_date", "updated_date"})


class IntakeDeskBaseModel(BaseModel):
    """Base model with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


class EntityModel(IntakeDeskBaseModel):
    """A stored record: typed known fields plus any extra fields.

    Timestamps are kept as the ISO-8601 strings the store wrote, so they
    compare and sort the same way in every backend.
    """

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    created_date: str | None = None
    updated_date: str | None = None

    def to_record(self) -> dict:
        """Serialize to a JSON-compatible field bag, dropping unset Nones."""
        return self.model_dump(mode="json", exclude_none=True)


# =============================================================================
# ERROR RESPONSES
# =============================================================================


class ErrorDetail(IntakeDeskBaseModel):
    """Detailed error information."""

    field: str | None = None
    message: str
    code: str


class ErrorResponse(IntakeDeskBaseModel):
    """Standard error response format."""

    error: str
    message: str
    details: list[ErrorDetail] = Field(default_factory=list)
