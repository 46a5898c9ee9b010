"""Pydantic schemas for IntakeDesk records."""

from .base import (
    SYSTEM_FIELDS,
    AssignmentRuleType,
    EmailDirection,
    EmailStatus,
    EntityModel,
    ErrorDetail,
    ErrorResponse,
    IntakeDeskBaseModel,
    IntakeStatus,
    RiskLevel,
    SenderType,
    UrgencyLevel,
)
from .analytics import CountBucket, DayCount, IntakeAnalytics
from .entities import (
    ENTITY_MODELS,
    AssignmentRules,
    EmailHistory,
    Firm,
    Intake,
    Message,
    User,
    default_enabled_fields,
)

__all__ = [
    # Base
    "SYSTEM_FIELDS",
    "IntakeDeskBaseModel",
    "EntityModel",
    "ErrorDetail",
    "ErrorResponse",
    # Enums
    "IntakeStatus",
    "RiskLevel",
    "UrgencyLevel",
    "SenderType",
    "EmailStatus",
    "EmailDirection",
    "AssignmentRuleType",
    # Analytics
    "CountBucket",
    "DayCount",
    "IntakeAnalytics",
    # Entities
    "ENTITY_MODELS",
    "AssignmentRules",
    "Firm",
    "Intake",
    "EmailHistory",
    "Message",
    "User",
    "default_enabled_fields",
]
