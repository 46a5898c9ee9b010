"""Typed records for the four stored entity types and the session user."""

from typing import Any

from pydantic import Field

from .base import (
    AssignmentRuleType,
    EmailDirection,
    EmailStatus,
    EntityModel,
    IntakeDeskBaseModel,
    IntakeStatus,
    RiskLevel,
    SenderType,
    UrgencyLevel,
)


def default_enabled_fields() -> dict[str, bool]:
    """Intake form fields switched on for a new firm."""
    return {
        "phone": True,
        "timeline": True,
        "deadline": True,
        "budget": True,
        "opposing_party": True,
        "documents": True,
    }


# =============================================================================
# FIRM
# =============================================================================


class AssignmentRules(IntakeDeskBaseModel):
    """How new intakes get an assignee."""

    enabled: bool = False
    type: AssignmentRuleType = AssignmentRuleType.ROUND_ROBIN
    practice_area_assignments: dict[str, str] = Field(default_factory=dict)


class Firm(EntityModel):
    """Owning tenant. ``slug`` is the public lookup key; uniqueness is not enforced."""

    name: str | None = None
    slug: str | None = None
    logo_url: str | None = None
    practice_areas: list[str] = Field(default_factory=list)
    intro_text: str | None = None
    notification_emails: list[str] = Field(default_factory=list)
    urgent_only_notifications: bool = False
    email_template: str | None = None
    enabled_fields: dict[str, bool] = Field(default_factory=dict)
    created_by: str | None = None
    team_members: list[str] = Field(default_factory=list)
    available_tags: list[str] = Field(default_factory=list)
    follow_up_days: int | None = None
    assignment_rules: AssignmentRules | None = None
    subscription_plan: str | None = None

    def has_member(self, email: str) -> bool:
        """Membership by team list, or the legacy ``users`` list."""
        legacy_users = getattr(self, "users", None) or []
        return email in self.team_members or (
            isinstance(legacy_users, list) and email in legacy_users
        )


# =============================================================================
# INTAKE
# =============================================================================


class Intake(EntityModel):
    """One prospective client's submission, owned by ``firm_id``."""

    firm_id: str | None = None

    # Client identity
    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None

    # Matter
    practice_area: str | None = None
    issue_description: str | None = None
    timeline: str | None = None
    deadline_date: str | None = None
    deadline_description: str | None = None
    file_urls: list[str] = Field(default_factory=list)
    consent_given: bool | None = None

    status: IntakeStatus = IntakeStatus.NEW

    # Triage (heuristic or model derived)
    ai_summary: str | None = None
    ai_practice_area: str | None = None
    ai_urgency: UrgencyLevel | None = None
    ai_risk: RiskLevel | None = None
    ai_next_steps: str | None = None
    ai_sentiment: dict[str, Any] | None = None
    ai_conflict_check: dict[str, Any] | None = None
    ai_draft_email: str | None = None

    # Staff handling
    tags: list[str] = Field(default_factory=list)
    assigned_to: str | None = None
    lead_score: float | None = None
    next_follow_up_date: str | None = None
    internal_notes: str | None = None

    @property
    def effective_practice_area(self) -> str | None:
        return self.ai_practice_area or self.practice_area

    @property
    def issue_text(self) -> str:
        """Issue description, falling back to the legacy ``issue_summary``."""
        return self.issue_description or getattr(self, "issue_summary", None) or ""

    @property
    def notes_text(self) -> str:
        """Internal notes, falling back to the legacy ``notes``."""
        return self.internal_notes or getattr(self, "notes", None) or ""


# =============================================================================
# COMMUNICATION
# =============================================================================


class EmailHistory(EntityModel):
    """An outbound (or simulated) e-mail tied to an intake. Never mutated."""

    intake_id: str | None = None
    recipient: str | None = None
    subject: str | None = None
    body: str | None = None
    status: EmailStatus = EmailStatus.SENT
    direction: EmailDirection = EmailDirection.OUTBOUND
    sent_by: str | None = None


class Message(EntityModel):
    """Chat entry on an intake. Only ``read`` changes after creation."""

    intake_id: str | None = None
    sender_email: str | None = None
    sender_name: str | None = None
    sender_type: SenderType = SenderType.STAFF
    content: str | None = None
    attachments: list[str] = Field(default_factory=list)
    read: bool = False


# =============================================================================
# SESSION USER
# =============================================================================


class User(IntakeDeskBaseModel):
    """Whoever holds this session. Not a security principal."""

    id: str
    email: str
    name: str | None = None
    full_name: str | None = None
    created_date: str | None = None

    def model_post_init(self, __context: Any) -> None:
        if not self.full_name and self.name:
            self.full_name = self.name


ENTITY_MODELS: dict[str, type[EntityModel]] = {
    "Firm": Firm,
    "Intake": Intake,
    "EmailHistory": EmailHistory,
    "Message": Message,
}
