"""
Intake Workflow: the staff and client actions built on the store.

Covers the public intake form, the dashboard's single and bulk edits, the
client portal's access check, the intake message thread and the dashboard
metrics. All reads and writes go through the EntityStore; side actions go
through the FunctionDispatcher, so the workflow runs unchanged against a
local or a remote backend.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Literal

from ..core.config import Settings
from ..core.exceptions import (
    AccessDeniedError,
    ConsentRequiredError,
    DuplicateTagError,
    FirmNotFoundError,
    IntakeDeskError,
    IntakeNotFoundError,
)
from ..schemas import (
    AssignmentRuleType,
    CountBucket,
    DayCount,
    EmailHistory,
    Firm,
    Intake,
    IntakeAnalytics,
    IntakeStatus,
    Message,
    SenderType,
    UrgencyLevel,
)
from .auth import SessionContext
from .entity_store import EntityStore
from .functions import FunctionDispatcher

logger = logging.getLogger(__name__)

BulkAction = Literal["status", "assign", "tag"]

TIMELINE_DAYS = 7


@dataclass
class ClientPortalView:
    """What a verified client may see of their intake."""

    intake: Intake
    emails: list[EmailHistory]


class IntakeWorkflow:
    """Staff and client actions on intakes."""

    def __init__(self, store: EntityStore, functions: FunctionDispatcher, settings: Settings):
        self._store = store
        self._functions = functions
        self._settings = settings

    async def _get_intake(self, intake_id: str) -> Intake:
        intake = await self._store.intakes.get(intake_id)
        if intake is None:
            raise IntakeNotFoundError(f"Intake {intake_id} not found")
        return intake

    # =========================================================================
    # PUBLIC SUBMISSION
    # =========================================================================

    async def submit_intake(self, firm_slug: str, form: dict[str, Any]) -> Intake:
        """
        Create an intake from the public form of the firm at ``firm_slug``.

        Flow:
        1. Resolve the firm by slug (first match; slugs are not unique)
        2. Require the disclaimer acknowledgement
        3. Create the intake with status "new"
        4. Apply the firm's assignment rules
        5. Run the urgency heuristic
        """
        firms = await self._store.firms.filter({"slug": firm_slug})
        if not firms:
            raise FirmNotFoundError(f"No firm with slug {firm_slug!r}")
        firm = firms[0]

        if not form.get("consent_given"):
            raise ConsentRequiredError("Please acknowledge the disclaimer to proceed.")

        intake = await self._store.intakes.create(
            {**form, "firm_id": firm.id, "status": IntakeStatus.NEW}
        )

        assignee = await self.pick_assignee(firm, intake)
        if assignee:
            intake = await self._store.intakes.update(intake.id, {"assigned_to": assignee})

        try:
            await self._functions.invoke("processIntake", {"intake_id": intake.id})
        except IntakeDeskError as e:
            # The submission stands; triage can be rerun from the dashboard.
            logger.warning(f"processIntake failed for intake {intake.id}: {e}")

        return await self._get_intake(intake.id)

    async def pick_assignee(self, firm: Firm, intake: Intake) -> str | None:
        """Assignee chosen by the firm's assignment rules, if enabled."""
        rules = firm.assignment_rules
        if rules is None or not rules.enabled:
            return None

        if rules.type == AssignmentRuleType.PRACTICE_AREA:
            area = intake.effective_practice_area
            return rules.practice_area_assignments.get(area) if area else None

        members = firm.team_members
        if not members:
            return None
        firm_intakes = await self._store.intakes.filter({"firm_id": firm.id})
        assigned_count = sum(1 for i in firm_intakes if i.assigned_to)
        return members[assigned_count % len(members)]

    # =========================================================================
    # STAFF ACTIONS
    # =========================================================================

    async def update_status(
        self,
        intake_id: str,
        status: IntakeStatus | str,
        context: SessionContext | None = None,
    ) -> Intake:
        """Any status may follow any other; the client is notified."""
        new_status = IntakeStatus(status)
        intake = await self._get_intake(intake_id)
        old_status = intake.status

        updated = await self._store.intakes.update(intake_id, {"status": new_status})
        await self._functions.invoke(
            "notifyStatusChange",
            {
                "intake_id": intake_id,
                "old_status": IntakeStatus(old_status).value,
                "new_status": new_status.value,
            },
            context,
        )
        return updated

    async def assign(self, intake_id: str, assignee: str | None) -> Intake:
        """Assign to a team member; empty clears the assignment."""
        await self._get_intake(intake_id)
        return await self._store.intakes.update(intake_id, {"assigned_to": assignee or None})

    async def add_tag(self, intake_id: str, tag: str) -> Intake:
        tag = tag.strip()
        if not tag:
            raise ValueError("Tag must not be empty")
        intake = await self._get_intake(intake_id)
        if tag in intake.tags:
            raise DuplicateTagError(f"Tag {tag!r} already exists")
        return await self._store.intakes.update(intake_id, {"tags": [*intake.tags, tag]})

    async def remove_tag(self, intake_id: str, tag: str) -> Intake:
        intake = await self._get_intake(intake_id)
        return await self._store.intakes.update(
            intake_id, {"tags": [t for t in intake.tags if t != tag]}
        )

    async def save_notes(self, intake_id: str, notes: str) -> Intake:
        await self._get_intake(intake_id)
        return await self._store.intakes.update(intake_id, {"internal_notes": notes})

    async def schedule_follow_up(
        self,
        intake_id: str,
        on: date | None = None,
        today: date | None = None,
    ) -> Intake:
        """Set the follow-up date; defaults to today + the firm's cadence."""
        intake = await self._get_intake(intake_id)
        if on is None:
            firm = await self._store.firms.get(intake.firm_id) if intake.firm_id else None
            days = (firm.follow_up_days if firm else None) or self._settings.default_follow_up_days
            on = (today or date.today()) + timedelta(days=days)
        return await self._store.intakes.update(
            intake_id, {"next_follow_up_date": on.isoformat()}
        )

    async def bulk_update(self, intake_ids: list[str], action: BulkAction, value: Any) -> int:
        """Apply one action to many intakes. Returns how many were written."""
        if action not in ("status", "assign", "tag"):
            raise ValueError(f"Unknown bulk action: {action}")

        updated = 0
        for intake_id in intake_ids:
            if action == "status":
                patch = {"status": IntakeStatus(value)}
            elif action == "assign":
                patch = {"assigned_to": value or None}
            else:
                intake = await self._get_intake(intake_id)
                if value in intake.tags:
                    continue
                patch = {"tags": [*intake.tags, value]}
            await self._store.intakes.update(intake_id, patch)
            updated += 1

        logger.info(f"Bulk {action} applied to {updated}/{len(intake_ids)} intakes")
        return updated

    # =========================================================================
    # CLIENT PORTAL
    # =========================================================================

    async def verify_client_access(self, intake_id: str, email: str) -> ClientPortalView:
        """Grant access when ``email`` matches the intake's client e-mail."""
        email = email.strip()
        if not email:
            raise AccessDeniedError("Please enter your email address")
        intake = await self._get_intake(intake_id)
        if (intake.client_email or "").lower() != email.lower():
            raise AccessDeniedError("Email does not match our records")

        emails = await self._store.email_history.filter({"intake_id": intake_id}, "-created_date")
        return ClientPortalView(intake=intake, emails=emails)

    # =========================================================================
    # MESSAGES
    # =========================================================================

    async def list_messages(self, intake_id: str) -> list[Message]:
        return await self._store.messages.filter({"intake_id": intake_id}, "-created_date")

    async def post_message(
        self,
        intake: Intake,
        content: str,
        sender_type: SenderType | str = SenderType.STAFF,
        attachments: list[str] | None = None,
        context: SessionContext | None = None,
    ) -> Message:
        """Post to the intake's thread as staff (needs ``context``) or as the client."""
        sender_type = SenderType(sender_type)
        attachments = list(attachments or [])
        if not content.strip() and not attachments:
            raise ValueError("Message needs content or an attachment")

        if sender_type == SenderType.STAFF:
            if context is None:
                raise ValueError("Staff messages need a session context")
            sender_email, sender_name = context.email, context.display_name
        else:
            sender_email, sender_name = intake.client_email, intake.client_name

        return await self._store.messages.create(
            {
                "intake_id": intake.id,
                "sender_email": sender_email,
                "sender_name": sender_name,
                "sender_type": sender_type,
                "content": content,
                "attachments": attachments,
                "read": False,
            }
        )

    async def mark_messages_read(
        self,
        intake_id: str,
        reader_type: SenderType | str = SenderType.STAFF,
    ) -> int:
        """Flip ``read`` on unread messages sent by the other party."""
        reader_type = SenderType(reader_type)
        other = SenderType.CLIENT if reader_type == SenderType.STAFF else SenderType.STAFF
        # Older messages carry no ``read`` key at all; they count as unread.
        thread = await self._store.messages.filter(
            {"intake_id": intake_id, "sender_type": other.value}
        )
        unread = [m for m in thread if not m.read]
        for message in unread:
            await self._store.messages.update(message.id, {"read": True})
        return len(unread)

    # =========================================================================
    # ANALYTICS
    # =========================================================================

    async def analytics(
        self,
        firm_id: str,
        days: int = 30,
        now: datetime | None = None,
    ) -> IntakeAnalytics:
        """
        Dashboard metrics over the firm's intakes created in the last ``days`` days.

        - urgent: ``ai_urgency`` is high or the status is urgent
        - response rate: reviewed or archived over total, rounded half up
        - practice areas: AI area, else the submitted one, else "Unknown"
        - timeline: the last seven UTC days, oldest first, regardless of ``days``

        Intakes without a parseable ``created_date`` fall outside every window.
        """
        if days < 1:
            raise ValueError("days must be at least 1")
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        cutoff = now - timedelta(days=days)

        recent = [
            intake
            for intake in await self._store.intakes.filter({"firm_id": firm_id})
            if (created := _parse_timestamp(intake.created_date)) is not None
            and created >= cutoff
        ]

        total = len(recent)
        urgent = sum(
            1
            for i in recent
            if i.ai_urgency == UrgencyLevel.HIGH or i.status == IntakeStatus.URGENT
        )
        reviewed = sum(
            1 for i in recent if i.status in (IntakeStatus.REVIEWED, IntakeStatus.ARCHIVED)
        )

        areas: dict[str, int] = {}
        for intake in recent:
            area = intake.effective_practice_area or "Unknown"
            areas[area] = areas.get(area, 0) + 1

        urgency = []
        for level in (UrgencyLevel.HIGH, UrgencyLevel.MEDIUM, UrgencyLevel.LOW):
            count = sum(1 for i in recent if i.ai_urgency == level)
            if count:
                urgency.append(CountBucket(name=level.value.capitalize(), value=count))

        today = now.astimezone(timezone.utc).date()
        timeline = []
        for offset in range(TIMELINE_DAYS - 1, -1, -1):
            day = (today - timedelta(days=offset)).isoformat()
            count = sum(1 for i in recent if (i.created_date or "")[:10] == day)
            timeline.append(DayCount(date=day, intakes=count))

        return IntakeAnalytics(
            days=days,
            total_intakes=total,
            urgent_intakes=urgent,
            reviewed_intakes=reviewed,
            response_rate=int(reviewed * 100 / total + 0.5) if total else 0,
            practice_areas=[CountBucket(name=k, value=v) for k, v in areas.items()],
            urgency=urgency,
            timeline=timeline,
        )


def _parse_timestamp(value: str | None) -> datetime | None:
    """Aware datetime for a stored ISO timestamp; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
