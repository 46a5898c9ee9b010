"""
Function Dispatcher: named "server actions" evaluated without a backend.

Actions:
- processIntake: urgency heuristic + fallback summary written onto the Intake
- createCalendarEvent: returns a fresh event id (no calendar integration)
- sendClientEmail: records an EmailHistory row (no delivery)
- notifyStatusChange, autoFollowUp: logged no-ops
- exportIntakes: JSON-quoted CSV of a firm's intakes
- ocrDocument: empty text
- anything else: generic success

Expected absence (e.g. unknown intake id) is reported with ``ok=False``;
every other failure propagates.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel

from ..core.config import Settings
from ..core.http import ApiClient
from ..repositories import new_id
from ..schemas import EmailDirection, EmailStatus
from .auth import SessionContext
from .entity_store import EntityStore
from .export import build_csv
from .urgency import UrgencyClassifier

logger = logging.getLogger(__name__)

Payload = dict[str, Any]


class FunctionResult(BaseModel):
    """Envelope around an action's result body."""

    data: Any = None

    @property
    def ok(self) -> bool:
        if isinstance(self.data, dict):
            return bool(self.data.get("ok", True))
        return self.data is not None


def fallback_summary(existing: str | None, issue: str | None) -> str:
    """Keep an existing summary, else derive one from the issue text."""
    if existing:
        return existing
    if issue:
        return f"Summary: {issue}"
    return "Summary: Intake received."


class FunctionDispatcher(ABC):
    @abstractmethod
    async def invoke(
        self,
        name: str,
        payload: Payload | None = None,
        context: SessionContext | None = None,
    ) -> FunctionResult:
        pass


class LocalFunctionDispatcher(FunctionDispatcher):
    """Evaluates actions against the entity store."""

    def __init__(self, store: EntityStore, classifier: UrgencyClassifier):
        self._store = store
        self._classifier = classifier
        self._handlers: dict[
            str, Callable[[Payload, SessionContext | None], Awaitable[Payload]]
        ] = {
            "processIntake": self.process_intake,
            "createCalendarEvent": self.create_calendar_event,
            "sendClientEmail": self.send_client_email,
            "notifyStatusChange": self.notify_status_change,
            "autoFollowUp": self.auto_follow_up,
            "exportIntakes": self.export_intakes,
            "ocrDocument": self.ocr_document,
        }

    @property
    def names(self) -> list[str]:
        return list(self._handlers)

    async def invoke(
        self,
        name: str,
        payload: Payload | None = None,
        context: SessionContext | None = None,
    ) -> FunctionResult:
        handler = self._handlers.get(name)
        if handler is None:
            logger.debug(f"No local action named {name!r}; returning generic success")
            return FunctionResult(data={"ok": True})
        return FunctionResult(data=await handler(payload or {}, context))

    # =========================================================================
    # ACTIONS
    # =========================================================================

    async def process_intake(self, payload: Payload, context: SessionContext | None) -> Payload:
        """Score urgency from keywords and store risk + fallback summary."""
        intake_id = payload.get("intake_id")
        intake = await self._store.intakes.get(intake_id) if intake_id else None
        if intake is None:
            logger.info(f"processIntake: intake {intake_id} not found")
            return {"ok": False}

        assessment = self._classifier.classify(f"{intake.issue_text} {intake.notes_text}")
        summary = fallback_summary(intake.ai_summary, intake.issue_text)

        await self._store.intakes.update(
            intake.id,
            {
                "ai_risk": assessment.risk.value,
                "ai_urgency": assessment.urgency.value,
                "ai_summary": summary,
            },
        )
        logger.info(
            f"processIntake: intake {intake.id} scored {assessment.score} -> {assessment.risk.value}"
        )
        return {
            "ok": True,
            "risk": assessment.risk.value,
            "urgency": assessment.urgency.value,
            "summary": summary,
            "matched_keywords": assessment.matched_keywords,
        }

    async def create_calendar_event(self, payload: Payload, context: SessionContext | None) -> Payload:
        return {"ok": True, "calendar_event_id": new_id()}

    async def send_client_email(self, payload: Payload, context: SessionContext | None) -> Payload:
        """Record the e-mail as sent. Nothing is delivered."""
        email = await self._store.email_history.create(
            {
                "intake_id": payload.get("intake_id"),
                "recipient": payload.get("recipient") or payload.get("to"),
                "subject": payload.get("subject"),
                "body": payload.get("body"),
                "status": EmailStatus.SENT,
                "direction": EmailDirection.OUTBOUND,
                "sent_by": context.email if context else None,
            }
        )
        logger.info(f"[EMAIL] To: {email.recipient}, Subject: {email.subject}")
        return {"ok": True, "email_id": email.id}

    async def notify_status_change(self, payload: Payload, context: SessionContext | None) -> Payload:
        logger.info(
            f"[NOTIFY] Intake {payload.get('intake_id')}: "
            f"{payload.get('old_status')} -> {payload.get('new_status')}"
        )
        return {"ok": True}

    async def auto_follow_up(self, payload: Payload, context: SessionContext | None) -> Payload:
        logger.info(f"[FOLLOW-UP] Intake {payload.get('intake_id')}")
        return {"ok": True}

    async def export_intakes(self, payload: Payload, context: SessionContext | None) -> Payload:
        """CSV over the firm's intakes, newest first."""
        where: Payload = dict(payload.get("filters") or {})
        if payload.get("firm_id"):
            where["firm_id"] = payload["firm_id"]
        records = await self._store.intakes.repository.filter(where, "-created_date")
        return {"ok": True, "csv": build_csv(records)}

    async def ocr_document(self, payload: Payload, context: SessionContext | None) -> Payload:
        return {"ok": True, "text": ""}


class RemoteFunctionDispatcher(FunctionDispatcher):
    """``POST /api/functions/{name}``; the decoded body becomes the result."""

    def __init__(self, client: ApiClient, settings: Settings):
        self._client = client
        self._prefix = settings.api_prefix.rstrip("/")

    async def invoke(
        self,
        name: str,
        payload: Payload | None = None,
        context: SessionContext | None = None,
    ) -> FunctionResult:
        data = await self._client.post(f"{self._prefix}/functions/{name}", payload or {})
        return FunctionResult(data=data)
