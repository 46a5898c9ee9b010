"""
Tests for the Function Dispatcher and its helpers.

These tests verify:
1. URGENCY: keyword occurrence counts map to Low/Medium/High
2. processIntake: risk, urgency and summary written onto the intake
3. sendClientEmail: an EmailHistory row is recorded
4. exportIntakes: JSON-quoted CSV
5. Other actions: stubs and generic success
"""

import pytest

from intake_desk.schemas import RiskLevel, UrgencyLevel
from intake_desk.services import (
    SessionContext,
    UrgencyClassifier,
    build_csv,
    encode_cell,
    fallback_summary,
)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def classifier(settings) -> UrgencyClassifier:
    return UrgencyClassifier.from_settings(settings)


@pytest.fixture
async def intake(local_client):
    """A stored intake with an urgent-sounding issue."""
    return await local_client.entities.intakes.create(
        {
            "firm_id": "firm-1",
            "client_name": "Dana Whitfield",
            "client_email": "dana@example.com",
            "issue_description": "There is an eviction and a court deadline",
        }
    )


# =============================================================================
# TEST: URGENCY HEURISTIC
# =============================================================================


class TestUrgencyClassifier:
    """Tests for the keyword-count classifier."""

    @pytest.mark.parametrize(
        "text,risk",
        [
            ("I would like to update my will.", RiskLevel.LOW),
            ("Custody question.", RiskLevel.LOW),
            ("Custody dispute with a court date.", RiskLevel.MEDIUM),
            ("There is an eviction and a court deadline", RiskLevel.HIGH),
            ("", RiskLevel.LOW),
        ],
    )
    def test_thresholds(self, classifier, text, risk):
        assert classifier.classify(text).risk == risk

    def test_counts_occurrences_not_distinct_keywords(self, classifier):
        """Repeating one keyword raises the score each time."""
        assessment = classifier.classify("Court on Monday, court again Friday, court after.")

        assert assessment.score == 3
        assert assessment.risk == RiskLevel.HIGH
        assert assessment.matched_keywords == ["court"]

    def test_repeated_single_keyword_is_medium(self, classifier):
        """One distinct keyword said twice scores 2, not 1."""
        assessment = classifier.classify("A court letter about a court fee")

        assert assessment.score == 2
        assert assessment.risk == RiskLevel.MEDIUM
        assert assessment.matched_keywords == ["court"]

    def test_case_insensitive_substring_match(self, classifier):
        """Keywords match inside longer words, in any case."""
        assessment = classifier.classify("URGENTLY need help with the Courthouse")

        assert assessment.score == 2
        assert assessment.urgency == UrgencyLevel.MEDIUM

    def test_custom_thresholds(self):
        classifier = UrgencyClassifier(["police"], high_threshold=1, medium_threshold=1)

        assert classifier.classify("the police came").risk == RiskLevel.HIGH

    def test_invalid_thresholds_rejected(self):
        with pytest.raises(ValueError):
            UrgencyClassifier(["court"], high_threshold=2, medium_threshold=3)


class TestFallbackSummary:
    """Tests for the summary fallback."""

    def test_existing_summary_kept(self):
        assert fallback_summary("Already summarised", "issue") == "Already summarised"

    def test_derived_from_issue(self):
        assert fallback_summary(None, "Landlord dispute") == "Summary: Landlord dispute"

    def test_default_when_no_text(self):
        assert fallback_summary("", "") == "Summary: Intake received."


# =============================================================================
# TEST: processIntake
# =============================================================================


class TestProcessIntake:
    """Tests for the processIntake action."""

    async def test_scores_and_writes_back(self, local_client, intake):
        result = await local_client.functions.invoke("processIntake", {"intake_id": intake.id})

        assert result.ok is True
        assert result.data["risk"] == "High"
        assert result.data["urgency"] == "high"

        stored = await local_client.entities.intakes.get(intake.id)
        assert stored.ai_risk == "High"
        assert stored.ai_urgency == "high"
        assert stored.ai_summary == "Summary: There is an eviction and a court deadline"

    async def test_keeps_existing_summary(self, local_client, intake):
        await local_client.entities.intakes.update(intake.id, {"ai_summary": "Reviewed by Ann"})

        await local_client.functions.invoke("processIntake", {"intake_id": intake.id})

        stored = await local_client.entities.intakes.get(intake.id)
        assert stored.ai_summary == "Reviewed by Ann"

    async def test_internal_notes_count_toward_score(self, local_client):
        intake = await local_client.entities.intakes.create(
            {"issue_description": "Question about custody", "internal_notes": "Police report filed"}
        )

        result = await local_client.functions.invoke("processIntake", {"intake_id": intake.id})

        assert result.data["risk"] == "Medium"

    async def test_legacy_text_fields(self, local_client):
        """Older records carry ``issue_summary`` and ``notes``."""
        intake = await local_client.entities.intakes.create(
            {"issue_summary": "urgent custody", "notes": "court"}
        )

        result = await local_client.functions.invoke("processIntake", {"intake_id": intake.id})

        assert result.data["risk"] == "High"
        assert result.data["summary"] == "Summary: urgent custody"

    async def test_unknown_intake_reports_not_ok(self, local_client):
        """A missing intake is ok=False, not an exception."""
        result = await local_client.functions.invoke("processIntake", {"intake_id": "missing"})

        assert result.ok is False
        assert result.data == {"ok": False}

    async def test_missing_intake_id_reports_not_ok(self, local_client):
        result = await local_client.functions.invoke("processIntake")

        assert result.ok is False


# =============================================================================
# TEST: OTHER ACTIONS
# =============================================================================


class TestActions:
    """Tests for the remaining named actions."""

    async def test_send_client_email_records_history(self, local_client, intake):
        session = await local_client.auth.me()

        result = await local_client.functions.invoke(
            "sendClientEmail",
            {
                "intake_id": intake.id,
                "recipient": intake.client_email,
                "subject": "Next steps",
                "body": "Please send your lease.",
            },
            session,
        )

        assert result.ok
        emails = await local_client.entities.email_history.filter({"intake_id": intake.id})
        assert [e.id for e in emails] == [result.data["email_id"]]
        assert emails[0].status == "sent"
        assert emails[0].direction == "outbound"
        assert emails[0].sent_by == session.email

    async def test_send_client_email_accepts_to(self, local_client, intake):
        await local_client.functions.invoke(
            "sendClientEmail", {"intake_id": intake.id, "to": "dana@example.com"}
        )

        emails = await local_client.entities.email_history.filter({"intake_id": intake.id})
        assert emails[0].recipient == "dana@example.com"

    async def test_create_calendar_event_returns_id(self, local_client):
        result = await local_client.functions.invoke("createCalendarEvent", {"title": "Consult"})

        assert result.ok
        assert result.data["calendar_event_id"]

    async def test_ocr_document_returns_empty_text(self, local_client):
        result = await local_client.functions.invoke("ocrDocument", {"file_url": "data:,"})

        assert result.data == {"ok": True, "text": ""}

    @pytest.mark.parametrize("name", ["notifyStatusChange", "autoFollowUp", "translateIntake"])
    async def test_generic_success(self, local_client, name):
        """Notification stubs and unknown names all succeed."""
        result = await local_client.functions.invoke(name, {"intake_id": "x"})

        assert result.data == {"ok": True}


# =============================================================================
# TEST: EXPORT
# =============================================================================


class TestExport:
    """Tests for the CSV export."""

    def test_build_csv_quotes_cells_as_json(self):
        csv = build_csv([{"id": "1", "client_name": "A,B"}])

        assert csv == 'id,client_name\n"1","A,B"'

    def test_build_csv_one_row_per_record(self):
        csv = build_csv([{"id": "1", "client_name": "A,B"}, {"id": "2", "client_name": "C"}])

        assert csv == 'id,client_name\n"1","A,B"\n"2","C"'

    def test_build_csv_empty(self):
        assert build_csv([]) == "id"

    def test_header_follows_first_record(self):
        csv = build_csv([{"id": "1", "a": 1}, {"id": "2", "b": 2}])

        assert csv.split("\n") == ["id,a", '"1",1', '"2",""']

    def test_later_record_fields_outside_header(self):
        """Extra keys on later records are dropped; missing ones render as an empty string."""
        csv = build_csv(
            [
                {"id": "1", "client_name": "A", "status": "new"},
                {"id": "2", "client_name": "B", "tags": ["x"]},
                {"id": "3", "status": "urgent"},
            ]
        )

        assert csv.split("\n") == [
            "id,client_name,status",
            '"1","A","new"',
            '"2","B",""',
            '"3","","urgent"',
        ]
        assert "tags" not in csv

    @pytest.mark.parametrize(
        "value,encoded",
        [(None, '""'), ('say "hi"', '"say \\"hi\\""'), ("Zoë", '"Zoë"'), (["a", "b"], '["a","b"]')],
    )
    def test_encode_cell(self, value, encoded):
        assert encode_cell(value) == encoded

    async def test_export_intakes_for_firm(self, local_client):
        older = await local_client.entities.intakes.create({"firm_id": "f1", "client_name": "Old"})
        newer = await local_client.entities.intakes.create({"firm_id": "f1", "client_name": "New"})
        await local_client.entities.intakes.create({"firm_id": "f2", "client_name": "Other"})

        result = await local_client.functions.invoke("exportIntakes", {"firm_id": "f1"})

        lines = result.data["csv"].split("\n")
        header = lines[0].split(",")
        assert header[:3] == ["id", "created_date", "updated_date"]
        assert len(lines) == 3
        assert lines[1].startswith(f'"{newer.id}"')
        assert lines[2].startswith(f'"{older.id}"')

    async def test_export_intakes_with_filters(self, local_client):
        await local_client.entities.intakes.create({"firm_id": "f1", "status": "urgent"})
        await local_client.entities.intakes.create({"firm_id": "f1"})

        result = await local_client.functions.invoke(
            "exportIntakes", {"firm_id": "f1", "filters": {"status": "urgent"}}
        )

        assert len(result.data["csv"].split("\n")) == 2


class TestSessionContext:
    """Tests for the explicit session context."""

    async def test_display_name(self, local_client):
        session = await local_client.auth.me()

        assert isinstance(session, SessionContext)
        assert session.display_name == local_client.settings.demo_user_name
