"""
Tests for the Entity Store - identical behavior on every backend.

These tests verify:
1. CREATE: fresh id, equal timestamps, caller fields kept
2. UPDATE: merge, identity preserved, strictly increasing updated_date
3. DELETE: idempotent
4. FILTER: exact equality on every key, strict about booleans, enums by value
5. SORT: ascending/descending, None and missing values last
"""

import pytest

from intake_desk.core import RecordNotFoundError, UnknownEntityError
from intake_desk.schemas import IntakeStatus


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def intake_data() -> dict:
    """A typical public-form submission."""
    return {
        "firm_id": "firm-1",
        "client_name": "Dana Whitfield",
        "client_email": "dana@example.com",
        "practice_area": "Family Law",
        "issue_description": "Custody hearing next month",
        "consent_given": True,
    }


# =============================================================================
# TEST: CREATE / GET
# =============================================================================


class TestCreate:
    """Tests for create and get."""

    async def test_create_assigns_id_and_equal_timestamps(self, client, intake_data):
        """A new record gets an id and created_date == updated_date."""
        intake = await client.entities.intakes.create(intake_data)

        assert intake.id
        assert intake.created_date
        assert intake.created_date == intake.updated_date
        assert intake.client_name == "Dana Whitfield"
        assert intake.consent_given is True

    async def test_create_generates_distinct_ids(self, client, intake_data):
        first = await client.entities.intakes.create(intake_data)
        second = await client.entities.intakes.create(intake_data)

        assert first.id != second.id

    async def test_create_ignores_caller_system_fields(self, client, intake_data):
        """Caller-supplied id and timestamps never override the store's."""
        intake = await client.entities.intakes.create(
            {**intake_data, "id": "chosen-id", "created_date": "1999-01-01"}
        )

        assert intake.id != "chosen-id"
        assert intake.created_date != "1999-01-01"

    async def test_create_keeps_unknown_fields(self, client, intake_data):
        """Fields outside the typed schema round-trip untouched."""
        intake = await client.entities.intakes.create({**intake_data, "referral_source": "radio"})

        fetched = await client.entities.intakes.get(intake.id)
        assert fetched.to_record()["referral_source"] == "radio"

    async def test_get_returns_created_record(self, client, intake_data):
        intake = await client.entities.intakes.create(intake_data)

        fetched = await client.entities.intakes.get(intake.id)

        assert fetched is not None
        assert fetched.to_record() == intake.to_record()

    async def test_get_unknown_id_returns_none(self, client):
        """Absence is None, never an error."""
        assert await client.entities.intakes.get("does-not-exist") is None

    async def test_create_validates_fields(self, client):
        """Typed fields are validated before anything is written."""
        with pytest.raises(ValueError):
            await client.entities.intakes.create({"status": "pending"})

        assert await client.entities.intakes.filter() == []


# =============================================================================
# TEST: UPDATE
# =============================================================================


class TestUpdate:
    """Tests for update (merge semantics)."""

    async def test_update_merges_patch(self, client, intake_data):
        """Patched keys change, everything else stays."""
        intake = await client.entities.intakes.create(intake_data)

        updated = await client.entities.intakes.update(intake.id, {"status": "urgent"})

        assert updated.status == "urgent"
        assert updated.client_name == intake.client_name
        assert updated.issue_description == intake.issue_description

    async def test_update_preserves_identity(self, client, intake_data):
        """id and created_date are fixed at creation."""
        intake = await client.entities.intakes.create(intake_data)

        updated = await client.entities.intakes.update(
            intake.id,
            {"id": "other", "created_date": "2000-01-01T00:00:00", "tags": ["vip"]},
        )

        assert updated.id == intake.id
        assert updated.created_date == intake.created_date
        assert updated.tags == ["vip"]

    async def test_updated_date_strictly_increases(self, client, intake_data):
        """Back-to-back updates still move updated_date forward."""
        intake = await client.entities.intakes.create(intake_data)

        first = await client.entities.intakes.update(intake.id, {"internal_notes": "a"})
        second = await client.entities.intakes.update(intake.id, {"internal_notes": "b"})

        assert first.updated_date > intake.created_date
        assert second.updated_date > first.updated_date

    async def test_update_is_persisted(self, client, intake_data):
        intake = await client.entities.intakes.create(intake_data)
        await client.entities.intakes.update(intake.id, {"assigned_to": "ann@firm.test"})

        fetched = await client.entities.intakes.get(intake.id)

        assert fetched.assigned_to == "ann@firm.test"

    async def test_update_unknown_id_raises(self, client):
        with pytest.raises(RecordNotFoundError) as exc_info:
            await client.entities.intakes.update("missing", {"status": "reviewed"})

        assert "missing" in str(exc_info.value)


# =============================================================================
# TEST: DELETE
# =============================================================================


class TestDelete:
    """Tests for delete."""

    async def test_delete_removes_record(self, client, intake_data):
        intake = await client.entities.intakes.create(intake_data)

        result = await client.entities.intakes.delete(intake.id)

        assert result == {"ok": True}
        assert await client.entities.intakes.get(intake.id) is None

    async def test_delete_is_idempotent(self, client, intake_data):
        """Deleting a missing record succeeds and changes nothing."""
        intake = await client.entities.intakes.create(intake_data)

        assert await client.entities.intakes.delete("never-existed") == {"ok": True}
        assert await client.entities.intakes.get(intake.id) is not None

    async def test_delete_only_touches_its_entity_type(self, client, intake_data):
        intake = await client.entities.intakes.create(intake_data)

        await client.entities.messages.delete(intake.id)

        assert await client.entities.intakes.get(intake.id) is not None


# =============================================================================
# TEST: FILTER
# =============================================================================


class TestFilter:
    """Tests for filter (exact equality on every key)."""

    async def test_filter_without_criteria_returns_all(self, client, intake_data):
        await client.entities.intakes.create(intake_data)
        await client.entities.intakes.create({**intake_data, "firm_id": "firm-2"})

        assert len(await client.entities.intakes.filter()) == 2

    async def test_filter_matches_every_key(self, client, intake_data):
        match = await client.entities.intakes.create(intake_data)
        await client.entities.intakes.create({**intake_data, "firm_id": "firm-2"})
        await client.entities.intakes.create({**intake_data, "status": "archived"})

        results = await client.entities.intakes.filter({"firm_id": "firm-1", "status": "new"})

        assert [r.id for r in results] == [match.id]

    async def test_filter_missing_field_never_matches(self, client, intake_data):
        await client.entities.intakes.create(intake_data)

        assert await client.entities.intakes.filter({"assigned_to": "ann@firm.test"}) == []

    async def test_filter_boolean_is_strict(self, client):
        """A boolean criterion does not match 0 or 1."""
        await client.entities.messages.create({"intake_id": "i-1", "priority": 0})
        unread = await client.entities.messages.create({"intake_id": "i-1", "content": "hi"})

        assert await client.entities.messages.filter({"priority": False}) == []
        results = await client.entities.messages.filter({"read": False, "content": "hi"})
        assert [m.id for m in results] == [unread.id]

    async def test_filter_accepts_enum_values(self, client, intake_data):
        urgent = await client.entities.intakes.create({**intake_data, "status": "urgent"})
        await client.entities.intakes.create(intake_data)

        results = await client.entities.intakes.filter({"status": IntakeStatus.URGENT})

        assert [r.id for r in results] == [urgent.id]

    async def test_filter_skips_invalid_stored_records(self, local_client, intake_data):
        """A stored record the schema rejects does not hide the valid ones."""
        valid = await local_client.entities.intakes.create(intake_data)
        await local_client.entities.intakes.repository.create({"status": "pending"})

        results = await local_client.entities.intakes.filter()

        assert [r.id for r in results] == [valid.id]
        assert len(await local_client.entities.intakes.repository.filter()) == 2

    async def test_filter_is_scoped_to_entity_type(self, client, intake_data):
        await client.entities.intakes.create(intake_data)

        assert await client.entities.messages.filter() == []


# =============================================================================
# TEST: SORT
# =============================================================================


class TestSort:
    """Tests for the ``order`` argument."""

    async def test_newest_first(self, client, intake_data):
        first = await client.entities.intakes.create(intake_data)
        second = await client.entities.intakes.create(intake_data)
        third = await client.entities.intakes.create(intake_data)

        results = await client.entities.intakes.filter({}, "-created_date")

        assert [r.id for r in results] == [third.id, second.id, first.id]

    async def test_ascending_order(self, client, intake_data):
        for name in ["Carol", "Alice", "Bob"]:
            await client.entities.intakes.create({**intake_data, "client_name": name})

        results = await client.entities.intakes.filter({}, "client_name")

        assert [r.client_name for r in results] == ["Alice", "Bob", "Carol"]

    async def test_missing_values_sort_last_both_ways(self, client, intake_data):
        """Records without the sort field come last ascending and descending."""
        unscored = await client.entities.intakes.create(intake_data)
        low = await client.entities.intakes.create({**intake_data, "lead_score": 10})
        high = await client.entities.intakes.create({**intake_data, "lead_score": 80})

        ascending = await client.entities.intakes.filter({}, "lead_score")
        descending = await client.entities.intakes.filter({}, "-lead_score")

        assert [r.id for r in ascending] == [low.id, high.id, unscored.id]
        assert [r.id for r in descending] == [high.id, low.id, unscored.id]

    async def test_updated_date_reflects_latest_write(self, client, intake_data):
        first = await client.entities.intakes.create(intake_data)
        second = await client.entities.intakes.create(intake_data)
        await client.entities.intakes.update(first.id, {"status": "reviewed"})

        results = await client.entities.intakes.filter({}, "-updated_date")

        assert [r.id for r in results] == [first.id, second.id]


# =============================================================================
# TEST: STORE SURFACE
# =============================================================================


class TestEntityStore:
    """Tests for addressing entity sets by name."""

    async def test_entity_by_name(self, client):
        assert client.entities.entity("Firm") is client.entities.firms
        assert client.entities.entity_names == ["Firm", "Intake", "EmailHistory", "Message"]

    async def test_unknown_entity_raises(self, client):
        with pytest.raises(UnknownEntityError):
            client.entities.entity("Invoice")
