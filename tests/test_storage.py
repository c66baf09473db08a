"""Tests for the in-memory and Google Sheets storage backends."""

import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from costpilot.models import AuditEventBuilder, UserProfile
from costpilot.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsProfileStorage,
    InMemoryAuditStorage,
    InMemoryProfileStorage,
    NotFoundError,
    StorageError,
)
from costpilot.services.storage.google_sheets import AUDIT_COLUMNS, PROFILE_COLUMNS


class FakeWorksheet:
    """Holds rows like a gspread Worksheet; row 1 is the header."""

    def __init__(self, header):
        self.rows = [list(header)]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append([str(v) for v in row])

    def update(self, range_name, values, value_input_option=None):
        index = int(range_name.split(":")[0][1:]) - 1
        self.rows[index] = [str(v) for v in values[0]]

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:
    def __init__(self):
        self.profiles = FakeWorksheet(PROFILE_COLUMNS)
        self.audit = FakeWorksheet(AUDIT_COLUMNS)

    def get_profiles_sheet(self):
        return self.profiles

    def get_audit_sheet(self):
        return self.audit


class BrokenSheetsClient:
    def get_profiles_sheet(self):
        raise ConnectionError("sheets offline")

    def get_audit_sheet(self):
        raise ConnectionError("sheets offline")


class TestInMemoryProfileStorage:
    """Tests for InMemoryProfileStorage."""

    @pytest.mark.asyncio
    async def test_save_and_get(self):
        """Test a round trip through storage."""
        storage = InMemoryProfileStorage()
        await storage.save_profile("u1", UserProfile(name="Aina", income=4200))

        profile = await storage.get_profile("u1")
        assert profile.name == "Aina"
        assert profile.income == 4200
        assert await storage.list_user_ids() == ["u1"]

    @pytest.mark.asyncio
    async def test_returned_profile_is_a_copy(self):
        """Test that callers cannot mutate stored data."""
        storage = InMemoryProfileStorage()
        await storage.save_profile("u1", UserProfile())

        profile = await storage.get_profile("u1")
        profile.optimized_categories.append("housing")

        assert (await storage.get_profile("u1")).optimized_categories == []

    @pytest.mark.asyncio
    async def test_missing_profile(self):
        """Test get and delete of an unknown user."""
        storage = InMemoryProfileStorage()

        assert await storage.get_profile("nobody") is None
        with pytest.raises(NotFoundError):
            await storage.delete_profile("nobody")


class TestInMemoryAuditStorage:
    """Tests for InMemoryAuditStorage."""

    @pytest.mark.asyncio
    async def test_correlation_lookup(self):
        """Test filtering by correlation id."""
        storage = InMemoryAuditStorage()
        correlation_id = uuid4()
        await storage.append_event(AuditEventBuilder.stress_computed(40.0, "Moderate", correlation_id))
        await storage.append_event(AuditEventBuilder.stress_computed(10.0, "Low", uuid4()))

        events = await storage.get_events_by_correlation_id(correlation_id)
        assert [e.details["stress_score"] for e in events] == [40.0]

    @pytest.mark.asyncio
    async def test_recent_events_newest_first(self):
        """Test ordering and the limit."""
        storage = InMemoryAuditStorage()
        start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        for minute, score in enumerate((1.0, 2.0, 3.0)):
            event = AuditEventBuilder.stress_computed(score, "Low", None)
            await storage.append_event(
                event.model_copy(update={"timestamp": start + timedelta(minutes=minute)})
            )

        events = await storage.get_recent_events(limit=2)
        assert [e.details["stress_score"] for e in events] == [3.0, 2.0]


class TestGoogleSheetsProfileStorage:
    """Tests for GoogleSheetsProfileStorage against a fake worksheet."""

    @pytest.mark.asyncio
    async def test_save_appends_then_updates(self):
        """Test that one user keeps one row."""
        client = FakeSheetsClient()
        storage = GoogleSheetsProfileStorage(client)

        await storage.save_profile("u1", UserProfile(rent=1200))
        await storage.save_profile("u1", UserProfile(rent=1500))

        assert len(client.profiles.rows) == 2
        assert json.loads(client.profiles.rows[1][2])["rent"] == 1500
        assert (await storage.get_profile("u1")).rent == 1500

    @pytest.mark.asyncio
    async def test_stored_document_is_camel_case(self):
        """Test the JSON column."""
        client = FakeSheetsClient()
        await GoogleSheetsProfileStorage(client).save_profile("u1", UserProfile(transport_cost=250))

        document = json.loads(client.profiles.rows[1][2])
        assert document["transportCost"] == 250
        assert "transport_cost" not in document

    @pytest.mark.asyncio
    async def test_delete_and_list(self):
        """Test row deletion."""
        client = FakeSheetsClient()
        storage = GoogleSheetsProfileStorage(client)
        await storage.save_profile("u1", UserProfile())
        await storage.save_profile("u2", UserProfile())

        await storage.delete_profile("u1")

        assert await storage.list_user_ids() == ["u2"]
        with pytest.raises(NotFoundError):
            await storage.delete_profile("u1")

    @pytest.mark.asyncio
    async def test_read_failure_is_a_storage_error(self):
        """Test that client errors are wrapped."""
        storage = GoogleSheetsProfileStorage(BrokenSheetsClient())
        with pytest.raises(StorageError, match="Failed to get profile"):
            await storage.get_profile("u1")


class TestGoogleSheetsAuditStorage:
    """Tests for GoogleSheetsAuditStorage."""

    @pytest.mark.asyncio
    async def test_append_and_read_back(self):
        """Test the row layout survives a round trip."""
        client = FakeSheetsClient()
        storage = GoogleSheetsAuditStorage(client)
        correlation_id = uuid4()
        event = AuditEventBuilder.profile_updated("u1", ["rent"], correlation_id)

        assert await storage.append_event(event)

        events = await storage.get_events_by_correlation_id(correlation_id)
        assert len(events) == 1
        assert events[0].event_id == event.event_id
        assert events[0].entity_id == "u1"
        assert events[0].details == {"fields": ["rent"]}
        assert events[0].is_user_action is True

    @pytest.mark.asyncio
    async def test_malformed_rows_are_skipped(self):
        """Test that a hand-edited row does not break reads."""
        client = FakeSheetsClient()
        client.audit.rows.append(["not-a-uuid", "yesterday"])
        storage = GoogleSheetsAuditStorage(client)
        await storage.append_event(AuditEventBuilder.stress_computed(12.0, "Low", None))

        events = await storage.get_recent_events()
        assert len(events) == 1

    @pytest.mark.asyncio
    async def test_append_never_raises(self):
        """Test that a failed write reports False."""
        storage = GoogleSheetsAuditStorage(BrokenSheetsClient())
        event = AuditEventBuilder.stress_computed(12.0, "Low", None)
        assert await storage.append_event(event) is False
