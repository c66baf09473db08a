"""
In-Memory Storage

Used by tests and whenever Google Sheets is not configured. Data lives
for the life of the process.
"""

from typing import Optional
from uuid import UUID

from costpilot.models.audit import AuditEvent
from costpilot.models.profile import UserProfile
from costpilot.services.storage.interface import (
    AuditStorageInterface,
    NotFoundError,
    ProfileStorageInterface,
)


class InMemoryProfileStorage(ProfileStorageInterface):

    def __init__(self):
        self._profiles: dict[str, dict] = {}

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        document = self._profiles.get(user_id)
        # Stored as documents so callers can't mutate what we hold
        return UserProfile.model_validate(document) if document is not None else None

    async def save_profile(self, user_id: str, profile: UserProfile) -> bool:
        self._profiles[user_id] = profile.to_document()
        return True

    async def delete_profile(self, user_id: str) -> bool:
        if user_id not in self._profiles:
            raise NotFoundError(f"Profile not found: {user_id}")
        del self._profiles[user_id]
        return True

    async def list_user_ids(self) -> list[str]:
        return list(self._profiles)


class InMemoryAuditStorage(AuditStorageInterface):

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return sorted(self._events, key=lambda e: e.timestamp, reverse=True)[:limit]
