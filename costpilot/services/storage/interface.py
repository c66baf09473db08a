"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for tests and storage-less runs
3. Keep the flows decoupled from the storage implementation

The interface is intentionally simple - a profile is one document per
user, and the audit log is append-only.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from costpilot.models.audit import AuditEvent
from costpilot.models.profile import UserProfile


class ProfileStorageInterface(ABC):
    """
    Abstract interface for profile storage.

    Any storage implementation (Google Sheets, a document store, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """
        Retrieve a user's profile.

        Returns:
            The profile if found, None otherwise
        """
        pass

    @abstractmethod
    async def save_profile(self, user_id: str, profile: UserProfile) -> bool:
        """
        Create or replace a user's profile.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def delete_profile(self, user_id: str) -> bool:
        """
        Delete a user's profile.

        Raises:
            NotFoundError: If the profile doesn't exist
        """
        pass

    @abstractmethod
    async def list_user_ids(self) -> list[str]:
        """All user ids with a stored profile."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one analysis run).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
