"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the persistent backend; the in-memory backend serves
tests and storage-less runs.
"""

from costpilot.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    ProfileStorageInterface,
    StorageConnectionError,
    StorageError,
)
from costpilot.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsProfileStorage,
)
from costpilot.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryProfileStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ProfileStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsProfileStorage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryProfileStorage",
]
