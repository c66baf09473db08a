"""Services package."""

from costpilot.services.location import LocationService, RouteService
from costpilot.services.storage import (
    AuditStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsProfileStorage,
    InMemoryAuditStorage,
    InMemoryProfileStorage,
    NotFoundError,
    ProfileStorageInterface,
    StorageConnectionError,
    StorageError,
)
from costpilot.services.subsidies import SubsidyCatalog

__all__ = [
    # Location services
    "LocationService",
    "RouteService",
    # Subsidy services
    "SubsidyCatalog",
    # Storage services
    "AuditStorageInterface",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsProfileStorage",
    "InMemoryAuditStorage",
    "InMemoryProfileStorage",
    "NotFoundError",
    "ProfileStorageInterface",
    "StorageConnectionError",
    "StorageError",
]
