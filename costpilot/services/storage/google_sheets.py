"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the storage backend because:
1. Non-technical users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (last write wins for a profile)
- Limited query capabilities (we filter in Python)

Profiles are documents, so each row holds the user id, an update
timestamp and the profile as JSON. The implementation follows the
abstract interface, so the backend can be swapped without touching
the flows.
"""

import json
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from costpilot.config import get_settings
from costpilot.models.audit import AuditEvent, AuditEventType, AuditSeverity
from costpilot.models.profile import UserProfile
from costpilot.services.storage.interface import (
    AuditStorageInterface,
    NotFoundError,
    ProfileStorageInterface,
    StorageConnectionError,
    StorageError,
)


logger = structlog.get_logger(__name__)

PROFILE_COLUMNS = [
    "user_id",
    "updated_at",
    "profile_json",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(self, title: str, columns: list[str], rows: int) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(title=title, rows=rows, cols=len(columns))
            sheet.append_row(columns)
        return sheet

    def get_profiles_sheet(self) -> gspread.Worksheet:
        """Get or create the Profiles worksheet."""
        return self._get_or_create_sheet(
            self._settings.profiles_sheet_name, PROFILE_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


def _safe_get(row: list, index: int, default: str = "") -> str:
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


class GoogleSheetsProfileStorage(ProfileStorageInterface):
    """
    Google Sheets implementation of profile storage.

    One row per user: [user_id, updated_at, profile_json].
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _profile_to_row(self, user_id: str, profile: UserProfile) -> list:
        return [
            user_id,
            datetime.now(timezone.utc).isoformat(),
            json.dumps(profile.to_document()),
        ]

    def _row_to_profile(self, row: list) -> UserProfile:
        return UserProfile.model_validate(json.loads(_safe_get(row, 2, "{}")))

    def _find_row(self, sheet: gspread.Worksheet, user_id: str) -> tuple[Optional[int], Optional[list]]:
        """Return (1-based row index, row) for a user, or (None, None)."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is the header
            if row and row[0] == user_id:
                return idx, row
        return None, None

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        try:
            sheet = self._client.get_profiles_sheet()
            _, row = self._find_row(sheet, user_id)
            return self._row_to_profile(row) if row else None
        except Exception as e:
            raise StorageError(f"Failed to get profile: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save_profile(self, user_id: str, profile: UserProfile) -> bool:
        try:
            sheet = self._client.get_profiles_sheet()
            idx, _ = self._find_row(sheet, user_id)
            row = self._profile_to_row(user_id, profile)

            if idx is None:
                sheet.append_row(row, value_input_option="RAW")
            else:
                sheet.update(
                    range_name=f"A{idx}:C{idx}",
                    values=[row],
                    value_input_option="RAW",
                )
            return True
        except Exception as e:
            raise StorageError(f"Failed to save profile: {e}")

    async def delete_profile(self, user_id: str) -> bool:
        try:
            sheet = self._client.get_profiles_sheet()
            idx, _ = self._find_row(sheet, user_id)
        except Exception as e:
            raise StorageError(f"Failed to delete profile: {e}")

        if idx is None:
            raise NotFoundError(f"Profile not found: {user_id}")

        try:
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete profile: {e}")

    async def list_user_ids(self) -> list[str]:
        try:
            sheet = self._client.get_profiles_sheet()
            return [row[0] for row in sheet.get_all_values()[1:] if row and row[0]]
        except Exception as e:
            raise StorageError(f"Failed to list profiles: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Append-only. Rows that fail to parse are skipped on read.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        return AuditEvent(
            event_id=UUID(_safe_get(row, 0)),
            timestamp=datetime.fromisoformat(_safe_get(row, 1)),
            event_type=AuditEventType(_safe_get(row, 2)),
            severity=AuditSeverity(_safe_get(row, 3)),
            entity_type=_safe_get(row, 4) or None,
            entity_id=_safe_get(row, 5) or None,
            correlation_id=UUID(_safe_get(row, 6)) if _safe_get(row, 6) else None,
            description=_safe_get(row, 7),
            details=json.loads(_safe_get(row, 8)) if _safe_get(row, 8) else {},
            error_message=_safe_get(row, 9) or None,
            is_user_action=_safe_get(row, 10).lower() == "true",
        )

    def _read_events(self) -> list[AuditEvent]:
        sheet = self._client.get_audit_sheet()
        events = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except (ValueError, KeyError) as e:
                logger.debug("audit_row_skipped", error=str(e))
        return events

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event. Never raises; failures return False."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            logger.warning("audit_append_failed", error=str(e), event_id=str(event.event_id))
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        try:
            events = [e for e in self._read_events() if e.correlation_id == correlation_id]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        try:
            events = self._read_events()
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
