"""
Audit Models for CostPilot

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of every number shown to the user
2. Debugging information when an external service misbehaves
3. A record of which explanations came from the model and which from fallbacks

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every step of the analysis pipeline has its own event type.
    """
    # Engine
    ANALYSIS_RUN = "analysis_run"
    STRESS_COMPUTED = "stress_computed"
    SCENARIO_SIMULATED = "scenario_simulated"
    RECOMMENDATIONS_GENERATED = "recommendations_generated"

    # AI
    AI_INSIGHT_GENERATED = "ai_insight_generated"
    AI_FALLBACK_USED = "ai_fallback_used"
    WEALTH_STRATEGY_GENERATED = "wealth_strategy_generated"

    # Subsidies
    SUBSIDIES_MATCHED = "subsidies_matched"
    SUBSIDY_CATALOG_REFRESHED = "subsidy_catalog_refreshed"

    # Profile
    PROFILE_CREATED = "profile_created"
    PROFILE_UPDATED = "profile_updated"
    RECOMMENDATION_ACCEPTED = "recommendation_accepted"

    # Location
    LOCATION_RESOLVED = "location_resolved"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'profile', 'budget', 'insight')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to (user ids are strings)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one analysis run)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.stress_computed(78.4, "High", correlation_id)
        event = AuditEventBuilder.profile_updated(user_id, ["rent"], correlation_id)
    """

    @staticmethod
    def analysis_run(
        user_id: Optional[str],
        stress_score: float,
        recommendation_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANALYSIS_RUN,
            entity_type="profile",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Full analysis run: stress {stress_score}, {recommendation_count} recommendations",
            details={
                "stress_score": stress_score,
                "recommendation_count": recommendation_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def stress_computed(
        stress_score: float,
        risk_level: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STRESS_COMPUTED,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Stress score computed: {stress_score} ({risk_level})",
            details={
                "stress_score": stress_score,
                "risk_level": risk_level,
            },
        )

    @staticmethod
    def scenario_simulated(
        changes: dict,
        stress_delta: float,
        balance_delta: float,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCENARIO_SIMULATED,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Scenario simulated: stress {stress_delta:+}, balance RM{balance_delta:+}",
            details={
                "changes": changes,
                "stress_delta": stress_delta,
                "balance_delta": balance_delta,
            },
        )

    @staticmethod
    def recommendations_generated(
        types: list[str],
        total_savings: float,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECOMMENDATIONS_GENERATED,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"{len(types)} recommendations generated, RM{total_savings} total savings",
            details={
                "types": types,
                "total_savings": total_savings,
            },
        )

    @staticmethod
    def insight_generated(
        kind: str,
        used_fallback: bool,
        correlation_id: Optional[UUID],
        reason: Optional[str] = None,
    ) -> AuditEvent:
        if used_fallback:
            return AuditEvent(
                event_type=AuditEventType.AI_FALLBACK_USED,
                severity=AuditSeverity.WARNING,
                entity_type="insight",
                correlation_id=correlation_id,
                description=f"Fallback explanation used for '{kind}'",
                details={
                    "kind": kind,
                    "reason": reason or "unknown",
                },
            )
        return AuditEvent(
            event_type=AuditEventType.AI_INSIGHT_GENERATED,
            entity_type="insight",
            correlation_id=correlation_id,
            description=f"AI explanation generated for '{kind}'",
            details={
                "kind": kind,
            },
        )

    @staticmethod
    def wealth_strategy_generated(
        target_amount: float,
        risk_appetite: str,
        used_fallback: bool,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WEALTH_STRATEGY_GENERATED,
            entity_type="wealth_strategy",
            correlation_id=correlation_id,
            description=f"Wealth strategy generated for RM{target_amount:,.0f} ({risk_appetite})",
            details={
                "target_amount": target_amount,
                "risk_appetite": risk_appetite,
                "used_fallback": used_fallback,
            },
            is_user_action=True,
        )

    @staticmethod
    def subsidies_matched(
        eligible: int,
        not_eligible: int,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSIDIES_MATCHED,
            entity_type="subsidy",
            correlation_id=correlation_id,
            description=f"Subsidies matched: {eligible} eligible, {not_eligible} not eligible",
            details={
                "eligible": eligible,
                "not_eligible": not_eligible,
            },
        )

    @staticmethod
    def subsidy_catalog_refreshed(
        source: str,
        program_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSIDY_CATALOG_REFRESHED,
            entity_type="subsidy",
            description=f"Subsidy catalog refreshed with {program_count} programs",
            details={
                "source": source,
                "program_count": program_count,
            },
        )

    @staticmethod
    def profile_created(
        user_id: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_CREATED,
            entity_type="profile",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="Default profile created",
            is_user_action=True,
        )

    @staticmethod
    def profile_updated(
        user_id: str,
        fields: list[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_UPDATED,
            entity_type="profile",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Profile updated: {', '.join(fields) or 'no fields'}",
            details={
                "fields": fields,
            },
            is_user_action=True,
        )

    @staticmethod
    def recommendation_accepted(
        user_id: str,
        recommendation_type: str,
        changes: dict,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECOMMENDATION_ACCEPTED,
            entity_type="profile",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Recommendation accepted: {recommendation_type}",
            details={
                "type": recommendation_type,
                "changes": changes,
            },
            is_user_action=True,
        )

    @staticmethod
    def location_resolved(
        city: str,
        state: str,
        station_count: int,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOCATION_RESOLVED,
            entity_type="location",
            correlation_id=correlation_id,
            description=f"Location resolved: {city}, {state or 'unknown state'}",
            details={
                "city": city,
                "state": state,
                "station_count": station_count,
            },
        )

    @staticmethod
    def validation_failed(
        field: Optional[str],
        message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Budget validation failed: {message}"[:500],
            details={
                "field": field,
            },
            error_message=message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
