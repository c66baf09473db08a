"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of every score, recommendation and explanation
2. Debugging capability when Gemini or OpenStreetMap misbehave
3. A history of profile changes per user

The audit logger:
- Is async so it sits naturally inside the request flows
- Gracefully handles failures (a failed audit write never fails a request)
- Supports correlation IDs to trace all events of one analysis run
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from costpilot.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from costpilot.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit storage backend (Google Sheets or in-memory)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("costpilot.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_analysis_run(
        self,
        user_id: Optional[str],
        stress_score: float,
        recommendation_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.analysis_run(
            user_id=user_id,
            stress_score=stress_score,
            recommendation_count=recommendation_count,
            correlation_id=correlation_id,
        ))

    async def log_stress_computed(
        self,
        stress_score: float,
        risk_level: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.stress_computed(
            stress_score=stress_score,
            risk_level=risk_level,
            correlation_id=correlation_id,
        ))

    async def log_scenario_simulated(
        self,
        changes: dict,
        stress_delta: float,
        balance_delta: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.scenario_simulated(
            changes=changes,
            stress_delta=stress_delta,
            balance_delta=balance_delta,
            correlation_id=correlation_id,
        ))

    async def log_recommendations_generated(
        self,
        types: list[str],
        total_savings: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.recommendations_generated(
            types=types,
            total_savings=total_savings,
            correlation_id=correlation_id,
        ))

    async def log_insight(
        self,
        kind: str,
        used_fallback: bool,
        reason: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an AI explanation, or the fallback that replaced it."""
        await self.log(AuditEventBuilder.insight_generated(
            kind=kind,
            used_fallback=used_fallback,
            correlation_id=correlation_id,
            reason=reason,
        ))

    async def log_wealth_strategy(
        self,
        target_amount: float,
        risk_appetite: str,
        used_fallback: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.wealth_strategy_generated(
            target_amount=target_amount,
            risk_appetite=risk_appetite,
            used_fallback=used_fallback,
            correlation_id=correlation_id,
        ))

    async def log_subsidies_matched(
        self,
        eligible: int,
        not_eligible: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.subsidies_matched(
            eligible=eligible,
            not_eligible=not_eligible,
            correlation_id=correlation_id,
        ))

    async def log_catalog_refreshed(self, source: str, program_count: int) -> None:
        await self.log(AuditEventBuilder.subsidy_catalog_refreshed(
            source=source,
            program_count=program_count,
        ))

    async def log_profile_created(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.profile_created(
            user_id=user_id,
            correlation_id=correlation_id,
        ))

    async def log_profile_updated(
        self,
        user_id: str,
        fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.profile_updated(
            user_id=user_id,
            fields=fields,
            correlation_id=correlation_id,
        ))

    async def log_recommendation_accepted(
        self,
        user_id: str,
        recommendation_type: str,
        changes: dict,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.recommendation_accepted(
            user_id=user_id,
            recommendation_type=recommendation_type,
            changes=changes,
            correlation_id=correlation_id,
        ))

    async def log_location_resolved(
        self,
        city: str,
        state: str,
        station_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.location_resolved(
            city=city,
            state=state,
            station_count=station_count,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        field: Optional[str],
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.validation_failed(
            field=field,
            message=message,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., one /analysis call).
    Pass it through all subsequent operations.
    """
    return uuid4()
