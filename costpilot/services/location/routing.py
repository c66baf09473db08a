"""
Commute Routing

OSRM driving routes when enabled, otherwise (and on any OSRM failure)
the straight-line estimate from the engine.
"""

import asyncio
from typing import TYPE_CHECKING, Optional
from uuid import UUID

import requests
import structlog

from costpilot.config import get_settings
from costpilot.engine.commute import estimate_route
from costpilot.engine.constants import COST_PER_KM
from costpilot.engine.rounding import round_int, round_to
from costpilot.models.location import GeoPoint, RouteEstimate

if TYPE_CHECKING:
    from costpilot.audit import AuditLogger


logger = structlog.get_logger(__name__)


class RouteService:

    def __init__(
        self,
        use_osm: Optional[bool] = None,
        session: Optional[requests.Session] = None,
        audit_logger: Optional["AuditLogger"] = None,
    ):
        self._settings = get_settings().location
        self._use_osm = self._settings.use_osm_routing if use_osm is None else use_osm
        self._session = session or requests.Session()
        self._audit_logger = audit_logger

    def _osrm_route(self, origin: GeoPoint, destination: GeoPoint) -> RouteEstimate:
        url = (
            f"{self._settings.osrm_url.rstrip('/')}/"
            f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
        )
        response = self._session.get(
            url,
            params={"overview": "false"},
            timeout=self._settings.request_timeout_seconds,
        )
        response.raise_for_status()
        route = response.json()["routes"][0]

        distance_km = route["distance"] / 1000
        return RouteEstimate(
            distance_km=round_to(distance_km, 2),
            commute_time_minutes=round_int(route["duration"] / 60),
            estimated_transport_cost=round_to(distance_km * COST_PER_KM, 2),
            source="osrm",
        )

    async def get_route(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        correlation_id: Optional[UUID] = None,
    ) -> RouteEstimate:
        if not self._use_osm:
            return estimate_route(origin, destination)

        try:
            return await asyncio.to_thread(self._osrm_route, origin, destination)
        except (requests.RequestException, KeyError, IndexError, ValueError) as e:
            logger.warning("osrm_route_failed", error=str(e))
            if self._audit_logger is not None:
                await self._audit_logger.log_external_service_error("osrm", str(e), correlation_id)
            return estimate_route(origin, destination)
