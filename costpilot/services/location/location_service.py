"""
Location Context Service

Reverse geocoding (Nominatim) and nearby rail transit (Overpass) from
OpenStreetMap, used to ground AI explanations in where the user lives.

DESIGN DECISION: Location is optional context. Every lookup degrades
to an "Unknown" place or an empty station list instead of raising, so
an OpenStreetMap outage never fails an analysis.

Both public services are rate limited, so results are cached in memory
per ~100m cell (coordinates rounded to 3 decimals).
"""

import asyncio
import time
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

import requests
import structlog

from costpilot.config import get_settings
from costpilot.engine.commute import haversine_km
from costpilot.engine.rounding import round_to
from costpilot.models.location import (
    GeoPoint,
    LocationContext,
    ResolvedPlace,
    TransitStation,
)

if TYPE_CHECKING:
    from costpilot.audit import AuditLogger


logger = structlog.get_logger(__name__)

RAIL_TAGS = "station|subway|light_rail|monorail"
MAX_STATIONS = 3


class _TTLCache:
    """Tiny timestamped dict cache."""

    def __init__(self, ttl_seconds: float):
        self._ttl = ttl_seconds
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if time.monotonic() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (time.monotonic(), value)


def cache_key(lat: float, lng: float) -> str:
    return f"{lat:.3f},{lng:.3f}"


def overpass_query(lat: float, lng: float, radius_m: int) -> str:
    return (
        "[out:json];"
        f'(node["railway"~"{RAIL_TAGS}"](around:{radius_m}, {lat}, {lng}););'
        "out body 5;"
    )


def parse_place(data: dict) -> ResolvedPlace:
    """Map a Nominatim reverse response to a place."""
    address = data.get("address") or {}
    city = (
        address.get("city")
        or address.get("town")
        or address.get("district")
        or address.get("suburb")
        or "Unknown"
    )
    return ResolvedPlace(
        city=city,
        state=address.get("state") or "",
        postcode=address.get("postcode") or "",
        full_name=data.get("display_name"),
    )


def parse_stations(data: dict, origin: GeoPoint) -> list[TransitStation]:
    """Named stations from an Overpass response, nearest three first."""
    stations = []
    for element in data.get("elements", []):
        tags = element.get("tags") or {}
        name = tags.get("name")
        if not name or "lat" not in element or "lon" not in element:
            continue
        distance = haversine_km(origin, GeoPoint(lat=element["lat"], lng=element["lon"]))
        stations.append(TransitStation(
            name=name,
            type=tags.get("railway") or "transit",
            distance_km=round_to(distance, 1),
            operator=tags.get("operator") or "Unknown",
        ))

    stations.sort(key=lambda s: s.distance_km)
    return stations[:MAX_STATIONS]


class LocationService:
    """
    OpenStreetMap lookups with an in-memory TTL cache.

    HTTP calls are blocking (requests) and run in a worker thread so
    get_context can issue both lookups concurrently.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        audit_logger: Optional["AuditLogger"] = None,
    ):
        self._settings = get_settings().location
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self._settings.user_agent})
        self._places = _TTLCache(self._settings.cache_ttl_seconds)
        self._transit = _TTLCache(self._settings.cache_ttl_seconds)
        self._audit_logger = audit_logger

    async def _report_failure(self, service: str, error: Exception, correlation_id: Optional[UUID]) -> None:
        if self._audit_logger is not None:
            await self._audit_logger.log_external_service_error(service, str(error), correlation_id)

    def _get_json(self, url: str, params: dict) -> dict:
        response = self._session.get(
            url,
            params=params,
            timeout=self._settings.request_timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def resolve_location(
        self,
        lat: float,
        lng: float,
        correlation_id: Optional[UUID] = None,
    ) -> ResolvedPlace:
        key = cache_key(lat, lng)
        cached = self._places.get(key)
        if cached is not None:
            return cached

        try:
            data = await asyncio.to_thread(
                self._get_json,
                self._settings.nominatim_url,
                {"format": "json", "lat": lat, "lon": lng},
            )
        except (requests.RequestException, ValueError) as e:
            logger.warning("geocode_failed", lat=lat, lng=lng, error=str(e))
            await self._report_failure("nominatim", e, correlation_id)
            return ResolvedPlace()

        place = parse_place(data)
        self._places.set(key, place)
        return place

    async def find_nearest_transit(
        self,
        lat: float,
        lng: float,
        correlation_id: Optional[UUID] = None,
    ) -> list[TransitStation]:
        key = cache_key(lat, lng)
        cached = self._transit.get(key)
        if cached is not None:
            return cached

        try:
            data = await asyncio.to_thread(
                self._get_json,
                self._settings.overpass_url,
                {"data": overpass_query(lat, lng, self._settings.transit_radius_m)},
            )
        except (requests.RequestException, ValueError) as e:
            logger.warning("transit_lookup_failed", lat=lat, lng=lng, error=str(e))
            await self._report_failure("overpass", e, correlation_id)
            return []

        stations = parse_stations(data, GeoPoint(lat=lat, lng=lng))
        self._transit.set(key, stations)
        return stations

    async def get_context(
        self,
        lat: float,
        lng: float,
        correlation_id: Optional[UUID] = None,
    ) -> LocationContext:
        """Place and nearby transit, fetched concurrently."""
        place, transit = await asyncio.gather(
            self.resolve_location(lat, lng, correlation_id),
            self.find_nearest_transit(lat, lng, correlation_id),
        )
        return LocationContext(**place.model_dump(), nearby_transit=transit)
