"""OpenStreetMap location context and commute routing."""

from costpilot.services.location.location_service import (
    LocationService,
    parse_place,
    parse_stations,
)
from costpilot.services.location.routing import RouteService

__all__ = [
    "LocationService",
    "RouteService",
    "parse_place",
    "parse_stations",
]
