"""
Commute Arithmetic

Route cost roll-ups for logged commutes and a straight-line route
estimate used when no routing service is configured.
"""

import math
from typing import NamedTuple

from costpilot.engine.constants import (
    AVERAGE_SPEED_KMH,
    COST_PER_KM,
    EARTH_RADIUS_KM,
    WEEKS_PER_MONTH,
    WEEKS_PER_YEAR,
)
from costpilot.engine.rounding import round_int, round_to
from costpilot.models.location import GeoPoint, RouteEstimate


class RouteCosts(NamedTuple):
    weekly_cost: float
    monthly_cost: float
    yearly_cost: float
    avg_travel_time_total: float


def route_costs(
    cost_per_trip: float,
    trips_per_week: int,
    round_trip: bool,
    time_go: float,
    time_return: float,
) -> RouteCosts:
    """Roll a per-trip cost up to week / month / year totals."""
    multiplier = 2 if round_trip else 1
    weekly = cost_per_trip * trips_per_week * multiplier

    return RouteCosts(
        weekly_cost=round_to(weekly, 2),
        monthly_cost=round_to(weekly * WEEKS_PER_MONTH, 2),
        yearly_cost=round_to(weekly * WEEKS_PER_YEAR, 2),
        avg_travel_time_total=time_go + (time_return if round_trip else 0),
    )


def haversine_km(origin: GeoPoint, destination: GeoPoint) -> float:
    """Great-circle distance in kilometres."""
    d_lat = math.radians(destination.lat - origin.lat)
    d_lng = math.radians(destination.lng - origin.lng)
    lat1 = math.radians(origin.lat)
    lat2 = math.radians(destination.lat)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.sin(d_lng / 2) ** 2 * math.cos(lat1) * math.cos(lat2)
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def estimate_route(origin: GeoPoint, destination: GeoPoint) -> RouteEstimate:
    """City-average estimate: 35 km/h, RM0.25 per km (fuel plus wear)."""
    distance_km = haversine_km(origin, destination)

    return RouteEstimate(
        distance_km=round_to(distance_km, 2),
        commute_time_minutes=round_int(distance_km / AVERAGE_SPEED_KMH * 60),
        estimated_transport_cost=round_to(distance_km * COST_PER_KM, 2),
        source="estimate",
    )
