"""
Location Models

Coordinates, nearby transit and commute estimates. Distances are in
kilometres, times in minutes, costs in RM.
"""

from typing import Optional

from pydantic import Field

from costpilot.models.finance import CamelModel


class GeoPoint(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    label: Optional[str] = None


class TransitStation(CamelModel):
    name: str
    type: str = Field(description="OSM railway tag: station, subway, light_rail, monorail")
    distance_km: float
    operator: str = "Unknown"


class ResolvedPlace(CamelModel):
    """Reverse-geocoding result. city is 'Unknown' when the lookup failed."""

    city: str = "Unknown"
    state: str = ""
    postcode: Optional[str] = None
    full_name: Optional[str] = None


class LocationContext(ResolvedPlace):
    """A resolved place plus the nearest rail stations."""

    nearby_transit: list[TransitStation] = Field(default_factory=list)

    def summary(self) -> dict[str, str]:
        """Compact form used in AI fact bundles."""
        transit = ", ".join(f"{t.name} ({t.distance_km:g}km)" for t in self.nearby_transit)
        return {
            "city": self.city,
            "state": self.state,
            "transit": transit or "None detected",
        }


class RouteEstimate(CamelModel):
    distance_km: float
    commute_time_minutes: int
    estimated_transport_cost: float
    source: str = Field(default="estimate", description="'estimate' or 'osrm'")
