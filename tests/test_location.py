"""Tests for commute arithmetic, location context and routing."""

from uuid import uuid4

import pytest

from costpilot.audit import AuditLogger
from costpilot.engine.commute import estimate_route, haversine_km, route_costs
from costpilot.models import GeoPoint
from costpilot.models.audit import AuditEventType
from costpilot.services.location import LocationService, RouteService, parse_place, parse_stations


KL = GeoPoint(lat=3.1390, lng=101.6869)
PJ = GeoPoint(lat=3.1073, lng=101.6067)

NOMINATIM_PAYLOAD = {
    "display_name": "Bangsar, Kuala Lumpur, Malaysia",
    "address": {"suburb": "Bangsar", "city": "Kuala Lumpur", "state": "Wilayah Persekutuan", "postcode": "59000"},
}

OVERPASS_PAYLOAD = {
    "elements": [
        {"lat": 3.1500, "lon": 101.6869, "tags": {"name": "Far", "railway": "station"}},
        {"lat": 3.1395, "lon": 101.6869, "tags": {"name": "KL Sentral", "railway": "station", "operator": "KTM"}},
        {"lat": 3.1420, "lon": 101.6869, "tags": {"name": "Muzium Negara", "railway": "subway"}},
        {"lat": 3.1440, "lon": 101.6869, "tags": {"name": "Bangsar", "railway": "light_rail"}},
        {"lat": 3.1400, "lon": 101.6869, "tags": {"railway": "station"}},
        {"tags": {"name": "No coordinates"}},
    ]
}


class TestCommuteArithmetic:
    """Tests for the pure commute helpers."""

    def test_round_trip_costs(self):
        """Test the weekly, monthly and yearly roll-up."""
        costs = route_costs(5, 5, True, 30, 35)

        assert costs.weekly_cost == 50
        assert costs.monthly_cost == 216.5
        assert costs.yearly_cost == 2600
        assert costs.avg_travel_time_total == 65

    def test_one_way_costs(self):
        """Test that one-way trips ignore the return leg."""
        costs = route_costs(5, 5, False, 30, 35)

        assert costs.weekly_cost == 25
        assert costs.avg_travel_time_total == 30

    def test_haversine(self):
        """Test KL city centre to Petaling Jaya."""
        assert haversine_km(KL, PJ) == pytest.approx(9.58, abs=0.05)
        assert haversine_km(KL, KL) == 0

    def test_estimate_route(self):
        """Test the straight-line estimate."""
        route = estimate_route(KL, PJ)

        assert route.source == "estimate"
        assert route.commute_time_minutes == 16
        assert route.estimated_transport_cost == pytest.approx(2.39, abs=0.01)


class TestParsers:
    """Tests for the OpenStreetMap response parsers."""

    def test_parse_place(self):
        """Test city preference over suburb."""
        place = parse_place(NOMINATIM_PAYLOAD)

        assert place.city == "Kuala Lumpur"
        assert place.state == "Wilayah Persekutuan"
        assert place.full_name == "Bangsar, Kuala Lumpur, Malaysia"

    def test_parse_place_without_address(self):
        """Test the unknown place."""
        assert parse_place({}).city == "Unknown"

    def test_parse_stations(self):
        """Test filtering, ordering and the limit of three."""
        stations = parse_stations(OVERPASS_PAYLOAD, KL)

        assert [s.name for s in stations] == ["KL Sentral", "Muzium Negara", "Bangsar"]
        assert stations[0].operator == "KTM"
        assert stations[1].operator == "Unknown"
        assert stations[1].type == "subway"


class TestLocationService:
    """Tests for LocationService."""

    @pytest.mark.asyncio
    async def test_get_context(self, make_session, make_response):
        """Test place and transit together."""
        session = make_session({
            "https://nominatim": make_response(NOMINATIM_PAYLOAD),
            "https://overpass": make_response(OVERPASS_PAYLOAD),
        })
        context = await LocationService(session=session).get_context(KL.lat, KL.lng)

        assert context.city == "Kuala Lumpur"
        assert len(context.nearby_transit) == 3
        assert context.summary()["transit"].startswith("KL Sentral (0.1km)")
        assert session.headers["User-Agent"]

    @pytest.mark.asyncio
    async def test_results_are_cached(self, make_session, make_response):
        """Test that nearby coordinates share a cache cell."""
        session = make_session({"https://nominatim": make_response(NOMINATIM_PAYLOAD)})
        service = LocationService(session=session)

        await service.resolve_location(3.13901, 101.68692)
        await service.resolve_location(3.13904, 101.68688)

        assert len(session.calls) == 1

    @pytest.mark.asyncio
    async def test_outage_degrades(self, offline_session):
        """Test that failures give an unknown place and no stations."""
        context = await LocationService(session=offline_session).get_context(KL.lat, KL.lng)

        assert context.city == "Unknown"
        assert context.nearby_transit == []
        assert context.summary()["transit"] == "None detected"

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self, make_session, make_response):
        """Test that a later lookup retries after a failure."""
        session = make_session({"https://nominatim": make_response(status_code=503)})
        service = LocationService(session=session)

        assert (await service.resolve_location(KL.lat, KL.lng)).city == "Unknown"
        session.routes["https://nominatim"] = make_response(NOMINATIM_PAYLOAD)
        assert (await service.resolve_location(KL.lat, KL.lng)).city == "Kuala Lumpur"

    @pytest.mark.asyncio
    async def test_outage_is_audited(self, offline_session, audit_storage):
        """Test that each failed lookup records an external service error."""
        correlation_id = uuid4()
        service = LocationService(session=offline_session, audit_logger=AuditLogger(audit_storage))

        await service.get_context(KL.lat, KL.lng, correlation_id)

        events = await audit_storage.get_events_by_correlation_id(correlation_id)
        assert {e.details["service"] for e in events} == {"nominatim", "overpass"}
        assert all(e.event_type == AuditEventType.EXTERNAL_SERVICE_ERROR for e in events)


class TestRouteService:
    """Tests for RouteService."""

    @pytest.mark.asyncio
    async def test_estimate_when_osm_disabled(self, offline_session):
        """Test that no request is made without OSM routing."""
        route = await RouteService(use_osm=False, session=offline_session).get_route(KL, PJ)

        assert route.source == "estimate"
        assert offline_session.calls == []

    @pytest.mark.asyncio
    async def test_osrm_route(self, make_session, make_response):
        """Test an OSRM driving route."""
        session = make_session({
            "https://router.project-osrm.org": make_response(
                {"routes": [{"distance": 12000, "duration": 1500}]}
            ),
        })
        route = await RouteService(use_osm=True, session=session).get_route(KL, PJ)

        assert route.source == "osrm"
        assert route.distance_km == 12.0
        assert route.commute_time_minutes == 25
        assert route.estimated_transport_cost == 3.0
        url, _ = session.calls[0]
        assert url.endswith("101.6869,3.139;101.6067,3.1073")

    @pytest.mark.asyncio
    async def test_osrm_failure_falls_back(self, make_session, make_response):
        """Test the estimate on an empty OSRM answer."""
        session = make_session({"https://router.project-osrm.org": make_response({"routes": []})})
        route = await RouteService(use_osm=True, session=session).get_route(KL, PJ)

        assert route.source == "estimate"

    @pytest.mark.asyncio
    async def test_osrm_failure_is_audited(self, make_session, make_response, audit_storage):
        """Test that falling back to the estimate records an external service error."""
        correlation_id = uuid4()
        session = make_session({"https://router.project-osrm.org": make_response(status_code=502)})
        service = RouteService(use_osm=True, session=session, audit_logger=AuditLogger(audit_storage))

        route = await service.get_route(KL, PJ, correlation_id)

        assert route.source == "estimate"
        [event] = await audit_storage.get_events_by_correlation_id(correlation_id)
        assert event.event_type == AuditEventType.EXTERNAL_SERVICE_ERROR
        assert event.details == {"service": "osrm"}
        assert event.error_message == "HTTP 502"
