"""
Shared fixtures.

Nothing here touches the network: HTTP sessions are fakes, Gemini is
constructed without a key, and storage is in memory.
"""

import pytest
import requests

from costpilot.agents import InsightAgent, OptimizationAgent, WealthAgent
from costpilot.audit import AuditLogger
from costpilot.config import get_settings
from costpilot.config.settings import GeminiSettings
from costpilot.models import MonthlyInputs
from costpilot.orchestrator import AnalysisFlow, AppComponents, PlanningFlow, ProfileFlow
from costpilot.services.location import LocationService, RouteService
from costpilot.services.storage import InMemoryAuditStorage, InMemoryProfileStorage
from costpilot.services.subsidies import SubsidyCatalog


class FakeResponse:
    def __init__(self, payload=None, text="", status_code=200):
        self._payload = payload
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeSession:
    """
    Stand-in for requests.Session.

    `routes` maps a URL prefix to a FakeResponse or an exception to raise.
    Every call is recorded in `calls`.
    """

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.headers = {}
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        for prefix, outcome in self.routes.items():
            if url.startswith(prefix):
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise requests.ConnectionError(f"No route for {url}")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep a developer's .env or shell keys out of the tests."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("SUBSIDY_CATALOG_CSV_URL", raising=False)
    monkeypatch.delenv("LOCATION_USE_OSM_ROUTING", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def no_key_settings():
    return GeminiSettings(api_key=None)


@pytest.fixture
def healthy_budget():
    return MonthlyInputs(
        income_monthly=5000,
        rent_monthly=1500,
        utilities_monthly=200,
        transport_monthly=400,
        food_monthly=600,
        debt_monthly=300,
        subscriptions_monthly=100,
        savings_balance=10000,
    )


@pytest.fixture
def rent_heavy_budget():
    return MonthlyInputs(
        income_monthly=4000,
        rent_monthly=2000,
        utilities_monthly=200,
        transport_monthly=300,
        food_monthly=500,
        debt_monthly=0,
        subscriptions_monthly=30,
        savings_balance=2000,
    )


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def make_session():
    """Build a FakeSession from {url_prefix: FakeResponse | Exception}."""
    return FakeSession


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def offline_session():
    """A session for which every request fails, as if offline."""
    return FakeSession()


@pytest.fixture
def components(no_key_settings, audit_storage, offline_session):
    """All flows wired with in-memory storage and no external services."""
    audit_logger = AuditLogger(audit_storage)
    return AppComponents(
        analysis=AnalysisFlow(
            catalog=SubsidyCatalog(csv_url="", audit_logger=audit_logger),
            location_service=LocationService(session=offline_session, audit_logger=audit_logger),
            insight_agent=InsightAgent(no_key_settings),
            audit_logger=audit_logger,
        ),
        planning=PlanningFlow(
            wealth_agent=WealthAgent(no_key_settings),
            optimization_agent=OptimizationAgent(no_key_settings),
            route_service=RouteService(use_osm=False, session=offline_session, audit_logger=audit_logger),
            audit_logger=audit_logger,
        ),
        profiles=ProfileFlow(storage=InMemoryProfileStorage(), audit_logger=audit_logger),
        audit_logger=audit_logger,
        sheets_client=None,
    )
