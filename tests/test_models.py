"""
Tests for CostPilot

Test strategy:
1. Unit tests for individual components (models, engine, validators)
2. Integration tests for flows and routes (with fake external services)
3. No real API calls in tests (use fakes)
"""

import pytest
from pydantic import ValidationError

from costpilot.config import AppSettings
from costpilot.models import (
    MonthlyInputs,
    SubsidyProfile,
    TravelRoute,
    UserProfile,
)
from costpilot.models.finance import field_name_for
from costpilot.models.location import GeoPoint, LocationContext, TransitStation
from costpilot.models.wealth import Allocation, WealthRequest


class TestMonthlyInputs:
    """Tests for the engine input model."""

    def test_accepts_wire_and_attribute_names(self):
        """Test camelCase and snake_case construction."""
        wire = MonthlyInputs.model_validate({"incomeMonthly": 3000, "rentMonthly": 900})
        python = MonthlyInputs(income_monthly=3000, rent_monthly=900)
        assert wire == python

    def test_dumps_camel_case(self):
        """Test the wire format."""
        data = MonthlyInputs(food_monthly=450).model_dump(by_alias=True)
        assert data["foodMonthly"] == 450
        assert "food_monthly" not in data

    def test_totals(self, rent_heavy_budget):
        """Test derived totals."""
        assert rent_heavy_budget.total_expenses == 3030
        assert rent_heavy_budget.monthly_balance == 970

    def test_merged_ignores_unknown_keys(self, rent_heavy_budget):
        """Test applying a change set."""
        merged = rent_heavy_budget.merged({"rentMonthly": 1200, "food_monthly": 400, "pets": 3})

        assert merged.rent_monthly == 1200
        assert merged.food_monthly == 400
        assert rent_heavy_budget.rent_monthly == 2000

    def test_negative_amount_rejected(self):
        """Test the non-negative constraint."""
        with pytest.raises(ValidationError):
            MonthlyInputs(debt_monthly=-1)

    def test_field_name_for(self):
        """Test name resolution."""
        assert field_name_for("savingsBalance") == "savings_balance"
        assert field_name_for("savings_balance") == "savings_balance"
        assert field_name_for("savings") is None


class TestUserProfile:
    """Tests for the profile document."""

    def test_defaults(self):
        """Test a brand new profile."""
        profile = UserProfile()

        assert profile.name == "New User"
        assert profile.household_size == 1
        assert profile.optimized_categories == []
        assert profile.coordinates is None

    def test_to_monthly_inputs(self):
        """Test the bridge to engine inputs."""
        profile = UserProfile(income=4200, rent=1300, transport_cost=250, savings=8000)
        inputs = profile.to_monthly_inputs()

        assert inputs.income_monthly == 4200
        assert inputs.rent_monthly == 1300
        assert inputs.transport_monthly == 250
        assert inputs.savings_balance == 8000

    def test_document_round_trip(self):
        """Test that the stored document loads back unchanged."""
        profile = UserProfile(
            name="Aina",
            location={"lat": 3.139, "lng": 101.6869},
            claimed_subsidies=[{"programId": "STR", "name": "Sumbangan Tunai Rahmah"}],
        )
        document = profile.to_document()

        assert document["claimedSubsidies"][0]["programId"] == "STR"
        assert UserProfile.model_validate(document) == profile
        assert profile.coordinates == GeoPoint(lat=3.139, lng=101.6869)

    def test_text_location(self):
        """Test a free-text location."""
        profile = UserProfile(location="Petaling Jaya")
        assert profile.coordinates is None

    def test_household_must_be_positive(self):
        """Test the household size floor."""
        with pytest.raises(ValidationError):
            UserProfile(household_size=0)


class TestTravelRoute:
    """Tests for saved commutes."""

    def _route(self, **overrides):
        data = {
            "id": "r1",
            "startLocation": "Subang Jaya",
            "destination": "KLCC",
            "method": "car",
            "tripsPerWeek": 5,
            "costPerTrip": 12.5,
        }
        data.update(overrides)
        return TravelRoute.model_validate(data)

    def test_selected_option(self):
        """Test the allowed selections."""
        assert self._route(selectedOptionId="balanced").selected_option_id == "balanced"
        assert self._route().selected_option_id is None

    def test_unknown_selection_rejected(self):
        """Test the selection pattern."""
        with pytest.raises(ValidationError):
            self._route(selectedOptionId="scenic")


class TestWealthModels:
    """Tests for Wealth+ requests and allocations."""

    def test_months_for_long_goal(self):
        """Test that long goals count years."""
        assert WealthRequest(target_amount=10000, duration=3).months == 36

    def test_months_for_short_goal(self):
        """Test that short goals count months."""
        goal = WealthRequest.model_validate({"targetAmount": 5000, "duration": 9, "isShort": True})
        assert goal.months == 9
        assert goal.goal_type.value == "short"

    def test_target_must_be_positive(self):
        """Test the goal floor."""
        with pytest.raises(ValidationError):
            WealthRequest(target_amount=0, duration=1)

    def test_allocation_total(self):
        """Test the percent total."""
        allocation = Allocation(savings_percent=40, dividend_percent=30, etf_percent=20, growth_percent=10)
        assert allocation.total == 100


class TestSubsidyProfile:
    """Tests for the eligibility facts."""

    def test_engine_income_alias(self):
        """Test that engine inputs can stand in for a profile."""
        profile = SubsidyProfile.model_validate({"incomeMonthly": 2800, "householdSize": 3})
        assert profile.income == 2800
        assert profile.household_size == 3

    def test_nulls_are_unknown(self):
        """Test that explicit nulls become defaults."""
        profile = SubsidyProfile.model_validate({"income": 1000, "state": None, "age": None})
        assert profile.state == ""
        assert profile.age == 0


class TestLocationModels:
    """Tests for location models."""

    def test_context_summary(self):
        """Test the compact fact bundle form."""
        context = LocationContext(
            city="Kuala Lumpur",
            state="Wilayah Persekutuan",
            nearby_transit=[TransitStation(name="KL Sentral", type="station", distance_km=0.1)],
        )

        assert context.summary() == {
            "city": "Kuala Lumpur",
            "state": "Wilayah Persekutuan",
            "transit": "KL Sentral (0.1km)",
        }

    def test_empty_summary(self):
        """Test the placeholder when nothing was found."""
        assert LocationContext().summary()["transit"] == "None detected"

    def test_point_bounds(self):
        """Test coordinate ranges."""
        with pytest.raises(ValidationError):
            GeoPoint(lat=91, lng=0)


class TestSettings:
    """Tests for application settings."""

    def test_cors_origins_list(self):
        """Test comma-separated origins."""
        settings = AppSettings(cors_origins="http://localhost:3000, https://costpilot.my,")
        assert settings.cors_origins_list == ["http://localhost:3000", "https://costpilot.my"]
