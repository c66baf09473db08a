"""Tests for the analysis, planning and profile flows."""

import pytest

from costpilot.errors import InputValidationError
from costpilot.models import (
    AuditEventType,
    LifestyleRequest,
    RecommendationType,
    RelocationRequest,
    SavingsPlanRequest,
    SmartGoal,
    SubsidyProfile,
    TravelRoute,
    VehicleRequest,
    WealthPlusStrategy,
    WealthRequest,
)
from costpilot.orchestrator import PlanningFlow, create_app_components
from costpilot.services.storage import NotFoundError
from costpilot.services.subsidies.catalog import DEFAULT_PROGRAMS


BUDGET = {
    "incomeMonthly": 4000,
    "rentMonthly": 2000,
    "utilitiesMonthly": 200,
    "transportMonthly": 300,
    "foodMonthly": 500,
    "debtMonthly": 0,
    "subscriptionsMonthly": 30,
    "savingsBalance": 2000,
}

COMMUTE = {
    "startLocation": "Subang Jaya",
    "destination": "KLCC",
    "method": "car",
    "tripsPerWeek": 5,
    "isRoundTrip": True,
    "avgTravelTimeGo": 30,
    "avgTravelTimeReturn": 35,
    "costPerTrip": 5,
}


async def _event_types(audit_storage):
    return [e.event_type for e in await audit_storage.get_recent_events()]


class TestAnalysisFlow:
    """Tests for AnalysisFlow."""

    @pytest.mark.asyncio
    async def test_monthly_summary(self, components, audit_storage):
        """Test stress and signals with an audit trail."""
        summary = await components.analysis.monthly_summary(BUDGET)

        assert summary.stress.stress_score == 42.9
        assert summary.signals.numbers.monthly_balance == 970
        assert AuditEventType.STRESS_COMPUTED in await _event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_invalid_budget_is_audited(self, components, audit_storage):
        """Test that validation failures are logged and raised."""
        with pytest.raises(InputValidationError):
            await components.analysis.monthly_summary({"rentMonthly": -1})

        assert await _event_types(audit_storage) == [AuditEventType.VALIDATION_FAILED]

    @pytest.mark.asyncio
    async def test_simulate(self, components):
        """Test a what-if over a raw budget."""
        result = await components.analysis.simulate(BUDGET, {"rentMonthly": 1500})

        assert result.delta.monthly_balance == 500
        assert result.delta.stress_score < 0

    @pytest.mark.asyncio
    async def test_simulate_error_prefixes(self, components):
        """Test that errors name the part of the request at fault."""
        with pytest.raises(InputValidationError, match="^base: Field 'rentMonthly' must be >= 0$"):
            await components.analysis.simulate({**BUDGET, "rentMonthly": -5}, {})

        with pytest.raises(InputValidationError, match="^changes: Field 'foodMonthly' must be a number$"):
            await components.analysis.simulate(BUDGET, {"foodMonthly": "lots"})

    @pytest.mark.asyncio
    async def test_simulate_coerces_changes(self, components):
        """Test that string changes are applied as numbers."""
        result = await components.analysis.simulate(BUDGET, {"rentMonthly": "1500"})
        assert result.delta.monthly_balance == 500

    @pytest.mark.asyncio
    async def test_optimize(self, components, audit_storage):
        """Test recommendations through the flow."""
        result = await components.analysis.optimize(BUDGET)

        assert result.total_savings == 750
        assert AuditEventType.RECOMMENDATIONS_GENERATED in await _event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_match_subsidies(self, components):
        """Test matching against the built-in catalog."""
        result = await components.analysis.match_subsidies(
            SubsidyProfile(income=2000, age=30, state="Johor", household_size=4, employment_status="employed")
        )
        assert len(result.matches) + len(result.not_eligible) == len(DEFAULT_PROGRAMS)

    @pytest.mark.asyncio
    async def test_full_analysis(self, components, audit_storage):
        """Test the dashboard payload."""
        body = {**BUDGET, "age": 25, "employmentStatus": "employed", "state": "Selangor", "householdSize": 3}
        result = await components.analysis.run_full_analysis(body, user_id="u1")

        stress = result.financials.stress
        assert result.financials.derived.survival_months == stress.buffer_months
        assert result.financials.derived.monthly_balance == 970
        assert result.optimization.total_savings == 750
        assert result.optimization.base.stress == stress
        assert "STR" in {m.program_id for m in result.subsidies.matches}
        assert result.location_context is None

        events = await audit_storage.get_recent_events()
        run = next(e for e in events if e.event_type == AuditEventType.ANALYSIS_RUN)
        assert run.entity_id == "u1"
        assert len({e.correlation_id for e in events}) == 1

    @pytest.mark.asyncio
    async def test_full_analysis_household_defaults_to_one(self, components):
        """Test that an absent household size is not asked for."""
        result = await components.analysis.run_full_analysis({**BUDGET, "state": "Perak"})

        str_program = next(
            m for m in result.subsidies.matches + result.subsidies.not_eligible if m.program_id == "STR"
        )
        assert not str_program.needs_info

    @pytest.mark.asyncio
    async def test_full_analysis_with_location_offline(self, components):
        """Test that an OpenStreetMap outage still returns an analysis."""
        result = await components.analysis.run_full_analysis(
            {**BUDGET, "location": {"lat": 3.139, "lng": 101.6869}}
        )

        assert result.location_context.city == "Unknown"
        assert result.location_context.nearby_transit == []

    @pytest.mark.asyncio
    async def test_location_outage_is_audited_with_the_run(self, components, audit_storage):
        """Test that failed lookups share the analysis run's correlation id."""
        await components.analysis.run_full_analysis(
            {**BUDGET, "location": {"lat": 3.139, "lng": 101.6869}}
        )

        events = await audit_storage.get_recent_events()
        errors = [e for e in events if e.event_type == AuditEventType.EXTERNAL_SERVICE_ERROR]
        run = next(e for e in events if e.event_type == AuditEventType.ANALYSIS_RUN)
        assert {e.details["service"] for e in errors} == {"nominatim", "overpass"}
        assert {e.correlation_id for e in errors} == {run.correlation_id}

    @pytest.mark.asyncio
    async def test_explain_analysis(self, components, audit_storage):
        """Test explanations built from an analysis."""
        analysis = await components.analysis.run_full_analysis(BUDGET)
        recommendation = analysis.optimization.recommendations[0]

        payload = await components.analysis.explain_analysis(
            "recommendation", analysis, {"recommendation": recommendation}
        )

        assert "context" in payload
        assert AuditEventType.AI_FALLBACK_USED in await _event_types(audit_storage)


class TestPlanningFlow:
    """Tests for PlanningFlow."""

    @pytest.mark.asyncio
    async def test_wealth_strategy_and_plan(self, components, audit_storage):
        """Test the keyless strategy feeding the engine."""
        goal = WealthRequest(target_amount=12000, duration=1)
        strategy = await components.planning.wealth_strategy(goal)

        plan = components.planning.savings_plan(SavingsPlanRequest(goal=goal, strategy=strategy))

        assert plan.linear_monthly == 1000
        assert plan.savings_percent == strategy.allocation.savings_percent
        event = (await audit_storage.get_recent_events())[0]
        assert event.event_type == AuditEventType.WEALTH_STRATEGY_GENERATED
        assert event.details["used_fallback"] is True

    @pytest.mark.asyncio
    async def test_planners_return_documents(self, components):
        """Test that every planner answers without a key."""
        assert "ev_options" in await components.planning.ev_comparison(VehicleRequest())
        assert "relocation_options" in await components.planning.relocation(RelocationRequest())
        assert "suggestions" in await components.planning.lifestyle(LifestyleRequest())

    def test_travel_request_for_round_trip(self):
        """Test that round trips count both legs."""
        route = TravelRoute.model_validate({**COMMUTE, "id": "r1"})
        request = PlanningFlow.travel_request_for(route)

        assert request.trips_per_week == 10
        assert request.destination == "KLCC"


class TestProfileFlow:
    """Tests for ProfileFlow."""

    @pytest.mark.asyncio
    async def test_get_missing_profile(self, components):
        """Test the not-found error."""
        with pytest.raises(NotFoundError):
            await components.profiles.get("ghost")

    @pytest.mark.asyncio
    async def test_get_or_create(self, components, audit_storage):
        """Test the default profile."""
        profile = await components.profiles.get_or_create("u1")

        assert profile.name == "New User"
        assert profile.household_size == 1
        assert await _event_types(audit_storage) == [AuditEventType.PROFILE_CREATED]

    @pytest.mark.asyncio
    async def test_update_merges(self, components):
        """Test that a patch keeps untouched fields."""
        await components.profiles.update("u1", {"name": "Aina", "rent": 1200})
        profile = await components.profiles.update("u1", {"transport_cost": 300})

        assert profile.name == "Aina"
        assert profile.rent == 1200
        assert profile.transport_cost == 300

    @pytest.mark.asyncio
    async def test_financial_change_resets_optimizations(self, components):
        """Test that accepted optimizations go stale when the budget changes."""
        await components.profiles.update("u1", {"income": 4000, "optimizedCategories": ["housing"]})

        unchanged = await components.profiles.update("u1", {"income": 4000, "name": "Aina"})
        assert unchanged.optimized_categories == ["housing"]

        changed = await components.profiles.update("u1", {"rent": 900})
        assert changed.optimized_categories == []

    @pytest.mark.asyncio
    async def test_invalid_update(self, components):
        """Test a field-level error."""
        with pytest.raises(InputValidationError, match="rent"):
            await components.profiles.update("u1", {"rent": -100})

    @pytest.mark.asyncio
    async def test_accept_recommendation(self, components, audit_storage):
        """Test applying one recommendation to the profile."""
        await components.profiles.replace("u1", {
            "income": 4000, "rent": 2000, "transportCost": 300, "food": 500, "savings": 2000,
        })
        inputs = components.profiles.monthly_inputs(await components.profiles.get("u1"))
        result = await components.analysis.optimize(inputs.model_dump(by_alias=True))
        housing = result.recommendations[0]

        profile = await components.profiles.accept_recommendation("u1", housing)

        assert profile.rent == 1200
        assert profile.transport_cost == 450
        assert profile.optimized_categories == ["housing"]
        assert components.profiles.visible_recommendations(profile, result.recommendations) == [
            result.recommendations[1]
        ]
        assert AuditEventType.RECOMMENDATION_ACCEPTED in await _event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_apply_all(self, components):
        """Test applying every recommendation at once."""
        await components.profiles.replace("u1", {
            "income": 4000, "rent": 2000, "transportCost": 300, "food": 500, "savings": 2000,
        })
        result = await components.analysis.optimize(BUDGET)

        profile = await components.profiles.apply_all("u1", result.recommendations)

        assert profile.rent == 1200
        assert profile.food == 400
        assert set(profile.optimized_categories) == {
            RecommendationType.HOUSING.value,
            RecommendationType.LIFESTYLE.value,
        }

    @pytest.mark.asyncio
    async def test_claim_subsidy_once(self, components):
        """Test that claiming twice keeps one entry."""
        program = DEFAULT_PROGRAMS[0]
        await components.profiles.claim_subsidy("u1", program)
        profile = await components.profiles.claim_subsidy("u1", program)

        assert [c.program_id for c in profile.claimed_subsidies] == ["STR"]
        assert profile.claimed_subsidies[0].monthly_benefit == 308

        profile = await components.profiles.unclaim_subsidy("u1", "STR")
        assert profile.claimed_subsidies == []

    @pytest.mark.asyncio
    async def test_lifestyle_tracking(self, components):
        """Test applying, unapplying and resetting lifestyle changes."""
        suggestion = {"title": "Subscription Audit", "category": "subscriptions", "estimated_monthly_savings": 40}

        await components.profiles.apply_lifestyle("u1", suggestion)
        profile = await components.profiles.apply_lifestyle("u1", suggestion)
        assert len(profile.applied_lifestyle_optimizations) == 1
        assert profile.applied_lifestyle_optimizations[0].monthly_savings == 40

        profile = await components.profiles.unapply_lifestyle("u1", "Subscription Audit")
        assert profile.applied_lifestyle_optimizations == []

        await components.profiles.update("u1", {"lifestyleSuggestionCache": {"suggestions": []}})
        profile = await components.profiles.reset_lifestyle("u1")
        assert profile.lifestyle_suggestion_cache is None

    @pytest.mark.asyncio
    async def test_travel_routes(self, components):
        """Test logging, annotating and deleting a commute."""
        route = await components.profiles.add_travel_route("u1", COMMUTE)

        assert route.weekly_cost == 50
        assert route.monthly_cost == 216.5
        assert route.yearly_cost == 2600
        assert route.avg_travel_time_total == 65

        planner = await components.planning.travel(components.planning.travel_request_for(route))
        await components.profiles.attach_travel_scenarios("u1", route.id, planner)
        profile = await components.profiles.select_travel_option("u1", route.id, "cheapest")

        saved = profile.transport_optimizations[0]
        assert saved.selected_option_id == "cheapest"
        assert saved.ai_scenarios.cheapest_option.monthly_cost == 151.55

        profile = await components.profiles.delete_travel_route("u1", route.id)
        assert profile.transport_optimizations == []

    @pytest.mark.asyncio
    async def test_travel_route_errors(self, components):
        """Test missing fields, unknown routes and bad options."""
        with pytest.raises(InputValidationError, match="startLocation and destination are required"):
            await components.profiles.add_travel_route("u1", {**COMMUTE, "destination": ""})

        with pytest.raises(NotFoundError):
            await components.profiles.select_travel_option("u1", "missing", "cheapest")

        route = await components.profiles.add_travel_route("u1", COMMUTE)
        with pytest.raises(InputValidationError):
            await components.profiles.select_travel_option("u1", route.id, "teleport")

    @pytest.mark.asyncio
    async def test_wealth_strategies(self, components):
        """Test keeping, replacing and deleting plans."""
        plan = WealthPlusStrategy(
            id="s1", label="Holiday", monthly_amount=500, savings_alloc=300, investment_alloc=200
        )
        await components.profiles.save_wealth_strategy("u1", plan)
        profile = await components.profiles.save_wealth_strategy(
            "u1", plan.model_copy(update={"label": "Japan trip"})
        )

        assert [s.label for s in profile.wealth_plus_strategies] == ["Japan trip"]

        profile = await components.profiles.delete_wealth_strategy("u1", "s1")
        assert profile.wealth_plus_strategies == []

    @pytest.mark.asyncio
    async def test_smart_goals(self, components):
        """Test appending goals."""
        goal = SmartGoal(id="g1", name="Emergency fund", target_amount=6000, deadline_months=12)
        profile = await components.profiles.add_smart_goal("u1", goal)
        assert profile.smart_goals[0].name == "Emergency fund"


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_without_storage(self):
        """Test the in-memory wiring."""
        components = create_app_components(use_storage=False)

        assert components.sheets_client is None
        assert components.analysis.catalog.source == "built-in"
