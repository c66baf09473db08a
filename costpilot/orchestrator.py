"""
Main Orchestrator for CostPilot

This module ties together all the components and defines the
end-to-end flows for:
1. Analysis (budget → validate → stress & signals → subsidies → recommendations → location)
2. Planning (Wealth+ strategy and plan, travel / EV / relocation / lifestyle planners)
3. Profiles (load, merge-update, accept recommendations, save planner results)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every number comes from the deterministic engine, never from the model
- The model only words explanations and suggestions, with a fallback for each
- Every step is audited under one correlation ID per request

Both the HTTP API and the Streamlit dashboard drive these flows, so the
two surfaces can never disagree about a result.
"""

import math
from collections.abc import Mapping
from typing import Any, NamedTuple, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from costpilot.agents import InsightAgent, OptimizationAgent, WealthAgent
from costpilot.audit import AuditLogger, create_correlation_id
from costpilot.engine import (
    Optimizer,
    build_insight_facts,
    build_savings_plan,
    calculate_stress,
    compare_housing_options,
    compute_signals,
    route_costs,
    simulate_scenario,
)
from costpilot.errors import InputValidationError
from costpilot.models import (
    AnalysisResult,
    AppliedLifestyleOptimization,
    ClaimedSubsidy,
    CommuteRequest,
    DerivedNumbers,
    Financials,
    GeoPoint,
    HousingOption,
    LifestyleRequest,
    LocationContext,
    MonthlyInputs,
    MonthlySummary,
    OptimizationSummary,
    OptimizeResult,
    Recommendation,
    RelocationRequest,
    RouteEstimate,
    SavingsPlan,
    SavingsPlanRequest,
    ScenarioResult,
    SmartGoal,
    SubsidyMatchResult,
    SubsidyProfile,
    SubsidyProgram,
    TradeoffResult,
    TravelRoute,
    UserProfile,
    VehicleRequest,
    WealthPlusStrategy,
    WealthRequest,
    WealthStrategy,
)
from costpilot.models.profile import FINANCIAL_FIELDS, INPUT_TO_PROFILE_FIELD, now_ms
from costpilot.services.location import LocationService, RouteService
from costpilot.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsProfileStorage,
    InMemoryAuditStorage,
    InMemoryProfileStorage,
    NotFoundError,
    ProfileStorageInterface,
)
from costpilot.services.subsidies import SubsidyCatalog
from costpilot.validation import validate_and_normalize


logger = structlog.get_logger(__name__)


def _number(value: Any) -> float:
    """Lenient numeric read for optional profile facts; junk counts as 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0
    return result if math.isfinite(result) else 0


def _first_error(e: ValidationError) -> InputValidationError:
    error = e.errors()[0]
    field = ".".join(str(part) for part in error["loc"]) or "body"
    return InputValidationError(f"Field '{field}': {error['msg']}", field=field)


class AnalysisFlow:
    """
    Orchestrates the budget analysis flow.

    Flow:
    1. Validate → Normalize the eight budget fields (400 on bad input)
    2. Score → Stress score and threshold signals
    3. Match → Subsidy eligibility from the profile facts in the body
    4. Optimize → Deterministic recommendations, top one personalized
    5. Locate → Nearby transit and place name when coordinates are given

    Steps 1-4 never touch the network unless a subsidy CSV is configured.
    """

    def __init__(
        self,
        catalog: Optional[SubsidyCatalog] = None,
        location_service: Optional[LocationService] = None,
        insight_agent: Optional[InsightAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit_logger = audit_logger or AuditLogger()
        self._catalog = catalog or SubsidyCatalog(audit_logger=self._audit_logger)
        self._location_service = location_service or LocationService(audit_logger=self._audit_logger)
        self._insight_agent = insight_agent or InsightAgent()
        self._optimizer = Optimizer(explainer=self._insight_agent)

    @property
    def catalog(self) -> SubsidyCatalog:
        return self._catalog

    async def _validate(self, raw: Any, correlation_id: Optional[UUID], prefix: str = "") -> MonthlyInputs:
        try:
            return validate_and_normalize(raw)
        except InputValidationError as e:
            await self._audit_logger.log_validation_failed(
                field=e.field,
                message=e.message,
                correlation_id=correlation_id,
            )
            if prefix:
                raise InputValidationError(f"{prefix}{e.message}", field=e.field) from e
            raise

    async def monthly_summary(
        self,
        raw: Any,
        correlation_id: Optional[UUID] = None,
    ) -> MonthlySummary:
        """Stress and signals for a raw budget."""
        correlation_id = correlation_id or create_correlation_id()
        inputs = await self._validate(raw, correlation_id)

        stress = calculate_stress(inputs)
        await self._audit_logger.log_stress_computed(
            stress_score=stress.stress_score,
            risk_level=stress.risk_level.value,
            correlation_id=correlation_id,
        )
        return MonthlySummary(stress=stress, signals=compute_signals(inputs, stress))

    async def simulate(
        self,
        base: Any,
        changes: Mapping[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> ScenarioResult:
        """
        What-if comparison of `base` against `base` with `changes`.

        Errors in the base budget are prefixed 'base: ', errors the
        changes introduce are prefixed 'changes: '.
        """
        correlation_id = correlation_id or create_correlation_id()
        clean_base = await self._validate(base, correlation_id, prefix="base: ")

        merged = {**clean_base.model_dump(by_alias=True), **changes}
        after = await self._validate(merged, correlation_id, prefix="changes: ")

        clean_changes = {
            key: value
            for key, value in after.model_dump(by_alias=True).items()
            if key in changes
        }
        result = simulate_scenario(clean_base, clean_changes)

        await self._audit_logger.log_scenario_simulated(
            changes=clean_changes,
            stress_delta=result.delta.stress_score,
            balance_delta=result.delta.monthly_balance,
            correlation_id=correlation_id,
        )
        return result

    async def optimize(
        self,
        raw: Any,
        correlation_id: Optional[UUID] = None,
    ) -> OptimizeResult:
        correlation_id = correlation_id or create_correlation_id()
        inputs = await self._validate(raw, correlation_id)

        result = await self._optimizer.optimize(inputs)
        await self._audit_logger.log_recommendations_generated(
            types=[r.type.value for r in result.recommendations],
            total_savings=result.total_savings,
            correlation_id=correlation_id,
        )
        return result

    async def match_subsidies(
        self,
        profile: SubsidyProfile,
        correlation_id: Optional[UUID] = None,
    ) -> SubsidyMatchResult:
        await self._catalog.refresh_if_stale()
        result = self._catalog.match(profile)
        await self._audit_logger.log_subsidies_matched(
            eligible=len(result.matches),
            not_eligible=len(result.not_eligible),
            correlation_id=correlation_id,
        )
        return result

    async def location_context(
        self,
        lat: float,
        lng: float,
        correlation_id: Optional[UUID] = None,
    ) -> LocationContext:
        context = await self._location_service.get_context(lat, lng, correlation_id)
        await self._audit_logger.log_location_resolved(
            city=context.city,
            state=context.state,
            station_count=len(context.nearby_transit),
            correlation_id=correlation_id,
        )
        return context

    async def run_full_analysis(
        self,
        body: Any,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AnalysisResult:
        """
        The whole dashboard in one call.

        Besides the budget fields the body may carry age,
        employmentStatus, state, householdSize (default 1) and
        location {lat, lng}.
        """
        correlation_id = correlation_id or create_correlation_id()
        inputs = await self._validate(body, correlation_id)

        subsidy_profile = SubsidyProfile(
            income=inputs.income_monthly,
            age=int(_number(body.get("age"))),
            employment_status=body.get("employmentStatus") or "",
            state=body.get("state") or "",
            household_size=int(_number(body.get("householdSize"))) or 1,
        )

        stress = calculate_stress(inputs)
        signals = compute_signals(inputs, stress)
        await self._audit_logger.log_stress_computed(
            stress_score=stress.stress_score,
            risk_level=stress.risk_level.value,
            correlation_id=correlation_id,
        )

        subsidies = await self.match_subsidies(subsidy_profile, correlation_id)
        optimization = await self._optimizer.optimize(inputs, stress)

        location_context = None
        location = body.get("location")
        if isinstance(location, Mapping) and location.get("lat") and location.get("lng"):
            location_context = await self.location_context(
                _number(location["lat"]),
                _number(location["lng"]),
                correlation_id,
            )

        result = AnalysisResult(
            financials=Financials(
                stress=stress,
                signals=signals,
                derived=DerivedNumbers(
                    monthly_balance=signals.numbers.monthly_balance,
                    survival_months=stress.buffer_months,
                ),
            ),
            subsidies=subsidies,
            optimization=OptimizationSummary(
                base=MonthlySummary(stress=stress, signals=signals),
                recommendations=optimization.recommendations,
                total_savings=optimization.total_savings,
            ),
            location_context=location_context,
        )

        await self._audit_logger.log_analysis_run(
            user_id=user_id,
            stress_score=stress.stress_score,
            recommendation_count=len(optimization.recommendations),
            correlation_id=correlation_id,
        )
        return result

    async def explain(
        self,
        kind: str,
        facts: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> dict[str, Any]:
        """Explanation payload for a fact bundle (model or fallback)."""
        result = await self._insight_agent.explain_with_meta(kind, facts)
        await self._audit_logger.log_insight(
            kind=kind,
            used_fallback=result.used_fallback,
            reason=result.fallback_reason,
            correlation_id=correlation_id,
        )
        return result.payload

    async def explain_analysis(
        self,
        kind: str,
        analysis: AnalysisResult,
        context: Optional[dict[str, Any]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> dict[str, Any]:
        facts = build_insight_facts(kind, analysis, context)
        return await self.explain(kind, facts, correlation_id)

    def tradeoff(self, option_a: HousingOption, option_b: HousingOption) -> TradeoffResult:
        return compare_housing_options(option_a, option_b)


class PlanningFlow:
    """
    Orchestrates the planners.

    Wealth+ splits the work: the model proposes instruments, the engine
    computes every contribution. The cost planners return the model's
    document, or the fixed reference plan when it is unavailable.
    """

    def __init__(
        self,
        wealth_agent: Optional[WealthAgent] = None,
        optimization_agent: Optional[OptimizationAgent] = None,
        route_service: Optional[RouteService] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit_logger = audit_logger or AuditLogger()
        self._wealth_agent = wealth_agent or WealthAgent()
        self._optimization_agent = optimization_agent or OptimizationAgent()
        self._route_service = route_service or RouteService(audit_logger=self._audit_logger)

    async def wealth_strategy(
        self,
        request: WealthRequest,
        correlation_id: Optional[UUID] = None,
    ) -> WealthStrategy:
        strategy, used_fallback = await self._wealth_agent.generate_strategy(request)
        await self._audit_logger.log_wealth_strategy(
            target_amount=request.target_amount,
            risk_appetite=request.risk.value,
            used_fallback=used_fallback,
            correlation_id=correlation_id,
        )
        return strategy

    def savings_plan(self, request: SavingsPlanRequest) -> SavingsPlan:
        return build_savings_plan(
            request.goal,
            strategy=request.strategy,
            savings_choice=request.savings_choice,
            basket=request.basket,
            savings_percent=request.savings_percent,
        )

    async def _record(self, result, correlation_id: Optional[UUID]) -> dict[str, Any]:
        await self._audit_logger.log_insight(
            kind=result.kind,
            used_fallback=result.used_fallback,
            reason=result.fallback_reason,
            correlation_id=correlation_id,
        )
        return result.payload

    async def travel(self, request: CommuteRequest, correlation_id: Optional[UUID] = None) -> dict[str, Any]:
        return await self._record(
            await self._optimization_agent.travel_optimization(request), correlation_id
        )

    async def ev_comparison(self, request: VehicleRequest, correlation_id: Optional[UUID] = None) -> dict[str, Any]:
        return await self._record(
            await self._optimization_agent.ev_comparison(request), correlation_id
        )

    async def relocation(self, request: RelocationRequest, correlation_id: Optional[UUID] = None) -> dict[str, Any]:
        return await self._record(
            await self._optimization_agent.relocation_suggestions(request), correlation_id
        )

    async def lifestyle(self, request: LifestyleRequest, correlation_id: Optional[UUID] = None) -> dict[str, Any]:
        return await self._record(
            await self._optimization_agent.lifestyle_suggestions(request), correlation_id
        )

    async def commute_route(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        correlation_id: Optional[UUID] = None,
    ) -> RouteEstimate:
        return await self._route_service.get_route(origin, destination, correlation_id)

    @staticmethod
    def travel_request_for(route: TravelRoute) -> CommuteRequest:
        """The planner request for a logged commute (round trips count twice)."""
        return CommuteRequest(
            start_location=route.start_location,
            destination=route.destination,
            method=route.method,
            trips_per_week=route.trips_per_week * (2 if route.is_round_trip else 1),
            cost_per_trip=route.cost_per_trip,
            weekly_cost=route.weekly_cost,
            monthly_cost=route.monthly_cost,
            yearly_cost=route.yearly_cost,
            avg_travel_time_total=route.avg_travel_time_total,
        )


class ProfileFlow:
    """
    Orchestrates profile changes.

    Every change is a merge of a camelCase patch into the stored
    document, mirroring a document-store update. Changing any financial
    field resets the accepted optimizations unless the patch sets them.
    """

    def __init__(
        self,
        storage: Optional[ProfileStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage or InMemoryProfileStorage()
        self._audit_logger = audit_logger or AuditLogger()

    @staticmethod
    def _wire_key(key: str) -> str:
        field = UserProfile.model_fields.get(key)
        return (field.alias or key) if field is not None else key

    async def get(self, user_id: str) -> UserProfile:
        profile = await self._storage.get_profile(user_id)
        if profile is None:
            raise NotFoundError(f"Profile not found: {user_id}")
        return profile

    async def get_or_create(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        profile = await self._storage.get_profile(user_id)
        if profile is not None:
            return profile

        profile = UserProfile()
        await self._storage.save_profile(user_id, profile)
        await self._audit_logger.log_profile_created(user_id, correlation_id)
        return profile

    async def replace(
        self,
        user_id: str,
        document: Mapping[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        """Overwrite the whole profile document."""
        try:
            profile = UserProfile.model_validate(dict(document))
        except ValidationError as e:
            raise _first_error(e) from e
        await self._storage.save_profile(user_id, profile)
        await self._audit_logger.log_profile_updated(user_id, sorted(document), correlation_id)
        return profile

    async def update(
        self,
        user_id: str,
        patch: Mapping[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        """Merge `patch` (camelCase or snake_case keys) into the profile."""
        current = await self.get_or_create(user_id, correlation_id)
        document = current.to_document()
        patch = {self._wire_key(key): value for key, value in patch.items()}

        financial_change = any(
            key in patch and patch[key] != document.get(key)
            for key in FINANCIAL_FIELDS
        )
        if financial_change and "optimizedCategories" not in patch:
            patch["optimizedCategories"] = []

        try:
            profile = UserProfile.model_validate({**document, **patch})
        except ValidationError as e:
            raise _first_error(e) from e

        await self._storage.save_profile(user_id, profile)
        await self._audit_logger.log_profile_updated(user_id, sorted(patch), correlation_id)
        return profile

    @staticmethod
    def monthly_inputs(profile: UserProfile) -> MonthlyInputs:
        return profile.to_monthly_inputs()

    @staticmethod
    def _changes_to_patch(changes: Mapping[str, float]) -> dict[str, float]:
        return {
            INPUT_TO_PROFILE_FIELD[key]: value
            for key, value in changes.items()
            if key in INPUT_TO_PROFILE_FIELD
        }

    async def accept_recommendation(
        self,
        user_id: str,
        recommendation: Recommendation,
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        """Apply one recommendation's changes and hide its category."""
        profile = await self.get_or_create(user_id, correlation_id)

        patch: dict[str, Any] = self._changes_to_patch(recommendation.changes)
        categories = list(profile.optimized_categories)
        if recommendation.type.value not in categories:
            categories.append(recommendation.type.value)
        patch["optimizedCategories"] = categories

        updated = await self.update(user_id, patch, correlation_id)
        await self._audit_logger.log_recommendation_accepted(
            user_id=user_id,
            recommendation_type=recommendation.type.value,
            changes=recommendation.changes,
            correlation_id=correlation_id,
        )
        return updated

    async def apply_all(
        self,
        user_id: str,
        recommendations: list[Recommendation],
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        """Apply every recommendation at once; later changes win on overlap."""
        profile = await self.get_or_create(user_id, correlation_id)
        if not recommendations:
            return profile

        merged: dict[str, float] = {}
        for recommendation in recommendations:
            merged.update(recommendation.changes)

        patch: dict[str, Any] = self._changes_to_patch(merged)
        categories = list(profile.optimized_categories)
        for recommendation in recommendations:
            if recommendation.type.value not in categories:
                categories.append(recommendation.type.value)
        patch["optimizedCategories"] = categories

        return await self.update(user_id, patch, correlation_id)

    @staticmethod
    def visible_recommendations(
        profile: UserProfile,
        recommendations: list[Recommendation],
    ) -> list[Recommendation]:
        """Recommendations whose category the user has not already accepted."""
        done = set(profile.optimized_categories)
        return [r for r in recommendations if r.type.value not in done]

    async def claim_subsidy(
        self,
        user_id: str,
        program: SubsidyProgram,
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        profile = await self.get_or_create(user_id, correlation_id)
        if any(c.program_id == program.program_id for c in profile.claimed_subsidies):
            return profile

        claimed = profile.claimed_subsidies + [ClaimedSubsidy(
            program_id=program.program_id,
            name=program.name,
            monthly_benefit=program.monthly_benefit or 0,
            benefit_text=program.benefit_text,
        )]
        return await self.update(
            user_id,
            {"claimedSubsidies": [c.model_dump(by_alias=True) for c in claimed]},
            correlation_id,
        )

    async def unclaim_subsidy(
        self,
        user_id: str,
        program_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        profile = await self.get_or_create(user_id, correlation_id)
        remaining = [c for c in profile.claimed_subsidies if c.program_id != program_id]
        return await self.update(
            user_id,
            {"claimedSubsidies": [c.model_dump(by_alias=True) for c in remaining]},
            correlation_id,
        )

    async def apply_lifestyle(
        self,
        user_id: str,
        suggestion: Mapping[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        """Record a lifestyle suggestion as applied (once per title)."""
        profile = await self.get_or_create(user_id, correlation_id)
        title = suggestion.get("title", "")
        if any(o.title == title for o in profile.applied_lifestyle_optimizations):
            return profile

        applied = profile.applied_lifestyle_optimizations + [AppliedLifestyleOptimization(
            title=title,
            category=suggestion.get("category") or "general",
            monthly_savings=_number(suggestion.get("estimated_monthly_savings")),
        )]
        return await self.update(
            user_id,
            {"appliedLifestyleOptimizations": [o.model_dump(by_alias=True) for o in applied]},
            correlation_id,
        )

    async def unapply_lifestyle(
        self,
        user_id: str,
        title: str,
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        profile = await self.get_or_create(user_id, correlation_id)
        remaining = [o for o in profile.applied_lifestyle_optimizations if o.title != title]
        return await self.update(
            user_id,
            {"appliedLifestyleOptimizations": [o.model_dump(by_alias=True) for o in remaining]},
            correlation_id,
        )

    async def reset_lifestyle(self, user_id: str, correlation_id: Optional[UUID] = None) -> UserProfile:
        return await self.update(
            user_id,
            {"lifestyleSuggestionCache": None, "appliedLifestyleOptimizations": []},
            correlation_id,
        )

    async def _save_routes(
        self,
        user_id: str,
        routes: list[TravelRoute],
        correlation_id: Optional[UUID],
    ) -> UserProfile:
        return await self.update(
            user_id,
            {"transportOptimizations": [r.model_dump(by_alias=True) for r in routes]},
            correlation_id,
        )

    async def add_travel_route(
        self,
        user_id: str,
        route: Mapping[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> TravelRoute:
        """
        Log a commute with its cost roll-up.

        `route` holds startLocation, destination, method, tripsPerWeek,
        isRoundTrip, avgTravelTimeGo, avgTravelTimeReturn and costPerTrip.
        """
        if not route.get("startLocation") or not route.get("destination"):
            raise InputValidationError("startLocation and destination are required", field="startLocation")

        profile = await self.get_or_create(user_id, correlation_id)
        try:
            draft = TravelRoute.model_validate({"id": str(now_ms()), **route})
        except ValidationError as e:
            raise _first_error(e) from e

        costs = route_costs(
            draft.cost_per_trip,
            draft.trips_per_week,
            draft.is_round_trip,
            draft.avg_travel_time_go,
            draft.avg_travel_time_return,
        )
        new_route = draft.model_copy(update=costs._asdict())

        await self._save_routes(user_id, profile.transport_optimizations + [new_route], correlation_id)
        return new_route

    async def delete_travel_route(
        self,
        user_id: str,
        route_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        profile = await self.get_or_create(user_id, correlation_id)
        routes = [r for r in profile.transport_optimizations if r.id != route_id]
        return await self._save_routes(user_id, routes, correlation_id)

    async def _update_route(
        self,
        user_id: str,
        route_id: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID],
    ) -> UserProfile:
        profile = await self.get_or_create(user_id, correlation_id)
        if not any(r.id == route_id for r in profile.transport_optimizations):
            raise NotFoundError(f"Route not found: {route_id}")
        try:
            routes = [
                TravelRoute.model_validate({**r.model_dump(), **changes}) if r.id == route_id else r
                for r in profile.transport_optimizations
            ]
        except ValidationError as e:
            raise _first_error(e) from e
        return await self._save_routes(user_id, routes, correlation_id)

    async def attach_travel_scenarios(
        self,
        user_id: str,
        route_id: str,
        scenarios: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        return await self._update_route(user_id, route_id, {"ai_scenarios": scenarios}, correlation_id)

    async def select_travel_option(
        self,
        user_id: str,
        route_id: str,
        option_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        return await self._update_route(
            user_id, route_id, {"selected_option_id": option_id}, correlation_id
        )

    async def save_wealth_strategy(
        self,
        user_id: str,
        strategy: WealthPlusStrategy,
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        """Add a kept plan, or replace the one with the same id."""
        profile = await self.get_or_create(user_id, correlation_id)
        existing = profile.wealth_plus_strategies
        if any(s.id == strategy.id for s in existing):
            strategies = [strategy if s.id == strategy.id else s for s in existing]
        else:
            strategies = existing + [strategy]
        return await self.update(
            user_id,
            {"wealthPlusStrategies": [s.model_dump(by_alias=True) for s in strategies]},
            correlation_id,
        )

    async def delete_wealth_strategy(
        self,
        user_id: str,
        strategy_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        profile = await self.get_or_create(user_id, correlation_id)
        remaining = [s for s in profile.wealth_plus_strategies if s.id != strategy_id]
        return await self.update(
            user_id,
            {"wealthPlusStrategies": [s.model_dump(by_alias=True) for s in remaining]},
            correlation_id,
        )

    async def add_smart_goal(
        self,
        user_id: str,
        goal: SmartGoal,
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        profile = await self.get_or_create(user_id, correlation_id)
        goals = profile.smart_goals + [goal]
        return await self.update(
            user_id,
            {"smartGoals": [g.model_dump(by_alias=True) for g in goals]},
            correlation_id,
        )


class AppComponents(NamedTuple):
    analysis: AnalysisFlow
    planning: PlanningFlow
    profiles: ProfileFlow
    audit_logger: AuditLogger
    sheets_client: Optional[GoogleSheetsClient]


def create_app_components(
    use_storage: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to connect Google Sheets storage.
                    When False, or when Sheets is not configured,
                    profiles and audit events live in memory.
    """
    sheets_client = None
    profile_storage = None
    audit_storage = None

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            sheets_client.get_spreadsheet()
            profile_storage = GoogleSheetsProfileStorage(sheets_client)
            audit_storage = GoogleSheetsAuditStorage(sheets_client)
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            profile_storage = None
            audit_storage = None

    profile_storage = profile_storage or InMemoryProfileStorage()
    audit_logger = AuditLogger(audit_storage or InMemoryAuditStorage())

    return AppComponents(
        analysis=AnalysisFlow(audit_logger=audit_logger),
        planning=PlanningFlow(audit_logger=audit_logger),
        profiles=ProfileFlow(storage=profile_storage, audit_logger=audit_logger),
        audit_logger=audit_logger,
        sheets_client=sheets_client,
    )
