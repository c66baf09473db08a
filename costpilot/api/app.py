"""
HTTP API for CostPilot

DESIGN DECISION: Route handlers only unpack the request and hand it to
an orchestrator flow. Error translation lives in the exception
handlers:
- InputValidationError / malformed bodies → 400 {"error": message}
- NotFoundError → 404 {"error": message}
- anything else → 500 with a generic message (the exception is logged)
"""

from collections.abc import Mapping
from typing import Any, Optional

import structlog
from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from costpilot import __version__
from costpilot.config import get_settings
from costpilot.errors import InputValidationError
from costpilot.models import (
    CommuteRequest,
    GeoPoint,
    HousingOption,
    LifestyleRequest,
    Recommendation,
    RelocationRequest,
    SavingsPlanRequest,
    SmartGoal,
    SubsidyProfile,
    VehicleRequest,
    WealthRequest,
)
from costpilot.orchestrator import AppComponents, create_app_components
from costpilot.services.storage import NotFoundError


logger = structlog.get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_message(e) -> str:
    error = e.errors()[0]
    field = ".".join(str(part) for part in error["loc"] if part != "body") or "body"
    return f"Field '{field}': {error['msg']}"


def _require_object(payload: Any, *keys: str, message: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping) or any(payload.get(key) in (None, "") for key in keys):
        raise InputValidationError(message)
    return payload


def _parse(model, data: Any, field: str):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InputValidationError(f"{field}: {_validation_message(e)}", field=field) from e


def create_app(components: Optional[AppComponents] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        components: Pre-built flows (tests pass in-memory ones). When
                    omitted they are created from settings.
    """
    settings = get_settings()
    if components is None:
        components = create_app_components(use_storage=settings.app.use_storage)

    analysis = components.analysis
    planning = components.planning
    profiles = components.profiles

    app = FastAPI(title="CostPilot API", version=__version__)
    app.state.components = components

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.exception_handler(InputValidationError)
    async def input_error_handler(request: Request, exc: InputValidationError):
        return _error(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_error_handler(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            "request_failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        await components.audit_logger.log_error(
            error_type=type(exc).__name__,
            error_message=str(exc),
            details={"path": request.url.path},
        )
        return _error(500, "Internal server error")

    # =========================================================================
    # FINANCIAL ENGINE
    # =========================================================================

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.post("/analysis")
    async def run_analysis(payload: Any = Body(default=None), user_id: Optional[str] = None):
        return await analysis.run_full_analysis(payload, user_id=user_id)

    @app.post("/summary/monthly")
    async def monthly_summary(payload: Any = Body(default=None)):
        return await analysis.monthly_summary(payload)

    @app.post("/simulate")
    async def simulate(payload: Any = Body(default=None)):
        body = _require_object(payload, "base", "changes", message="Body must include { base, changes }")
        if not isinstance(body["changes"], Mapping):
            raise InputValidationError("Body must include { base, changes }", field="changes")
        return await analysis.simulate(body["base"], body["changes"])

    @app.post("/explain")
    async def explain(payload: Any = Body(default=None)):
        body = payload if isinstance(payload, Mapping) else {}
        kind = body.get("type")
        facts = body.get("facts")
        if not kind or not isinstance(kind, str):
            raise InputValidationError("Missing 'type'", field="type")
        if not isinstance(facts, Mapping):
            raise InputValidationError("Missing 'facts' object", field="facts")
        return await analysis.explain(kind, dict(facts))

    @app.post("/tradeoff")
    async def tradeoff(payload: Any = Body(default=None)):
        body = _require_object(
            payload, "optionA", "optionB", message="Both optionA and optionB are required"
        )
        return analysis.tradeoff(
            _parse(HousingOption, body["optionA"], "optionA"),
            _parse(HousingOption, body["optionB"], "optionB"),
        )

    @app.post("/optimize")
    async def optimize(payload: Any = Body(default=None)):
        return await analysis.optimize(payload)

    # =========================================================================
    # AI PLANNERS
    # =========================================================================

    @app.post("/optimize/travel")
    async def optimize_travel(request: CommuteRequest):
        return await planning.travel(request)

    @app.post("/optimize/ev-comparison")
    async def optimize_ev(request: VehicleRequest):
        return await planning.ev_comparison(request)

    @app.post("/optimize/relocation")
    async def optimize_relocation(request: RelocationRequest):
        return await planning.relocation(request)

    @app.post("/optimize/lifestyle")
    async def optimize_lifestyle(request: LifestyleRequest):
        return await planning.lifestyle(request)

    # =========================================================================
    # SUBSIDIES, MAPS, WEALTH+
    # =========================================================================

    @app.get("/subsidies/catalog")
    async def subsidy_catalog():
        await analysis.catalog.refresh_if_stale()
        return analysis.catalog.programs

    @app.post("/subsidies/match")
    async def match_subsidies(payload: Any = Body(default=None)):
        profile = _parse(SubsidyProfile, payload if payload is not None else {}, "profile")
        return await analysis.match_subsidies(profile)

    @app.post("/maps")
    async def maps(payload: Any = Body(default=None)):
        body = _require_object(
            payload, "origin", "destination", message="origin and destination required"
        )
        return await planning.commute_route(
            _parse(GeoPoint, body["origin"], "origin"),
            _parse(GeoPoint, body["destination"], "destination"),
        )

    @app.post("/wealth/strategy")
    async def wealth_strategy(request: WealthRequest):
        return await planning.wealth_strategy(request)

    @app.post("/wealth/plan")
    async def wealth_plan(request: SavingsPlanRequest):
        return planning.savings_plan(request)

    # =========================================================================
    # PROFILES
    # =========================================================================

    @app.get("/profiles/{user_id}")
    async def get_profile(user_id: str):
        return await profiles.get_or_create(user_id)

    @app.put("/profiles/{user_id}")
    async def replace_profile(user_id: str, payload: dict[str, Any] = Body(...)):
        return await profiles.replace(user_id, payload)

    @app.patch("/profiles/{user_id}")
    async def update_profile(user_id: str, payload: dict[str, Any] = Body(...)):
        return await profiles.update(user_id, payload)

    @app.post("/profiles/{user_id}/accept")
    async def accept_recommendation(user_id: str, recommendation: Recommendation):
        return await profiles.accept_recommendation(user_id, recommendation)

    @app.post("/profiles/{user_id}/lifestyle")
    async def apply_lifestyle(user_id: str, payload: Any = Body(default=None)):
        suggestion = _require_object(payload, "title", message="Suggestion must include a title")
        return await profiles.apply_lifestyle(user_id, suggestion)

    @app.delete("/profiles/{user_id}/lifestyle/{title}")
    async def unapply_lifestyle(user_id: str, title: str):
        return await profiles.unapply_lifestyle(user_id, title)

    @app.post("/profiles/{user_id}/lifestyle/reset")
    async def reset_lifestyle(user_id: str):
        return await profiles.reset_lifestyle(user_id)

    @app.post("/profiles/{user_id}/travel-routes")
    async def add_travel_route(user_id: str, payload: Any = Body(default=None)):
        route = _require_object(
            payload, "startLocation", "destination", message="startLocation and destination are required"
        )
        return await profiles.add_travel_route(user_id, route)

    @app.delete("/profiles/{user_id}/travel-routes/{route_id}")
    async def delete_travel_route(user_id: str, route_id: str):
        return await profiles.delete_travel_route(user_id, route_id)

    @app.put("/profiles/{user_id}/travel-routes/{route_id}/scenarios")
    async def attach_travel_scenarios(user_id: str, route_id: str, scenarios: dict[str, Any] = Body(...)):
        return await profiles.attach_travel_scenarios(user_id, route_id, scenarios)

    @app.put("/profiles/{user_id}/travel-routes/{route_id}/selection")
    async def select_travel_option(user_id: str, route_id: str, payload: Any = Body(default=None)):
        body = _require_object(payload, "optionId", message="optionId is required")
        return await profiles.select_travel_option(user_id, route_id, body["optionId"])

    @app.delete("/profiles/{user_id}/wealth-strategies/{strategy_id}")
    async def delete_wealth_strategy(user_id: str, strategy_id: str):
        return await profiles.delete_wealth_strategy(user_id, strategy_id)

    @app.post("/profiles/{user_id}/goals")
    async def add_smart_goal(user_id: str, goal: SmartGoal):
        return await profiles.add_smart_goal(user_id, goal)

    return app
