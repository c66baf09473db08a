"""
Deterministic Financial Engine

Pure functions over pydantic models. Nothing in this package performs
I/O; the only async entry point is Optimizer, which may ask an
injected explainer to reword a recommendation.
"""

from costpilot.engine.commute import estimate_route, haversine_km, route_costs
from costpilot.engine.insights import build_insight_facts, fallback_explain
from costpilot.engine.optimizer import Optimizer, build_recommendations, total_savings
from costpilot.engine.signals import compute_signals
from costpilot.engine.simulation import simulate_scenario, survival_months
from costpilot.engine.stress import calculate_stress
from costpilot.engine.tradeoffs import compare_housing_options
from costpilot.engine.wealth import (
    build_savings_plan,
    default_allocation,
    default_strategy,
    future_value,
    linear_monthly,
    required_monthly_contribution,
)

__all__ = [
    "Optimizer",
    "build_insight_facts",
    "build_recommendations",
    "build_savings_plan",
    "calculate_stress",
    "compare_housing_options",
    "compute_signals",
    "default_allocation",
    "default_strategy",
    "estimate_route",
    "fallback_explain",
    "future_value",
    "haversine_km",
    "linear_monthly",
    "required_monthly_contribution",
    "route_costs",
    "simulate_scenario",
    "survival_months",
    "total_savings",
]
