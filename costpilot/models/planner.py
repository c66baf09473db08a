"""
Planner Request Models

Inputs for the AI planners (travel, EV, relocation, lifestyle). These
travel straight into prompts, so they keep the snake_case names the
planner screens send. Every field is optional; the planners fill in
defaults for anything missing.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class PlannerRequest(BaseModel):
    model_config = ConfigDict(extra="allow")


class CommuteRequest(PlannerRequest):
    start_location: Optional[str] = None
    destination: Optional[str] = None
    method: Optional[str] = None
    trips_per_week: Optional[float] = None
    cost_per_trip: Optional[float] = None
    weekly_cost: Optional[float] = None
    monthly_cost: Optional[float] = None
    yearly_cost: Optional[float] = None
    avg_travel_time_total: Optional[float] = None


class VehicleRequest(PlannerRequest):
    monthly_distance_km: Optional[float] = None
    current_fuel_cost_per_litre: Optional[float] = None
    current_fuel_consumption_per_100km: Optional[float] = None
    current_monthly_petrol_cost: Optional[float] = None
    current_monthly_maintenance: Optional[float] = None
    current_monthly_roadtax: Optional[float] = None
    current_monthly_insurance: Optional[float] = None
    current_car_model: Optional[str] = None
    commute_routes: Optional[Any] = None


class RelocationRequest(PlannerRequest):
    current_location: Optional[str] = None
    work_location: Optional[str] = None
    preferred_areas: Optional[str] = None
    current_rent: Optional[float] = None
    monthly_income: Optional[float] = None
    transport_method: Optional[str] = None
    monthly_transport_cost: Optional[float] = None


class LifestyleRequest(PlannerRequest):
    monthly_income: Optional[float] = None
    food_budget: Optional[float] = None
    subscriptions_budget: Optional[float] = None
    utilities_budget: Optional[float] = None
    cooking_habit: Optional[str] = None
    dining_frequency: Optional[str] = None
    subscription_list: Optional[str] = None
    shopping_habit: Optional[str] = None
    entertainment_habit: Optional[str] = None
    occupation: Optional[str] = None
    household_size: Optional[int] = None
    state: Optional[str] = None
