"""
Profile Models

One document per user holding the self-reported budget plus everything
the user has saved from the planners (goals, strategies, routes,
claimed subsidies, applied lifestyle changes).

DESIGN DECISION: The profile keeps its own field names (income, rent,
transportCost, ...) rather than the engine's MonthlyInputs names.
to_monthly_inputs() and PROFILE_FIELD_TO_INPUT are the single bridge
between the two.
"""

import time
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from costpilot.models.finance import CamelModel, MonthlyInputs
from costpilot.models.location import GeoPoint


def now_ms() -> int:
    """Epoch milliseconds, the timestamp format stored on profile items."""
    return int(time.time() * 1000)


class EmploymentStatus(str, Enum):
    EMPLOYED = "employed"
    UNEMPLOYED = "unemployed"
    STUDENT = "student"
    SELF_EMPLOYED = "self-employed"


class SmartGoal(CamelModel):
    id: str
    name: str
    target_amount: float = Field(ge=0)
    deadline_months: int = Field(ge=1)
    category: Optional[str] = None
    created_at: int = Field(default_factory=now_ms)


class StrategyInvestment(CamelModel):
    name: str
    lots: int = Field(ge=0)
    cost_per_lot: float = Field(ge=0)


class WealthPlusStrategy(CamelModel):
    """A savings plan the user chose to keep."""

    id: str
    label: str
    monthly_amount: float
    savings_alloc: float
    investment_alloc: float
    savings_option: Optional[str] = None
    investments: list[StrategyInvestment] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms)
    target_amount: Optional[float] = None
    duration: Optional[int] = None
    risk: Optional[str] = None
    goal_type: Optional[str] = None


class TravelScenario(BaseModel):
    """One AI-proposed commute alternative (snake_case, as the model returns it)."""

    method: str
    estimated_cost_per_trip: float
    weekly_cost: float
    monthly_cost: float
    yearly_cost: float
    estimated_time: str
    reasoning: str = ""


class TravelScenarios(BaseModel):
    cheapest_option: TravelScenario
    balanced_option: TravelScenario
    fastest_option: TravelScenario
    estimated_monthly_savings: float
    estimated_yearly_savings: float


class TravelRoute(CamelModel):
    """A commute the user logged, with its computed costs."""

    id: str
    start_location: str
    destination: str
    method: str
    trips_per_week: int = Field(ge=0)
    is_round_trip: bool = True
    avg_travel_time_go: float = Field(default=0, ge=0)
    avg_travel_time_return: float = Field(default=0, ge=0)
    cost_per_trip: float = Field(ge=0)
    weekly_cost: float = 0
    monthly_cost: float = 0
    yearly_cost: float = 0
    avg_travel_time_total: float = 0
    created_at: int = Field(default_factory=now_ms)
    ai_scenarios: Optional[TravelScenarios] = None
    selected_option_id: Optional[str] = Field(
        default=None,
        pattern="^(cheapest|balanced|fastest|current)$"
    )


class ClaimedSubsidy(CamelModel):
    program_id: str
    name: str
    monthly_benefit: float = 0
    benefit_text: str = ""
    claimed_at: int = Field(default_factory=now_ms)


class AppliedLifestyleOptimization(CamelModel):
    title: str
    category: str
    monthly_savings: float
    applied_at: int = Field(default_factory=now_ms)


#: profile field (wire name) -> MonthlyInputs field (wire name)
PROFILE_FIELD_TO_INPUT: dict[str, str] = {
    "income": "incomeMonthly",
    "rent": "rentMonthly",
    "utilities": "utilitiesMonthly",
    "transportCost": "transportMonthly",
    "food": "foodMonthly",
    "debt": "debtMonthly",
    "subscriptions": "subscriptionsMonthly",
    "savings": "savingsBalance",
}

INPUT_TO_PROFILE_FIELD: dict[str, str] = {v: k for k, v in PROFILE_FIELD_TO_INPUT.items()}

#: Changing any of these invalidates previously accepted optimizations
FINANCIAL_FIELDS = frozenset(PROFILE_FIELD_TO_INPUT)


class UserProfile(CamelModel):
    """The per-user profile document."""

    model_config = ConfigDict(extra="ignore")

    name: str = "New User"
    photo_url: str = ""
    income: float = Field(default=0, ge=0)
    rent: float = Field(default=0, ge=0)
    location: Union[GeoPoint, str, None] = ""
    occupation: str = ""
    age: int = Field(default=0, ge=0)
    employment_status: EmploymentStatus = EmploymentStatus.EMPLOYED
    state: str = ""
    household_size: int = Field(default=1, ge=1)
    commute_method: Union[str, list[str]] = "car"
    commute_distance_km: float = Field(default=0, ge=0)

    utilities: float = Field(default=0, ge=0)
    transport_cost: float = Field(default=0, ge=0)
    food: float = Field(default=0, ge=0)
    debt: float = Field(default=0, ge=0)
    subscriptions: float = Field(default=0, ge=0)
    savings: float = Field(default=0, ge=0)
    emergency_savings: float = Field(default=0, ge=0)

    optimized_categories: list[str] = Field(default_factory=list)
    has_completed_onboarding: bool = False
    smart_goals: list[SmartGoal] = Field(default_factory=list)
    wealth_plus_strategies: list[WealthPlusStrategy] = Field(default_factory=list)
    transport_optimizations: list[TravelRoute] = Field(default_factory=list)
    claimed_subsidies: list[ClaimedSubsidy] = Field(default_factory=list)
    engine_status: dict[str, bool] = Field(default_factory=dict)
    applied_lifestyle_optimizations: list[AppliedLifestyleOptimization] = Field(default_factory=list)
    lifestyle_suggestion_cache: Optional[dict[str, Any]] = None

    def to_monthly_inputs(self) -> MonthlyInputs:
        return MonthlyInputs(
            income_monthly=self.income,
            rent_monthly=self.rent,
            utilities_monthly=self.utilities,
            transport_monthly=self.transport_cost,
            food_monthly=self.food,
            debt_monthly=self.debt,
            subscriptions_monthly=self.subscriptions,
            savings_balance=self.savings,
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize as the stored (camelCase) document."""
        return self.model_dump(mode="json", by_alias=True)

    @property
    def coordinates(self) -> Optional[GeoPoint]:
        return self.location if isinstance(self.location, GeoPoint) else None
