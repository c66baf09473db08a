"""
Core Financial Models for CostPilot

These models define the contracts of the deterministic engine:
monthly budget in, stress / signals / scenarios / recommendations out.

DESIGN DECISION: Python attributes are snake_case, the wire format is
camelCase (the dashboard and any other client speak camelCase).
`populate_by_name` lets internal code build models with snake_case
keywords while the API accepts and emits camelCase.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# ENUMS
# =============================================================================

class RiskLevel(str, Enum):
    """Risk band of a stress score."""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


class ExpenseCategory(str, Enum):
    """
    Expense categories that can become pressure sources.

    Order matters: ties in share keep this order.
    """
    RENT = "Rent"
    UTILITIES = "Utilities"
    TRANSPORT = "Transport"
    FOOD = "Food"
    DEBT = "Debt"
    SUBSCRIPTIONS = "Subscriptions"


class RecommendationType(str, Enum):
    """Optimization families the optimizer can propose."""
    HOUSING = "housing"
    TRANSPORT = "transport"
    LIFESTYLE = "lifestyle"
    DEBT = "debt"


# =============================================================================
# INPUTS
# =============================================================================

class MonthlyInputs(CamelModel):
    """
    A normalized monthly budget.

    All amounts are RM per month except savings_balance, which is a stock.
    Build these through validation.validate_and_normalize when the data
    comes from outside the process.
    """

    income_monthly: float = Field(default=0.0, ge=0)
    rent_monthly: float = Field(default=0.0, ge=0)
    utilities_monthly: float = Field(default=0.0, ge=0)
    transport_monthly: float = Field(default=0.0, ge=0)
    food_monthly: float = Field(default=0.0, ge=0)
    debt_monthly: float = Field(default=0.0, ge=0)
    subscriptions_monthly: float = Field(default=0.0, ge=0)
    savings_balance: float = Field(default=0.0, ge=0)

    @property
    def total_expenses(self) -> float:
        return (
            self.rent_monthly
            + self.utilities_monthly
            + self.transport_monthly
            + self.food_monthly
            + self.debt_monthly
            + self.subscriptions_monthly
        )

    @property
    def monthly_balance(self) -> float:
        return self.income_monthly - self.total_expenses

    def expense_breakdown(self) -> list[tuple[ExpenseCategory, float]]:
        """Expense amounts keyed by category, in category order."""
        return [
            (ExpenseCategory.RENT, self.rent_monthly),
            (ExpenseCategory.UTILITIES, self.utilities_monthly),
            (ExpenseCategory.TRANSPORT, self.transport_monthly),
            (ExpenseCategory.FOOD, self.food_monthly),
            (ExpenseCategory.DEBT, self.debt_monthly),
            (ExpenseCategory.SUBSCRIPTIONS, self.subscriptions_monthly),
        ]

    def merged(self, changes: dict[str, Any]) -> "MonthlyInputs":
        """
        Return a copy with `changes` applied.

        Keys may be camelCase (wire) or snake_case (attribute) names;
        unknown keys are ignored.
        """
        data = self.model_dump()
        for key, value in changes.items():
            name = field_name_for(key)
            if name is not None:
                data[name] = value
        return MonthlyInputs.model_validate(data)


#: camelCase wire name -> attribute name, in canonical field order
MONTHLY_FIELDS: dict[str, str] = {
    info.alias or name: name
    for name, info in MonthlyInputs.model_fields.items()
}


def field_name_for(key: str) -> Optional[str]:
    """Resolve a wire or attribute name to a MonthlyInputs attribute."""
    if key in MONTHLY_FIELDS:
        return MONTHLY_FIELDS[key]
    if key in MonthlyInputs.model_fields:
        return key
    return None


# =============================================================================
# STRESS & SIGNALS
# =============================================================================

class StressResult(CamelModel):
    """Output of the stress scoring formula."""

    stress_score: float = Field(ge=0, le=100)
    risk_level: RiskLevel
    expense_ratio: float
    buffer_months: float
    debt_ratio: float
    pressure_sources: list[ExpenseCategory] = Field(default_factory=list)


class Overspending(BaseModel):
    """Per-category overspending flags (keys are category labels)."""

    model_config = ConfigDict(populate_by_name=True)

    food: bool = Field(default=False, alias="Food")
    transport: bool = Field(default=False, alias="Transport")
    subscriptions: bool = Field(default=False, alias="Subscriptions")


class RiskFlags(CamelModel):
    low_buffer: bool = False
    high_debt: bool = False
    expenses_over_income: bool = False


class SignalNumbers(CamelModel):
    monthly_balance: float = 0.0
    savings_potential: float = 0.0


class Signals(CamelModel):
    """Threshold-based flags derived from a budget and its stress result."""

    overspending: Overspending
    risk_flags: RiskFlags
    numbers: SignalNumbers


class MonthlySummary(CamelModel):
    stress: StressResult
    signals: Signals


# =============================================================================
# SCENARIOS & RECOMMENDATIONS
# =============================================================================

class ScenarioDelta(CamelModel):
    """
    Difference between a base budget and a changed one.

    survival_months describes the changed budget: how long savings last
    at the new burn rate (999 when the balance is non-negative).
    """

    stress_score: float
    monthly_balance: float
    survival_months: float


class ScenarioResult(CamelModel):
    base: StressResult
    after: StressResult
    delta: ScenarioDelta


class Recommendation(CamelModel):
    """A simulated budget change that improves stress or cash flow."""

    type: RecommendationType
    title: str
    changes: dict[str, float] = Field(
        default_factory=dict,
        description="camelCase MonthlyInputs fields and their proposed values"
    )
    simulation_result: ScenarioResult
    potential_savings: float
    reason: str


class OptimizeResult(CamelModel):
    base: StressResult
    recommendations: list[Recommendation] = Field(default_factory=list)
    total_savings: float = 0.0


# =============================================================================
# HOUSING TRADE-OFF
# =============================================================================

class HousingOption(CamelModel):
    rent_monthly: float = 0.0
    transport_monthly: float = 0.0
    commute_time_mins: float = 0.0


class TradeoffResult(CamelModel):
    cheaper_option: str
    monthly_cost_difference: float
    commute_time_difference: float
    insight: str


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'zero_income', 'high_debt')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (types, ranges)
    Stage 2: Semantic validation (budget sanity checks)
    """

    schema_valid: bool
    semantic_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.schema_valid and self.semantic_valid

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
