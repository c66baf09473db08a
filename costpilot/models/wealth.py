"""
Wealth+ Models

The strategy document mirrors the JSON the model is asked to return,
so it stays snake_case. Requests and computed plans are engine
contracts and speak camelCase like the rest of the API.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from costpilot.models.finance import CamelModel


class RiskAppetite(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class GoalType(str, Enum):
    SHORT = "short"
    LONG = "long"


class Allocation(BaseModel):
    """Percent split across the four buckets. Sums to 100."""

    savings_percent: int = Field(ge=0, le=100)
    dividend_percent: int = Field(ge=0, le=100)
    etf_percent: int = Field(ge=0, le=100)
    growth_percent: int = Field(ge=0, le=100)

    @property
    def total(self) -> int:
        return self.savings_percent + self.dividend_percent + self.etf_percent + self.growth_percent


class Instrument(BaseModel):
    """A savings account or listed share. Share fields are absent for savings."""

    model_config = ConfigDict(extra="allow")

    name: str
    estimated_rate: Optional[float] = None
    url: Optional[str] = None
    price_per_unit: Optional[float] = None
    cost_per_lot: Optional[float] = None
    roe: Optional[float] = None
    dividend_yield: Optional[float] = None


class InstrumentGroup(BaseModel):
    category: str
    examples: list[Instrument] = Field(default_factory=list)


class ReturnAssumptions(BaseModel):
    """Annual return ranges in percent, as [low, high]."""

    savings_range: tuple[float, float]
    dividend_range: tuple[float, float]
    etf_range: tuple[float, float]
    growth_range: tuple[float, float]


class StrategyAnalysis(BaseModel):
    strategy_summary: str = ""
    risk_explanation: str = ""
    liquidity_commentary: str = ""
    goal_feasibility: str = ""
    adjustment_suggestion: str = ""


class WealthStrategy(BaseModel):
    """
    A Wealth+ strategy document.

    identified_instruments[0] holds savings options and
    identified_instruments[1] holds investment options.
    """

    model_config = ConfigDict(extra="ignore")

    allocation: Allocation
    identified_instruments: list[InstrumentGroup] = Field(default_factory=list)
    return_assumptions: ReturnAssumptions
    analysis: StrategyAnalysis = Field(default_factory=StrategyAnalysis)
    disclaimer: str = ""

    @property
    def savings_options(self) -> list[Instrument]:
        return self.identified_instruments[0].examples if self.identified_instruments else []

    @property
    def investment_options(self) -> list[Instrument]:
        if len(self.identified_instruments) < 2:
            return []
        return self.identified_instruments[1].examples


class WealthRequest(CamelModel):
    """A savings goal: reach target_amount within duration (months if short, else years)."""

    target_amount: float = Field(gt=0)
    duration: int = Field(ge=1)
    is_short: bool = False
    risk: RiskAppetite = RiskAppetite.MODERATE

    @property
    def goal_type(self) -> GoalType:
        return GoalType.SHORT if self.is_short else GoalType.LONG

    @property
    def months(self) -> int:
        return self.duration if self.is_short else self.duration * 12


class SavingsPlanRequest(CamelModel):
    """
    Inputs for computing a plan.

    savings_choice indexes the strategy's savings options; basket maps
    an investment option index to the number of lots bought monthly.
    """

    goal: WealthRequest
    strategy: Optional[WealthStrategy] = None
    savings_choice: Optional[int] = 0
    savings_percent: Optional[int] = Field(
        default=None,
        ge=0,
        le=100,
        description="Manual override of the strategy's savings split"
    )
    basket: dict[int, int] = Field(default_factory=dict)


class SavingsPlan(CamelModel):
    months: int
    linear_monthly: int
    optimized_monthly: int
    engine_return: float = Field(description="Blended annual return as a fraction")
    projected_value: int = Field(description="Value of the linear contribution after compounding")
    savings_percent: int
    investment_percent: int
    savings_amount: int
    investment_amount: int
    investment_budget: int
    basket_cost: float
    remaining_budget: float
    is_feasible: bool
