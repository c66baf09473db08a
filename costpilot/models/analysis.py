"""
Full Analysis Result

The single document the dashboard renders: financial health,
subsidies, recommendations and (when coordinates were given) the
location context.
"""

from typing import Optional

from pydantic import Field

from costpilot.models.finance import (
    CamelModel,
    MonthlySummary,
    Recommendation,
    Signals,
    StressResult,
)
from costpilot.models.location import LocationContext
from costpilot.models.subsidy import SubsidyMatchResult


class DerivedNumbers(CamelModel):
    monthly_balance: float
    survival_months: float = Field(
        description="Months of expenses covered by savings (the stress buffer)"
    )


class Financials(CamelModel):
    stress: StressResult
    signals: Signals
    derived: DerivedNumbers


class OptimizationSummary(CamelModel):
    base: MonthlySummary
    recommendations: list[Recommendation] = Field(default_factory=list)
    total_savings: float = 0.0


class AnalysisResult(CamelModel):
    financials: Financials
    subsidies: SubsidyMatchResult
    optimization: OptimizationSummary
    location_context: Optional[LocationContext] = None
