"""
Data Models Package

This package contains all Pydantic models used in CostPilot.
All data flowing through the system must conform to these schemas.
"""

from costpilot.models.finance import (
    CamelModel,
    ExpenseCategory,
    HousingOption,
    MONTHLY_FIELDS,
    MonthlyInputs,
    MonthlySummary,
    OptimizeResult,
    Overspending,
    Recommendation,
    RecommendationType,
    RiskFlags,
    RiskLevel,
    ScenarioDelta,
    ScenarioResult,
    SignalNumbers,
    Signals,
    StressResult,
    TradeoffResult,
    ValidationIssue,
    ValidationResult,
)
from costpilot.models.profile import (
    AppliedLifestyleOptimization,
    ClaimedSubsidy,
    EmploymentStatus,
    FINANCIAL_FIELDS,
    SmartGoal,
    TravelRoute,
    TravelScenario,
    TravelScenarios,
    UserProfile,
    WealthPlusStrategy,
)
from costpilot.models.subsidy import (
    SubsidyMatch,
    SubsidyMatchResult,
    SubsidyProfile,
    SubsidyProgram,
)
from costpilot.models.wealth import (
    Allocation,
    GoalType,
    Instrument,
    InstrumentGroup,
    ReturnAssumptions,
    RiskAppetite,
    SavingsPlan,
    SavingsPlanRequest,
    StrategyAnalysis,
    WealthRequest,
    WealthStrategy,
)
from costpilot.models.location import (
    GeoPoint,
    LocationContext,
    ResolvedPlace,
    RouteEstimate,
    TransitStation,
)
from costpilot.models.planner import (
    CommuteRequest,
    LifestyleRequest,
    RelocationRequest,
    VehicleRequest,
)
from costpilot.models.analysis import (
    AnalysisResult,
    DerivedNumbers,
    Financials,
    OptimizationSummary,
)
from costpilot.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "CamelModel",
    "ExpenseCategory",
    "HousingOption",
    "MONTHLY_FIELDS",
    "MonthlyInputs",
    "MonthlySummary",
    "OptimizeResult",
    "Overspending",
    "Recommendation",
    "RecommendationType",
    "RiskFlags",
    "RiskLevel",
    "ScenarioDelta",
    "ScenarioResult",
    "SignalNumbers",
    "Signals",
    "StressResult",
    "TradeoffResult",
    "ValidationIssue",
    "ValidationResult",
    # Profile models
    "AppliedLifestyleOptimization",
    "ClaimedSubsidy",
    "EmploymentStatus",
    "FINANCIAL_FIELDS",
    "SmartGoal",
    "TravelRoute",
    "TravelScenario",
    "TravelScenarios",
    "UserProfile",
    "WealthPlusStrategy",
    # Subsidy models
    "SubsidyMatch",
    "SubsidyMatchResult",
    "SubsidyProfile",
    "SubsidyProgram",
    # Wealth models
    "Allocation",
    "GoalType",
    "Instrument",
    "InstrumentGroup",
    "ReturnAssumptions",
    "RiskAppetite",
    "SavingsPlan",
    "SavingsPlanRequest",
    "StrategyAnalysis",
    "WealthRequest",
    "WealthStrategy",
    # Location models
    "GeoPoint",
    "LocationContext",
    "ResolvedPlace",
    "RouteEstimate",
    "TransitStation",
    # Planner request models
    "CommuteRequest",
    "LifestyleRequest",
    "RelocationRequest",
    "VehicleRequest",
    # Analysis models
    "AnalysisResult",
    "DerivedNumbers",
    "Financials",
    "OptimizationSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
