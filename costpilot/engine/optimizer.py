"""
Recommendation Optimizer

DESIGN DECISION: Recommendations are found by simulation, not by rules
of thumb alone. Each trigger proposes a concrete budget change, the
change is simulated, and only changes that actually lower stress or
raise the monthly balance survive. The model never invents a
recommendation; it may only reword the reason of the best one.
"""

from typing import Any, Optional, Protocol

import structlog

from costpilot.engine.constants import (
    DEBT_RATIO_TRIGGER,
    FOOD_TRIGGER,
    NO_INCOME_RATIO,
    RENT_INCOME_TRIGGER,
    SUBSCRIPTIONS_TRIGGER,
    TRANSPORT_TRIGGER,
)
from costpilot.engine.rounding import round_int, round_to
from costpilot.engine.simulation import simulate_scenario
from costpilot.engine.stress import calculate_stress
from costpilot.models.finance import (
    ExpenseCategory,
    MonthlyInputs,
    OptimizeResult,
    Recommendation,
    RecommendationType,
    StressResult,
)


logger = structlog.get_logger(__name__)

AI_PERSONALIZED_SUFFIX = " (AI Personalized)"


class Explainer(Protocol):
    """Anything that can explain a fact bundle (the insight agent)."""

    async def explain_with_meta(self, kind: str, facts: dict[str, Any]) -> Any:
        ...


def _candidates(inputs: MonthlyInputs, stress: StressResult):
    """Yield (changes, title, type, reason) for every triggered rule."""
    pressure = set(stress.pressure_sources)
    income = inputs.income_monthly
    if income > 0:
        rent_share = inputs.rent_monthly / income
    else:
        rent_share = NO_INCOME_RATIO if inputs.rent_monthly > 0 else 0.0

    if ExpenseCategory.RENT in pressure or rent_share > RENT_INCOME_TRIGGER:
        yield (
            {"rentMonthly": round_int(inputs.rent_monthly * 0.75)},
            "Move to Cheaper Unit / Get Housemate",
            RecommendationType.HOUSING,
            "Rent consumes a large portion of your income. Reducing it by 25% has the biggest impact.",
        )
        yield (
            {
                "rentMonthly": round_int(inputs.rent_monthly * 0.6),
                "transportMonthly": inputs.transport_monthly + 150,
            },
            "Move Further Out (Lower Rent, Higher Transport)",
            RecommendationType.HOUSING,
            "Moving to a cheaper area can save significantly on rent, even with slightly higher transport costs.",
        )

    if inputs.transport_monthly > TRANSPORT_TRIGGER or ExpenseCategory.TRANSPORT in pressure:
        yield (
            {"transportMonthly": round_int(inputs.transport_monthly * 0.7)},
            "Optimize Commute (Public Transit pass)",
            RecommendationType.TRANSPORT,
            "Switching to monthly passes or carpooling can reduce transport costs by ~30%.",
        )

    if inputs.subscriptions_monthly > SUBSCRIPTIONS_TRIGGER or ExpenseCategory.SUBSCRIPTIONS in pressure:
        yield (
            {"subscriptionsMonthly": round_int(inputs.subscriptions_monthly * 0.5)},
            "Audit Subscriptions",
            RecommendationType.LIFESTYLE,
            "Cutting unused subscriptions is an easy win for immediate cash flow.",
        )

    if inputs.food_monthly > FOOD_TRIGGER or ExpenseCategory.FOOD in pressure:
        yield (
            {"foodMonthly": round_int(inputs.food_monthly * 0.8)},
            "Cook More Often",
            RecommendationType.LIFESTYLE,
            "Reducing dining out frequency can save ~20% on food costs.",
        )

    high_debt = inputs.debt_monthly > 0 and stress.debt_ratio > DEBT_RATIO_TRIGGER
    if high_debt or ExpenseCategory.DEBT in pressure:
        yield (
            {"debtMonthly": round_int(inputs.debt_monthly * 0.85)},
            "Refinance High-Interest Debt",
            RecommendationType.DEBT,
            "Lowering monthly debt obligations improves cash flow stability.",
        )


def build_recommendations(
    inputs: MonthlyInputs,
    stress: Optional[StressResult] = None,
) -> list[Recommendation]:
    """
    Deterministic recommendations, best first, at most one per type.

    Ordering: largest stress reduction first, then largest savings.
    """
    stress = stress or calculate_stress(inputs)
    found = []

    for changes, title, rec_type, reason in _candidates(inputs, stress):
        result = simulate_scenario(inputs, changes)
        if result.delta.stress_score < 0 or result.delta.monthly_balance > 0:
            found.append(Recommendation(
                type=rec_type,
                title=title,
                changes=changes,
                simulation_result=result,
                potential_savings=result.delta.monthly_balance,
                reason=reason,
            ))

    found.sort(key=lambda r: (r.simulation_result.delta.stress_score, -r.potential_savings))

    selected = []
    used_types = set()
    for rec in found:
        if rec.type not in used_types:
            selected.append(rec)
            used_types.add(rec.type)

    return selected


def total_savings(recommendations: list[Recommendation]) -> float:
    return round_to(sum(r.potential_savings for r in recommendations), 2)


class Optimizer:
    """
    Builds recommendations and lets the insight agent personalize the top one.

    Personalization is best-effort: any failure leaves the deterministic
    reason in place.
    """

    def __init__(self, explainer: Optional[Explainer] = None):
        self._explainer = explainer

    async def _personalize(self, best: Recommendation, stress: StressResult) -> None:
        facts = {
            "title": best.title,
            "type": best.type.value,
            "reason": best.reason,
            "savings": best.potential_savings,
            "currentStress": stress.stress_score,
            "projectedStress": best.simulation_result.after.stress_score,
            "delta": best.simulation_result.delta.model_dump(by_alias=True),
        }
        try:
            explanation = await self._explainer.explain_with_meta("optimize", facts)
        except Exception as e:
            logger.warning("personalization_failed", error=str(e), title=best.title)
            return

        payload = explanation.payload
        text = payload.get("reason")
        if not text and not explanation.used_fallback:
            text = payload.get("context")
        if isinstance(text, str) and text.strip():
            best.reason = text.strip() + AI_PERSONALIZED_SUFFIX

    async def optimize(
        self,
        inputs: MonthlyInputs,
        stress: Optional[StressResult] = None,
    ) -> OptimizeResult:
        stress = stress or calculate_stress(inputs)
        recommendations = build_recommendations(inputs, stress)

        if recommendations and self._explainer is not None:
            await self._personalize(recommendations[0], stress)

        return OptimizeResult(
            base=stress,
            recommendations=recommendations,
            total_savings=total_savings(recommendations),
        )
