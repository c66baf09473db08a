"""
Insight Fact Bundles and Fallback Explanations

DESIGN DECISION: The model only ever sees a curated bundle of
deterministic facts, never the raw request. When the model is
unavailable the same facts are turned into a fixed-template
explanation, so every screen always has text to show.
"""

from typing import Any, Optional

from costpilot.engine.constants import SAFE_SURVIVAL_MONTHS
from costpilot.engine.rounding import format_number
from costpilot.models.analysis import AnalysisResult
from costpilot.models.finance import Recommendation


def _base_facts(analysis: AnalysisResult) -> dict[str, Any]:
    stress = analysis.financials.stress
    signals = analysis.financials.signals
    location = analysis.location_context

    return {
        "monthlyBalance": signals.numbers.monthly_balance,
        "stressScore": stress.stress_score,
        "pressureSources": [source.value for source in stress.pressure_sources],
        "riskFlags": signals.risk_flags.model_dump(by_alias=True),
        "location": location.summary() if location else "Not provided",
    }


def build_insight_facts(
    kind: str,
    analysis: AnalysisResult,
    context: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Build the fact bundle for an explanation of `kind`.

    Kinds: 'dashboard', 'recommendation' (context['recommendation'] is
    the Recommendation to explain), 'subsidy' (context['profile'] holds
    incomeMonthly / householdSize). Unknown kinds get the base facts.
    """
    context = context or {}
    facts = _base_facts(analysis)

    if kind == "dashboard":
        facts["topOptimizations"] = [
            {
                "title": rec.title,
                "type": rec.type.value,
                "potentialSavings": rec.potential_savings,
            }
            for rec in analysis.optimization.recommendations[:3]
        ]
        facts["survivalMonths"] = analysis.financials.derived.survival_months
        return facts

    if kind == "recommendation":
        rec = context.get("recommendation")
        if rec is None:
            return facts
        if not isinstance(rec, Recommendation):
            rec = Recommendation.model_validate(rec)

        facts["recommendation"] = {
            "title": rec.title,
            "type": rec.type.value,
            "savings": rec.potential_savings,
            "prediction": {
                "newBalance": facts["monthlyBalance"] + rec.potential_savings,
                "stressDelta": f"{rec.simulation_result.delta.stress_score:.2f}",
            },
        }
        return facts

    if kind == "subsidy":
        profile = context.get("profile") or {}
        subsidies = analysis.subsidies
        facts.update({
            "income": profile.get("incomeMonthly"),
            "householdSize": profile.get("householdSize"),
            "eligibleCount": len(subsidies.matches),
            "eligiblePrograms": [s.name for s in subsidies.matches],
            "notEligiblePrograms": [
                {"name": s.name, "reason": "; ".join(s.reasons)}
                for s in subsidies.not_eligible
            ],
        })
        return facts

    return facts


def _num(value: Any, default: float = 0) -> float:
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _fmt(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value)
    return str(value)


def fallback_explain(kind: str, facts: dict[str, Any]) -> dict[str, Any]:
    """Deterministic explanation used whenever the model cannot answer."""
    if kind == "scenario":
        ds = _num(facts.get("deltaStressScore"))
        dm = _num(facts.get("deltaMonthlyBalance"))
        sm = _num(facts.get("survivalMonths"), SAFE_SURVIVAL_MONTHS)

        return {
            "headline": f"Stress increases by {_fmt(ds)}" if ds > 0 else f"Stress changes by {_fmt(ds)}",
            "reason": f"Monthly balance changes by RM{_fmt(dm)}.",
            "tradeoff": (
                "Cashflow is non-negative in this scenario."
                if sm == SAFE_SURVIVAL_MONTHS
                else f"Estimated survival: {_fmt(sm)} months if income stops."
            ),
            "confidence": 60,
        }

    if kind == "stress":
        score = _num(facts.get("stressScore"))
        sources = facts.get("pressureSources")
        sources_text = " + ".join(str(s) for s in sources) if isinstance(sources, list) else "key expenses"

        return {
            "headline": f"Stress score is {_fmt(score)}",
            "reason": f"Main pressure comes from {sources_text}.",
            "tradeoff": "Reducing top pressure categories improves score fastest.",
            "confidence": 60,
        }

    if kind in ("recommendation", "optimize"):
        delta = facts.get("delta") or {}
        savings = _fmt((delta.get("monthlyBalance") if isinstance(delta, dict) else None) or 0)
        title = facts.get("title") or "budget"

        return {
            "context": (
                f"Optimizing your **{title}** is a proven way to free up cash. "
                f"Given your profile, this could save you *RM {savings}* monthly. "
                "Consider exploring cheaper options in your area or adjusting your daily habits "
                "to lock in these savings."
            ),
            "highlight_box": {
                "title": "KEY INSIGHT",
                "tags": ["Savings Potential", "Actionable"],
                "description": (
                    "Moving to a more affordable option or reducing this expense "
                    f"saves *RM {savings}* per month."
                ),
            },
            "outcome_headline": f"Estimated *RM {savings}* increase in monthly cash flow",
            "outcome_bullets": [
                f"Increased monthly cash buffer by RM {savings}",
                "Reduced financial stress score instantly",
                "Improved long-term savings rate",
            ],
            "tradeoff": "May require a one-time adjustment or slightly longer commute.",
            "confidence": 50,
        }

    savings = facts.get("savings")
    return {
        "headline": "Recommendation summary",
        "reason": (
            f"Optimizing {facts.get('type') or 'expenses'} can increase your monthly balance "
            f"by RM {_fmt(savings) if savings else '...'}"
        ),
        "tradeoff": "Higher savings usually requires reducing discretionary spending.",
        "confidence": 55,
    }
