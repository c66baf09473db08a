"""What-if scenarios: apply changes to a budget and compare stress."""

from typing import Any

from costpilot.engine.constants import SAFE_SURVIVAL_MONTHS
from costpilot.engine.rounding import round_to
from costpilot.engine.stress import calculate_stress
from costpilot.models.finance import MonthlyInputs, ScenarioDelta, ScenarioResult


def survival_months(inputs: MonthlyInputs) -> float:
    """Months the savings balance lasts at the current burn rate."""
    balance = inputs.monthly_balance
    if balance >= 0:
        return SAFE_SURVIVAL_MONTHS
    return inputs.savings_balance / -balance


def simulate_scenario(base: MonthlyInputs, changes: dict[str, Any]) -> ScenarioResult:
    """
    Compare `base` with `base` overridden by `changes`.

    changes may use wire (camelCase) or attribute names. Delta survival
    months is reported for the changed budget, not as a difference.
    """
    after = base.merged(changes)

    base_stress = calculate_stress(base)
    after_stress = calculate_stress(after)

    return ScenarioResult(
        base=base_stress,
        after=after_stress,
        delta=ScenarioDelta(
            stress_score=round_to(after_stress.stress_score - base_stress.stress_score, 2),
            monthly_balance=round_to(after.monthly_balance - base.monthly_balance, 2),
            survival_months=round_to(survival_months(after), 2),
        ),
    )
