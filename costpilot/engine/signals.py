"""Threshold flags shown next to the stress score."""

from costpilot.engine.constants import (
    HIGH_DEBT_RATIO,
    LOW_BUFFER_MONTHS,
    OVERSPEND_FOOD,
    OVERSPEND_SUBSCRIPTIONS,
    OVERSPEND_TRANSPORT,
)
from costpilot.engine.rounding import round_to
from costpilot.models.finance import (
    MonthlyInputs,
    Overspending,
    RiskFlags,
    SignalNumbers,
    Signals,
    StressResult,
)


def _share(amount: float, income: float) -> float:
    # With no income every category counts as fully overspent
    return amount / income if income > 0 else 1.0


def compute_signals(inputs: MonthlyInputs, stress: StressResult) -> Signals:
    income = inputs.income_monthly

    return Signals(
        overspending=Overspending(
            food=_share(inputs.food_monthly, income) > OVERSPEND_FOOD,
            transport=_share(inputs.transport_monthly, income) > OVERSPEND_TRANSPORT,
            subscriptions=_share(inputs.subscriptions_monthly, income) > OVERSPEND_SUBSCRIPTIONS,
        ),
        risk_flags=RiskFlags(
            low_buffer=stress.buffer_months < LOW_BUFFER_MONTHS,
            high_debt=stress.debt_ratio > HIGH_DEBT_RATIO,
            expenses_over_income=stress.expense_ratio > 1,
        ),
        numbers=SignalNumbers(
            monthly_balance=round_to(inputs.monthly_balance, 2),
            # /optimize reports savings; the summary does not run the optimizer
            savings_potential=0,
        ),
    )
