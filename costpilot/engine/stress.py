"""
Stress Score

A 0-100 cost-of-living stress score built from three ratios:
expenses/income, debt/income and savings buffer in months. Each ratio
is mapped to a 0-100 sub-score by a piecewise-linear curve, then the
sub-scores are blended with fixed weights.

Higher is worse. The curves are monotonic so that any reduction in
an expense can only lower (or keep) the score.
"""

from costpilot.engine.constants import (
    NO_EXPENSE_BUFFER_MONTHS,
    NO_INCOME_RATIO,
    PRESSURE_SHARE_MIN,
    PRESSURE_SOURCE_LIMIT,
    RISK_BANDS,
    WEIGHTS,
)
from costpilot.engine.rounding import round_to
from costpilot.models.finance import (
    ExpenseCategory,
    MonthlyInputs,
    RiskLevel,
    StressResult,
)


def clamp(n: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, n))


def lerp(value: float, x1: float, x2: float, y1: float, y2: float) -> float:
    """Map value from [x1, x2] onto [y1, y2], saturating at both ends."""
    if value <= x1:
        return y1
    if value >= x2:
        return y2
    return y1 + ((value - x1) / (x2 - x1)) * (y2 - y1)


def score_expense_ratio(r: float) -> float:
    # 0.5 -> 10, 0.7 -> 30, 0.85 -> 60, 1.0 -> 85, 1.2 -> 100
    if r <= 0.5:
        return lerp(r, 0, 0.5, 0, 10)
    if r <= 0.7:
        return lerp(r, 0.5, 0.7, 10, 30)
    if r <= 0.85:
        return lerp(r, 0.7, 0.85, 30, 60)
    if r <= 1.0:
        return lerp(r, 0.85, 1.0, 60, 85)
    return lerp(r, 1.0, 1.2, 85, 100)


def score_debt_ratio(r: float) -> float:
    if r <= 0.1:
        return lerp(r, 0, 0.1, 0, 10)
    if r <= 0.2:
        return lerp(r, 0.1, 0.2, 10, 35)
    if r <= 0.35:
        return lerp(r, 0.2, 0.35, 35, 70)
    return lerp(r, 0.35, 0.5, 70, 100)


def score_buffer_months(m: float) -> float:
    # Inverted: more months of savings means less stress
    if m >= 6:
        return lerp(m, 6, 12, 10, 0)
    if m >= 3:
        return lerp(m, 3, 6, 35, 10)
    if m >= 1:
        return lerp(m, 1, 3, 70, 35)
    return lerp(m, 0, 1, 100, 70)


def risk_level_from_score(score: float) -> RiskLevel:
    for band_max, level in RISK_BANDS:
        if score <= band_max:
            return level
    return RiskLevel.HIGH


def top_pressure_sources(inputs: MonthlyInputs, total_expenses: float) -> list[ExpenseCategory]:
    """The (at most two) categories taking the largest share of expenses."""
    if total_expenses <= 0:
        return []

    shares = [
        (category, amount / total_expenses)
        for category, amount in inputs.expense_breakdown()
    ]
    shares = [item for item in shares if item[1] >= PRESSURE_SHARE_MIN]
    # sorted() is stable, so ties keep category order
    shares = sorted(shares, key=lambda item: item[1], reverse=True)
    return [category for category, _ in shares[:PRESSURE_SOURCE_LIMIT]]


def calculate_stress(inputs: MonthlyInputs) -> StressResult:
    income = inputs.income_monthly
    total_expenses = inputs.total_expenses

    expense_ratio = total_expenses / income if income > 0 else NO_INCOME_RATIO
    debt_ratio = inputs.debt_monthly / income if income > 0 else NO_INCOME_RATIO
    buffer_months = (
        inputs.savings_balance / total_expenses
        if total_expenses > 0
        else NO_EXPENSE_BUFFER_MONTHS
    )

    raw = (
        WEIGHTS["expense"] * score_expense_ratio(expense_ratio)
        + WEIGHTS["buffer"] * score_buffer_months(buffer_months)
        + WEIGHTS["debt"] * score_debt_ratio(debt_ratio)
    )

    stress_score = round_to(clamp(raw, 0, 100), 1)

    return StressResult(
        stress_score=stress_score,
        risk_level=risk_level_from_score(stress_score),
        expense_ratio=round_to(expense_ratio, 3),
        buffer_months=round_to(buffer_months, 2),
        debt_ratio=round_to(debt_ratio, 3),
        pressure_sources=top_pressure_sources(inputs, total_expenses),
    )
