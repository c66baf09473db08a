"""Tests for the stress score and signals."""

import pytest

from costpilot.engine.signals import compute_signals
from costpilot.engine.stress import (
    calculate_stress,
    risk_level_from_score,
    score_buffer_months,
    score_debt_ratio,
    score_expense_ratio,
)
from costpilot.models import ExpenseCategory, MonthlyInputs, RiskLevel


class TestStressScore:
    """Tests for calculate_stress."""

    def test_reference_budget(self, healthy_budget):
        """Test the score and ratios of a typical budget."""
        result = calculate_stress(healthy_budget)

        assert result.stress_score == 21.6
        assert result.risk_level == RiskLevel.LOW
        assert result.expense_ratio == 0.62
        assert result.buffer_months == 3.23
        assert result.debt_ratio == 0.06
        assert result.pressure_sources == [ExpenseCategory.RENT, ExpenseCategory.FOOD]

    def test_zero_income_is_high_risk(self):
        """Test that no income saturates every ratio."""
        result = calculate_stress(MonthlyInputs(rent_monthly=1000))

        assert result.risk_level == RiskLevel.HIGH
        assert result.stress_score == 100
        assert result.expense_ratio == 999

    def test_zero_expenses_is_low_risk(self):
        """Test that a budget with no expenses scores zero without dividing by zero."""
        result = calculate_stress(MonthlyInputs(income_monthly=3000))

        assert result.stress_score == 0
        assert result.risk_level == RiskLevel.LOW
        assert result.buffer_months == 12
        assert result.pressure_sources == []

    def test_rent_increase_never_lowers_stress(self, healthy_budget):
        """Test monotonicity in rent."""
        before = calculate_stress(healthy_budget)
        after = calculate_stress(healthy_budget.merged({"rentMonthly": 1800}))
        assert after.stress_score >= before.stress_score

    def test_debt_increase_never_lowers_stress(self, healthy_budget):
        """Test monotonicity in debt."""
        before = calculate_stress(healthy_budget)
        after = calculate_stress(healthy_budget.merged({"debtMonthly": 700}))
        assert after.stress_score >= before.stress_score

    def test_savings_increase_never_raises_stress(self, rent_heavy_budget):
        """Test monotonicity in savings."""
        before = calculate_stress(rent_heavy_budget)
        after = calculate_stress(rent_heavy_budget.merged({"savingsBalance": 7000}))
        assert after.stress_score <= before.stress_score

    def test_extreme_inputs_are_clamped(self):
        """Test that absurd inputs keep the score inside 0..100."""
        result = calculate_stress(MonthlyInputs(
            income_monthly=1,
            rent_monthly=1_000_000,
            utilities_monthly=1_000_000,
            transport_monthly=1_000_000,
            food_monthly=1_000_000,
            debt_monthly=1_000_000,
            subscriptions_monthly=1_000_000,
        ))
        assert 0 <= result.stress_score <= 100

    def test_small_categories_are_not_pressure_sources(self):
        """Test that categories under 5% of expenses are ignored."""
        result = calculate_stress(MonthlyInputs(
            income_monthly=5000,
            rent_monthly=2000,
            subscriptions_monthly=50,
        ))
        assert result.pressure_sources == [ExpenseCategory.RENT]

    def test_ties_keep_category_order(self):
        """Test that equal shares list categories in their fixed order."""
        result = calculate_stress(MonthlyInputs(
            income_monthly=5000,
            food_monthly=500,
            transport_monthly=500,
            rent_monthly=500,
        ))
        assert result.pressure_sources == [ExpenseCategory.RENT, ExpenseCategory.TRANSPORT]


class TestScoreCurves:
    """Tests for the piecewise sub-scores."""

    @pytest.mark.parametrize("ratio,expected", [
        (0, 0),
        (0.5, 10),
        (0.7, 30),
        (0.85, 60),
        (1.0, 85),
        (1.2, 100),
        (5, 100),
    ])
    def test_expense_curve_knots(self, ratio, expected):
        """Test the expense curve at its knots."""
        assert score_expense_ratio(ratio) == pytest.approx(expected)

    def test_debt_curve_saturates(self):
        """Test that the debt curve tops out at 100."""
        assert score_debt_ratio(0.5) == 100
        assert score_debt_ratio(2) == 100

    def test_buffer_curve_is_inverted(self):
        """Test that more buffer months mean less stress."""
        assert score_buffer_months(0) == 100
        assert score_buffer_months(3) == pytest.approx(35)
        assert score_buffer_months(6) == pytest.approx(10)
        assert score_buffer_months(12) == 0

    @pytest.mark.parametrize("score,level", [
        (0, RiskLevel.LOW),
        (33, RiskLevel.LOW),
        (33.1, RiskLevel.MODERATE),
        (66, RiskLevel.MODERATE),
        (66.1, RiskLevel.HIGH),
        (100, RiskLevel.HIGH),
    ])
    def test_risk_bands(self, score, level):
        """Test the band boundaries."""
        assert risk_level_from_score(score) == level


class TestSignals:
    """Tests for compute_signals."""

    def test_overspending_thresholds(self):
        """Test food, transport and subscription shares of income."""
        inputs = MonthlyInputs(
            income_monthly=2000,
            food_monthly=600,
            transport_monthly=400,
            subscriptions_monthly=100,
        )
        signals = compute_signals(inputs, calculate_stress(inputs))

        assert signals.overspending.food is True
        assert signals.overspending.transport is True
        assert signals.overspending.subscriptions is False

    def test_risk_flags_and_numbers(self):
        """Test the flags derived from the stress result."""
        inputs = MonthlyInputs(
            income_monthly=2000,
            food_monthly=600,
            transport_monthly=400,
            subscriptions_monthly=100,
        )
        signals = compute_signals(inputs, calculate_stress(inputs))

        assert signals.risk_flags.low_buffer is True
        assert signals.risk_flags.high_debt is False
        assert signals.risk_flags.expenses_over_income is False
        assert signals.numbers.monthly_balance == 900
        assert signals.numbers.savings_potential == 0

    def test_zero_income_flags_everything(self):
        """Test that with no income every category counts as overspent."""
        inputs = MonthlyInputs(rent_monthly=500)
        signals = compute_signals(inputs, calculate_stress(inputs))

        assert signals.overspending.food is True
        assert signals.overspending.transport is True
        assert signals.overspending.subscriptions is True
        assert signals.risk_flags.expenses_over_income is True

    def test_overspending_serializes_with_category_labels(self):
        """Test the wire keys of the overspending block."""
        inputs = MonthlyInputs(income_monthly=1000)
        signals = compute_signals(inputs, calculate_stress(inputs))

        dumped = signals.model_dump(by_alias=True)
        assert set(dumped["overspending"]) == {"Food", "Transport", "Subscriptions"}
        assert set(dumped["riskFlags"]) == {"lowBuffer", "highDebt", "expensesOverIncome"}
