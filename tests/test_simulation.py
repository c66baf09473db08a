"""Tests for scenario simulation and the housing trade-off."""

import math

from costpilot.engine.simulation import simulate_scenario, survival_months
from costpilot.engine.tradeoffs import compare_housing_options
from costpilot.models import HousingOption, MonthlyInputs


class TestSurvivalMonths:
    """Tests for survival_months."""

    def test_non_negative_balance_is_safe(self, healthy_budget):
        """Test the 999 stand-in when cash flow is non-negative."""
        assert survival_months(healthy_budget) == 999

    def test_negative_balance_burns_savings(self):
        """Test savings divided by the monthly shortfall."""
        inputs = MonthlyInputs(income_monthly=2000, rent_monthly=2400, savings_balance=1200)
        assert survival_months(inputs) == 3


class TestSimulateScenario:
    """Tests for simulate_scenario."""

    def test_no_changes_is_a_no_op(self, healthy_budget):
        """Test that an empty change set reports zero deltas."""
        result = simulate_scenario(healthy_budget, {})

        assert result.base == result.after
        assert result.delta.stress_score == 0
        assert result.delta.monthly_balance == 0
        assert result.delta.survival_months == 999

    def test_rent_increase_on_negative_budget(self):
        """Test survival months of the changed budget."""
        base = MonthlyInputs(
            income_monthly=2000,
            rent_monthly=1500,
            food_monthly=800,
            savings_balance=3000,
        )
        result = simulate_scenario(base, {"rentMonthly": 2000})

        assert result.delta.monthly_balance == -500
        assert result.delta.survival_months == 3.75
        assert result.delta.stress_score >= 0

    def test_accepts_attribute_names(self, healthy_budget):
        """Test that snake_case keys work as well as camelCase."""
        camel = simulate_scenario(healthy_budget, {"rentMonthly": 1000})
        snake = simulate_scenario(healthy_budget, {"rent_monthly": 1000})
        assert camel == snake
        assert camel.delta.monthly_balance == 500

    def test_unknown_keys_are_ignored(self, healthy_budget):
        """Test that unrelated keys do not change the budget."""
        result = simulate_scenario(healthy_budget, {"petsMonthly": 300})
        assert result.delta.monthly_balance == 0

    def test_outputs_are_finite(self):
        """Test that no NaN or infinity leaks into the result."""
        base = MonthlyInputs(income_monthly=0, rent_monthly=1900)
        result = simulate_scenario(base, {"rentMonthly": 2500})

        for value in (
            result.base.stress_score,
            result.after.stress_score,
            result.delta.stress_score,
            result.delta.monthly_balance,
            result.delta.survival_months,
        ):
            assert math.isfinite(value)

    def test_base_budget_is_not_mutated(self, healthy_budget):
        """Test that simulation works on a copy."""
        simulate_scenario(healthy_budget, {"rentMonthly": 10})
        assert healthy_budget.rent_monthly == 1500


class TestHousingTradeoff:
    """Tests for compare_housing_options."""

    def test_cheaper_but_longer_commute(self):
        """Test option B cheaper with a longer commute."""
        result = compare_housing_options(
            HousingOption(rent_monthly=1500, transport_monthly=200, commute_time_mins=20),
            HousingOption(rent_monthly=1200, transport_monthly=350, commute_time_mins=45),
        )

        assert result.cheaper_option == "Option B"
        assert result.monthly_cost_difference == 150
        assert result.commute_time_difference == 25
        assert result.insight == "Option B increases commute by 25 mins daily"

    def test_option_a_cheaper(self):
        """Test option A reported as cheaper and a shorter commute for B."""
        result = compare_housing_options(
            HousingOption(rent_monthly=1000, transport_monthly=100, commute_time_mins=40),
            HousingOption(rent_monthly=1400, transport_monthly=100, commute_time_mins=15),
        )

        assert result.cheaper_option == "Option A"
        assert result.monthly_cost_difference == 400
        assert result.commute_time_difference == -25
        assert result.insight == "Option B reduces commute time"

    def test_equal_costs_report_option_b(self):
        """Test the tie rule."""
        option = HousingOption(rent_monthly=1000, transport_monthly=100, commute_time_mins=30)
        result = compare_housing_options(option, option)

        assert result.cheaper_option == "Option B"
        assert result.monthly_cost_difference == 0

    def test_wire_format(self):
        """Test camelCase in and out."""
        option = HousingOption.model_validate(
            {"rentMonthly": 900, "transportMonthly": 50, "commuteTimeMins": 10}
        )
        result = compare_housing_options(option, option)
        assert "cheaperOption" in result.model_dump(by_alias=True)
