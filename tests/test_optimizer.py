"""Tests for the recommendation optimizer."""

import pytest

from costpilot.agents import AgentResult, InsightAgent
from costpilot.engine.optimizer import Optimizer, build_recommendations, total_savings
from costpilot.engine.stress import calculate_stress
from costpilot.models import MonthlyInputs, RecommendationType


class FakeExplainer:
    def __init__(self, payload=None, used_fallback=False, error=None):
        self.payload = payload or {}
        self.used_fallback = used_fallback
        self.error = error
        self.calls = []

    async def explain_with_meta(self, kind, facts):
        self.calls.append((kind, facts))
        if self.error:
            raise self.error
        return AgentResult(kind=kind, payload=self.payload, used_fallback=self.used_fallback)


class TestBuildRecommendations:
    """Tests for the deterministic recommendation list."""

    def test_rent_heavy_budget(self, rent_heavy_budget):
        """Test which rules fire and which candidate wins per type."""
        recs = build_recommendations(rent_heavy_budget)

        assert [r.type for r in recs] == [RecommendationType.HOUSING, RecommendationType.LIFESTYLE]

        housing = recs[0]
        assert housing.title == "Move Further Out (Lower Rent, Higher Transport)"
        assert housing.changes == {"rentMonthly": 1200, "transportMonthly": 450}
        assert housing.potential_savings == 650

        food = recs[1]
        assert food.title == "Cook More Often"
        assert food.changes == {"foodMonthly": 400}
        assert food.potential_savings == 100

    def test_every_recommendation_improves_something(self, rent_heavy_budget):
        """Test that only improving simulations survive."""
        for rec in build_recommendations(rent_heavy_budget):
            delta = rec.simulation_result.delta
            assert delta.stress_score < 0 or delta.monthly_balance > 0

    def test_sorted_by_stress_reduction(self, rent_heavy_budget):
        """Test best-first ordering."""
        recs = build_recommendations(rent_heavy_budget)
        deltas = [r.simulation_result.delta.stress_score for r in recs]
        assert deltas == sorted(deltas)

    def test_at_most_one_per_type(self):
        """Test deduplication across families."""
        inputs = MonthlyInputs(
            income_monthly=3000,
            rent_monthly=1500,
            transport_monthly=500,
            food_monthly=900,
            subscriptions_monthly=120,
            debt_monthly=600,
        )
        types = [r.type for r in build_recommendations(inputs)]
        assert len(types) == len(set(types))
        assert set(types) == set(RecommendationType)

    def test_nothing_to_recommend(self):
        """Test a budget with no triggers."""
        assert build_recommendations(MonthlyInputs(income_monthly=3000)) == []

    def test_zero_income_does_not_crash(self):
        """Test the rent share guard when income is zero."""
        recs = build_recommendations(MonthlyInputs(rent_monthly=1000, food_monthly=900))
        assert all(r.potential_savings > 0 for r in recs)

    def test_zero_income_rent_triggers_housing(self):
        """Test that any rent counts as a high share when there is no income."""
        recs = build_recommendations(MonthlyInputs(rent_monthly=100, food_monthly=5000))

        assert {r.type for r in recs} == {RecommendationType.HOUSING, RecommendationType.LIFESTYLE}
        housing = next(r for r in recs if r.type == RecommendationType.HOUSING)
        assert housing.changes == {"rentMonthly": 75}
        assert housing.potential_savings == 25

    def test_rounding_is_half_up(self):
        """Test that proposed values round .5 upwards."""
        inputs = MonthlyInputs(income_monthly=10000, subscriptions_monthly=101)
        recs = build_recommendations(inputs)
        assert recs[0].changes == {"subscriptionsMonthly": 51}

    def test_total_savings(self, rent_heavy_budget):
        """Test the savings sum."""
        assert total_savings(build_recommendations(rent_heavy_budget)) == 750


class TestOptimizer:
    """Tests for Optimizer personalization."""

    @pytest.mark.asyncio
    async def test_without_explainer(self, rent_heavy_budget):
        """Test the deterministic result."""
        result = await Optimizer().optimize(rent_heavy_budget)

        assert result.base == calculate_stress(rent_heavy_budget)
        assert result.total_savings == 750
        assert "(AI Personalized)" not in result.recommendations[0].reason

    @pytest.mark.asyncio
    async def test_personalizes_top_recommendation_only(self, rent_heavy_budget):
        """Test that the model's reason replaces the first reason."""
        explainer = FakeExplainer(payload={"reason": "  Share a flat near an LRT line.  "})
        result = await Optimizer(explainer).optimize(rent_heavy_budget)

        assert result.recommendations[0].reason == "Share a flat near an LRT line. (AI Personalized)"
        assert "(AI Personalized)" not in result.recommendations[1].reason
        kind, facts = explainer.calls[0]
        assert kind == "optimize"
        assert facts["title"] == result.recommendations[0].title

    @pytest.mark.asyncio
    async def test_uses_context_from_model_answer(self, rent_heavy_budget):
        """Test the context key when the model answered."""
        explainer = FakeExplainer(payload={"context": "Try Setia Alam."})
        result = await Optimizer(explainer).optimize(rent_heavy_budget)
        assert result.recommendations[0].reason == "Try Setia Alam. (AI Personalized)"

    @pytest.mark.asyncio
    async def test_ignores_fallback_context(self, rent_heavy_budget):
        """Test that a fallback's generic context is not presented as personalized."""
        explainer = FakeExplainer(payload={"context": "Generic text"}, used_fallback=True)
        result = await Optimizer(explainer).optimize(rent_heavy_budget)
        assert "(AI Personalized)" not in result.recommendations[0].reason

    @pytest.mark.asyncio
    async def test_explainer_failure_keeps_reason(self, rent_heavy_budget):
        """Test that personalization is best-effort."""
        explainer = FakeExplainer(error=RuntimeError("boom"))
        result = await Optimizer(explainer).optimize(rent_heavy_budget)
        assert result.recommendations[0].reason.startswith("Moving to a cheaper area")

    @pytest.mark.asyncio
    async def test_with_keyless_insight_agent(self, rent_heavy_budget, no_key_settings):
        """Test the real agent without a key leaves reasons untouched."""
        result = await Optimizer(InsightAgent(no_key_settings)).optimize(rent_heavy_budget)
        assert "(AI Personalized)" not in result.recommendations[0].reason
