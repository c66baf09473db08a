"""
Wealth+ Savings Projection

Turns a goal (target, timeline, risk) and a strategy document into a
monthly plan. The strategy may come from the model or from
default_strategy(); the arithmetic here is the same either way.

All rates in strategy documents are annual percentages (3.5 = 3.5%).
engine_return and the *_rate arguments below are annual fractions.
"""

import math
from typing import Optional

from costpilot.engine.constants import FEASIBLE_MONTHLY_LIMIT
from costpilot.engine.rounding import round_int, round_to
from costpilot.errors import InputValidationError
from costpilot.models.wealth import (
    Allocation,
    Instrument,
    InstrumentGroup,
    ReturnAssumptions,
    RiskAppetite,
    SavingsPlan,
    StrategyAnalysis,
    WealthRequest,
    WealthStrategy,
)


RISK_RATES = {
    RiskAppetite.CONSERVATIVE: 0.04,
    RiskAppetite.MODERATE: 0.08,
    RiskAppetite.AGGRESSIVE: 0.12,
}

BASE_ALLOCATIONS = {
    RiskAppetite.CONSERVATIVE: (70, 20, 10, 0),
    RiskAppetite.MODERATE: (40, 30, 20, 10),
    RiskAppetite.AGGRESSIVE: (15, 15, 40, 30),
}

DEFAULT_SAVINGS_PERCENT = 40
FALLBACK_INVESTMENT_RATE = 6.0

DISCLAIMER = (
    "This allocation is a simulation for educational purposes and does not constitute "
    "financial advice. Examples of instruments commonly used for this strategy are "
    "illustrative only. Never guarantee returns."
)

DEFAULT_SAVINGS_OPTIONS = [
    Instrument(name="GXBank Savings (Digital Bank)", estimated_rate=3.0),
    Instrument(name="AEON Bank (Digital Bank)", estimated_rate=3.0),
    Instrument(name="KDI Save (Money Market)", estimated_rate=3.5),
    Instrument(name="Touch 'n Go eWallet (GO+)", estimated_rate=3.4),
    Instrument(name="Boost Bank (Digital Bank)", estimated_rate=2.5),
]

DEFAULT_INVESTMENT_OPTIONS = [
    Instrument(
        name="MAYBANK (Finance)", estimated_rate=6.5, price_per_unit=10.50,
        cost_per_lot=1058.00, roe=14.5, dividend_yield=5.2,
        url="https://www.bursamalaysia.com/market_information/equities_prices?code=1155",
    ),
    Instrument(
        name="TENAGA (Utilities)", estimated_rate=5.0, price_per_unit=14.20,
        cost_per_lot=1429.00, roe=10.2, dividend_yield=3.5,
        url="https://www.bursamalaysia.com/market_information/equities_prices?code=5347",
    ),
    Instrument(
        name="AXIATA (Telecom)", estimated_rate=4.5, price_per_unit=2.85,
        cost_per_lot=295.00, roe=6.5, dividend_yield=4.2,
        url="https://www.bursamalaysia.com/market_information/equities_prices?code=6888",
    ),
    Instrument(
        name="Telekom Malaysia", estimated_rate=4.0, price_per_unit=6.80,
        cost_per_lot=688.00, roe=12.0, dividend_yield=3.8,
    ),
    Instrument(
        name="Public Bank", estimated_rate=5.5, price_per_unit=4.50,
        cost_per_lot=458.00, roe=13.5, dividend_yield=4.5,
    ),
]

DEFAULT_RETURN_ASSUMPTIONS = ReturnAssumptions(
    savings_range=(2, 4),
    dividend_range=(5, 8),
    etf_range=(7, 12),
    growth_range=(10, 15),
)


def linear_monthly(target: float, months: int) -> int:
    """Monthly amount with no growth at all."""
    if months <= 0:
        return 0
    return math.ceil(target / months)


def _growth_factor(rate: float, months: int) -> float:
    return (1 + rate) ** months - 1


def required_monthly_contribution(target: float, months: int, annual_rate: float) -> int:
    """Smallest whole monthly contribution that compounds to `target`."""
    if months <= 0:
        return 0
    r = annual_rate / 12
    if r <= 0:
        return linear_monthly(target, months)
    return math.ceil(target * (r / _growth_factor(r, months)))


def future_value(monthly: float, months: int, annual_rate: float) -> int:
    """Value after `months` of contributing `monthly` at `annual_rate`."""
    r = annual_rate / 12
    if r <= 0 or months <= 0:
        return round_int(monthly * max(months, 0))
    return round_int(monthly * (_growth_factor(r, months) / r))


def default_allocation(risk: RiskAppetite, is_short: bool) -> Allocation:
    """
    Allocation by risk appetite.

    Short goals (except conservative ones) move 30 points into savings,
    taken equally from ETF and growth. The result is normalized to 100
    with savings absorbing the rounding.
    """
    savings, dividend, etf, growth = BASE_ALLOCATIONS[risk]

    if is_short and risk != RiskAppetite.CONSERVATIVE:
        savings += 30
        etf = max(0, etf - 15)
        growth = max(0, growth - 15)

    total = savings + dividend + etf + growth
    dividend = round_int(dividend / total * 100)
    etf = round_int(etf / total * 100)
    growth = round_int(growth / total * 100)

    return Allocation(
        savings_percent=100 - (dividend + etf + growth),
        dividend_percent=dividend,
        etf_percent=etf,
        growth_percent=growth,
    )


def default_strategy(
    target: float,
    months: int,
    risk: RiskAppetite,
    is_short: bool,
) -> WealthStrategy:
    """The strategy shown when the model is unavailable."""
    feasible = months > 0 and target / months < FEASIBLE_MONTHLY_LIMIT

    if risk == RiskAppetite.AGGRESSIVE:
        risk_explanation = (
            "A focus on shares means higher potential returns, "
            "but comes with natural market ups and downs."
        )
    else:
        risk_explanation = (
            "Focusing heavily on guaranteed savings options helps "
            "minimize the chance of losing money."
        )

    if is_short:
        liquidity = (
            "We prioritized cash-friendly digital banks to make sure you can "
            "safely withdraw your money when you need it soon."
        )
    else:
        liquidity = (
            "We allocated some funds into shares that over the long term have "
            "strong potential to grow and pay dividends."
        )

    return WealthStrategy(
        allocation=default_allocation(risk, is_short),
        identified_instruments=[
            InstrumentGroup(category="Savings / Cash", examples=list(DEFAULT_SAVINGS_OPTIONS)),
            InstrumentGroup(category="Investments", examples=list(DEFAULT_INVESTMENT_OPTIONS)),
        ],
        return_assumptions=DEFAULT_RETURN_ASSUMPTIONS,
        analysis=StrategyAnalysis(
            strategy_summary=(
                f"To reach your overall goal in {months} months, this strategy places some "
                "money into flexible savings and the rest into steady growth options based "
                f"on your {risk.value} risk profile."
            ),
            risk_explanation=risk_explanation,
            liquidity_commentary=liquidity,
            goal_feasibility=(
                "Target is highly realistic based on standard income ratios."
                if feasible
                else "Target is ambitious. May require high monthly contributions."
            ),
            adjustment_suggestion=(
                "Consider extending timeline if the monthly required contribution is too stressful."
            ),
        ),
        disclaimer=DISCLAIMER,
    )


def _lot_cost(instruments: list[Instrument], index: int) -> float:
    if index < 0 or index >= len(instruments):
        raise InputValidationError(f"Unknown investment option {index}", field="basket")
    return instruments[index].cost_per_lot or 0.0


def basket_cost(basket: dict[int, int], instruments: list[Instrument]) -> float:
    """Monthly cost of buying `lots` of each chosen instrument."""
    return sum(_lot_cost(instruments, idx) * lots for idx, lots in basket.items())


def basket_fits(budget: float, basket: dict[int, int], instruments: list[Instrument]) -> bool:
    return basket_cost(basket, instruments) <= budget


def _savings_rate(strategy: WealthStrategy, choice: Optional[int]) -> float:
    options = strategy.savings_options
    if choice is not None and 0 <= choice < len(options) and options[choice].estimated_rate:
        return options[choice].estimated_rate
    low, high = strategy.return_assumptions.savings_range
    return (low + high) / 2


def _investment_rate(strategy: WealthStrategy, basket: dict[int, int], invested: float) -> float:
    """Lot-cost-weighted rate of the basket, or the average of the growth ranges."""
    if basket:
        options = strategy.investment_options
        total = 0.0
        for idx, lots in basket.items():
            option = options[idx]
            weight = (option.cost_per_lot or 0) * lots / invested if invested > 0 else 0
            total += (option.estimated_rate or FALLBACK_INVESTMENT_RATE) * weight
        return total

    ra = strategy.return_assumptions
    bounds = [*ra.dividend_range, *ra.etf_range, *ra.growth_range]
    return sum(bounds) / len(bounds)


def build_savings_plan(
    goal: WealthRequest,
    strategy: Optional[WealthStrategy] = None,
    savings_choice: Optional[int] = 0,
    basket: Optional[dict[int, int]] = None,
    savings_percent: Optional[int] = None,
) -> SavingsPlan:
    """
    Compute the monthly plan for a goal.

    The investment budget is the investment share of the linear
    monthly amount; the basket must fit inside it.

    Raises:
        InputValidationError: the basket references an unknown option
            or costs more than the investment budget.
    """
    basket = {idx: lots for idx, lots in (basket or {}).items() if lots > 0}
    months = goal.months
    target = goal.target_amount
    linear = linear_monthly(target, months)

    if savings_percent is None:
        savings_percent = strategy.allocation.savings_percent if strategy else DEFAULT_SAVINGS_PERCENT
    investment_percent = 100 - savings_percent
    investment_budget = round_int(linear * investment_percent / 100)

    instruments = strategy.investment_options if strategy else []
    invested = basket_cost(basket, instruments)
    if not basket_fits(investment_budget, basket, instruments):
        raise InputValidationError(
            f"Investment basket (RM{invested:,.2f}) exceeds the monthly investment budget "
            f"(RM{investment_budget:,})",
            field="basket",
        )

    if strategy is not None:
        save_rate = _savings_rate(strategy, savings_choice)
        inv_rate = _investment_rate(strategy, basket, invested)
        engine_return = (savings_percent / 100 * save_rate + investment_percent / 100 * inv_rate) / 100
    else:
        engine_return = RISK_RATES[goal.risk]

    if engine_return > 0 and months > 0:
        optimized = required_monthly_contribution(target, months, engine_return)
        projected = future_value(linear, months, engine_return)
    else:
        optimized = linear
        projected = round_int(target)

    savings_amount = round_int(optimized * savings_percent / 100)

    return SavingsPlan(
        months=months,
        linear_monthly=linear,
        optimized_monthly=optimized,
        engine_return=engine_return,
        projected_value=projected,
        savings_percent=savings_percent,
        investment_percent=investment_percent,
        savings_amount=savings_amount,
        investment_amount=round_int(optimized - savings_amount),
        investment_budget=investment_budget,
        basket_cost=round_to(invested, 2),
        remaining_budget=round_to(investment_budget - invested, 2),
        is_feasible=target / months < FEASIBLE_MONTHLY_LIMIT,
    )
