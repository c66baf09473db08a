"""Side-by-side comparison of two housing options."""

from costpilot.engine.rounding import format_number
from costpilot.models.finance import HousingOption, TradeoffResult


def compare_housing_options(option_a: HousingOption, option_b: HousingOption) -> TradeoffResult:
    """
    Compare monthly cost (rent + transport) and daily commute.

    Equal costs report "Option B" as cheaper.
    """
    total_a = option_a.rent_monthly + option_a.transport_monthly
    total_b = option_b.rent_monthly + option_b.transport_monthly
    cost_difference = total_b - total_a

    commute_diff = option_b.commute_time_mins - option_a.commute_time_mins

    if commute_diff > 0:
        insight = f"Option B increases commute by {format_number(commute_diff)} mins daily"
    else:
        insight = "Option B reduces commute time"

    return TradeoffResult(
        cheaper_option="Option A" if cost_difference > 0 else "Option B",
        monthly_cost_difference=abs(cost_difference),
        commute_time_difference=commute_diff,
        insight=insight,
    )
