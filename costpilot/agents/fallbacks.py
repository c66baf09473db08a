"""
Planner Fallbacks

What each planner returns when Gemini is unavailable or answers with
something unusable. The figures are fixed Klang Valley reference
values; only the parts derived from the user's own numbers vary.
"""

from typing import Any

from costpilot.engine.rounding import format_number, round_int, round_to
from costpilot.models.planner import (
    CommuteRequest,
    LifestyleRequest,
    RelocationRequest,
    VehicleRequest,
)
from costpilot.models.profile import TravelScenario, TravelScenarios


PUBLIC_TRANSPORT_MONTHLY = 151.55
PUBLIC_TRANSPORT_YEARLY = 1820.00

# EV reference figures (BYD Dolphin, home charging)
EV_KWH_PER_KM = 0.132
HOME_CHARGE_RM_PER_KWH = 0.57
PETROL_CO2_KG_PER_KM = 0.12
PETROL_FIXED_MONTHLY = 350
EV_FIXED_MONTHLY = 220
EV_INSTALLMENT = 1100


def travel_fallback(request: CommuteRequest) -> dict[str, Any]:
    destination = request.destination or "your destination"
    scenarios = TravelScenarios(
        cheapest_option=TravelScenario(
            method="Public Transport (LRT/Bus Combo)",
            estimated_cost_per_trip=3.50,
            weekly_cost=35.00,
            monthly_cost=PUBLIC_TRANSPORT_MONTHLY,
            yearly_cost=PUBLIC_TRANSPORT_YEARLY,
            estimated_time="55 mins",
            reasoning=(
                f"Switching to public transport for {destination} eliminates parking "
                "and petrol costs. While it takes longer, it provides the maximum "
                "possible savings for this route."
            ),
        ),
        balanced_option=TravelScenario(
            method="Carpooling with Colleagues",
            estimated_cost_per_trip=6.00,
            weekly_cost=60.00,
            monthly_cost=259.80,
            yearly_cost=3120.00,
            estimated_time="35 mins",
            reasoning=(
                "Splitting petrol and toll costs with 2 other people reduces your "
                "individual burden significantly while maintaining the comfort of car travel."
            ),
        ),
        fastest_option=TravelScenario(
            method="Motorbike / Scooter",
            estimated_cost_per_trip=2.50,
            weekly_cost=25.00,
            monthly_cost=108.25,
            yearly_cost=1300.00,
            estimated_time="25 mins",
            reasoning=(
                "A motorbike allows you to bypass peak hour traffic gridlock. It is both "
                "cheaper in fuel and significantly faster than a car during rush hour."
            ),
        ),
        estimated_monthly_savings=round_to((request.monthly_cost or 0) - PUBLIC_TRANSPORT_MONTHLY, 2),
        estimated_yearly_savings=round_to((request.yearly_cost or 0) - PUBLIC_TRANSPORT_YEARLY, 2),
    )
    return scenarios.model_dump()


def ev_fallback(request: VehicleRequest) -> dict[str, Any]:
    distance = request.monthly_distance_km or 1500
    petrol = request.current_monthly_petrol_cost or 300
    petrol_total = petrol + PETROL_FIXED_MONTHLY
    charging = round_int(distance * EV_KWH_PER_KM * HOME_CHARGE_RM_PER_KWH)
    running = EV_FIXED_MONTHLY + charging
    savings = petrol_total - running

    return {
        "current_petrol_analysis": {
            "car_model": request.current_car_model or "Proton Saga",
            "monthly_fuel": petrol,
            "monthly_maintenance": request.current_monthly_maintenance or 100,
            "monthly_roadtax": request.current_monthly_roadtax or 50,
            "monthly_insurance": request.current_monthly_insurance or 200,
            "monthly_total": petrol_total,
            "yearly_total": petrol_total * 12,
            "five_year_total": petrol_total * 60,
            "co2_monthly_kg": round_to(distance * PETROL_CO2_KG_PER_KM, 2),
        },
        "ev_options": [
            {
                "model": "BYD Dolphin Standard Range",
                "category": "budget",
                "price_rm": 99800,
                "monthly_installment": EV_INSTALLMENT,
                "battery_kwh": 44.9,
                "range_km": 340,
                "efficiency_kwh_per_100km": 13.2,
                "monthly_charging_cost": charging,
                "monthly_maintenance": 40,
                "monthly_roadtax": 0,
                "monthly_insurance": 180,
                "monthly_total_with_installment": EV_INSTALLMENT + running,
                "monthly_total_running_only": running,
                "yearly_total_running_only": running * 12,
                "five_year_total_running_only": running * 60,
                "monthly_savings_vs_petrol": savings,
                "yearly_savings_vs_petrol": savings * 12,
                "break_even_months": 48,
                "co2_monthly_kg": 0,
                "key_features": [
                    "Most affordable EV in Malaysia",
                    "Good city range",
                    "V2L capability",
                ],
            }
        ],
        "summary": {
            "best_value_pick": "BYD Dolphin Standard Range",
            "highest_savings_pick": "BYD Dolphin Standard Range",
            "recommendation": (
                "The BYD Dolphin offers significant fuel savings and zero road tax, "
                "making it the best value EV for Malaysian buyers."
            ),
            "environmental_impact": (
                "Switching to EV could reduce your carbon footprint by approximately "
                f"{round_int(distance * PETROL_CO2_KG_PER_KM)}kg CO2 per month."
            ),
            "malaysia_incentives": [
                "Road tax exemption until 2027",
                "Full import duty exemption for CBU EVs until 2027",
                "Excise duty exemption until 2027",
                "EV charging infrastructure expansion under NETR",
            ],
        },
    }


def _relocation_option(
    rent: float,
    transport: float,
    location: str,
    rent_range: str,
    avg_rent: float,
    avg_transport: float,
    **details: Any,
) -> dict[str, Any]:
    rent_savings = rent - avg_rent
    transport_savings = transport - avg_transport
    return {
        "location": location,
        "estimated_rent_range": rent_range,
        "estimated_avg_rent": avg_rent,
        "rent_savings_vs_current": rent_savings,
        "estimated_transport_cost": avg_transport,
        "transport_savings_vs_current": transport_savings,
        "estimated_total_monthly_savings": rent_savings + transport_savings,
        "estimated_yearly_savings": (rent_savings + transport_savings) * 12,
        **details,
    }


def relocation_fallback(request: RelocationRequest) -> dict[str, Any]:
    rent = request.current_rent or 1500
    transport = request.monthly_transport_cost or 400

    return {
        "current_analysis": {
            "location": request.current_location or "Current Location",
            "estimated_monthly_rent": rent,
            "estimated_transport_cost": transport,
            "estimated_total_living_cost": rent + transport + 800,
            "area_pros": ["Familiar surroundings", "Established routine"],
            "area_cons": ["Higher rental costs", "Traffic congestion"],
        },
        "relocation_options": [
            _relocation_option(
                rent, transport,
                location="Setia Alam, Shah Alam",
                rent_range="RM800 - RM1,200",
                avg_rent=1000,
                avg_transport=300,
                commute_to_work="35 mins via NKVE/Federal Highway",
                public_transport_access=["KTM Setia Jaya (nearby)", "Bus routes to Shah Alam"],
                financial_benefits=[
                    "Rent 30-40% cheaper than KL city center",
                    "Lower cost of living for groceries and dining",
                    "Free parking in most residential areas",
                    "Growing township with modern amenities",
                ],
                trade_offs=[
                    "Longer commute to KL city center",
                    "Limited MRT/LRT direct access",
                    "Car dependency for most errands",
                ],
                suitability_score=7,
            ),
            _relocation_option(
                rent, transport,
                location="Kelana Jaya, Petaling Jaya",
                rent_range="RM1,000 - RM1,500",
                avg_rent=1200,
                avg_transport=200,
                commute_to_work="20 mins via LRT Kelana Jaya Line",
                public_transport_access=[
                    "LRT Kelana Jaya station",
                    "Multiple bus routes",
                    "Near LDP highway",
                ],
                financial_benefits=[
                    "Excellent LRT connectivity reduces transport costs",
                    "Moderate rent with good facilities",
                    "Walking distance to Paradigm Mall and eateries",
                    "Can potentially go car-free, saving RM500+/mo",
                ],
                trade_offs=[
                    "Rent only slightly cheaper than current",
                    "Can be congested during peak hours",
                    "Parking charges at some condos",
                ],
                suitability_score=8,
            ),
        ],
        "summary": {
            "best_overall_pick": "Kelana Jaya, Petaling Jaya",
            "highest_savings_pick": "Setia Alam, Shah Alam",
            "recommendation": (
                "Kelana Jaya offers the best balance of affordability and connectivity. "
                "The LRT access could significantly reduce your transport costs and commute time."
            ),
            "key_insight": (
                "Relocating strategically could save you RM300-600 per month by combining "
                "cheaper rent with better public transport access."
            ),
        },
    }


def lifestyle_fallback(request: LifestyleRequest) -> dict[str, Any]:
    food = request.food_budget or 800
    subscriptions = request.subscriptions_budget or 100
    food_savings = round_int(food * 0.3)
    subscription_savings = round_int(subscriptions * 0.4)

    suggestions = [
        {
            "title": "Meal Prep Sundays",
            "description": (
                "Cooking at home 5 days a week instead of eating out can save significantly. "
                f"With RM{format_number(food)}/month on food, batch cooking saves up to 40%. "
                "Use HappyFresh or Tesco Online for cheaper bulk groceries."
            ),
            "estimated_monthly_savings": food_savings,
            "difficulty": "medium",
            "category": "food",
            "quick_tip": "Start with 3 home-cooked dinners per week using a rice cooker.",
        },
        {
            "title": "Subscription Audit",
            "description": (
                "Review all recurring subscriptions. Many Malaysians unknowingly pay for "
                "unused services. Check for duplicates and switch to family plans."
            ),
            "estimated_monthly_savings": subscription_savings,
            "difficulty": "easy",
            "category": "subscriptions",
            "quick_tip": "Set a quarterly reminder to review all active subscriptions.",
        },
        {
            "title": "Smart Utility Management",
            "description": (
                "Switch to LED bulbs, use timer switches for water heaters, and set AC to "
                "25 degrees C. TNB MyTNB app helps track electricity usage."
            ),
            "estimated_monthly_savings": 50,
            "difficulty": "easy",
            "category": "utilities",
            "quick_tip": "A 1 degree C increase in AC temperature saves roughly 6% on electricity.",
        },
        {
            "title": "Cashback Stacking",
            "description": (
                "Use Shopee/Lazada coins, credit card cashback, and GrabPay rewards. "
                "Stack with bank promos during 11.11 and PayDay sales."
            ),
            "estimated_monthly_savings": 80,
            "difficulty": "easy",
            "category": "shopping",
            "quick_tip": "Use BigPay card for fee-free payments and 1% cashback.",
        },
        {
            "title": "Free Entertainment",
            "description": (
                "Explore free activities: hiking at FRIM, free museum days, public parks. "
                "Replace paid gym with outdoor jogging or YouTube workouts."
            ),
            "estimated_monthly_savings": 100,
            "difficulty": "easy",
            "category": "entertainment",
            "quick_tip": "Replace weekend mall trips with outdoor activities at KL free parks.",
        },
    ]

    return {
        "suggestions": suggestions,
        "summary": {
            "total_potential_savings": sum(s["estimated_monthly_savings"] for s in suggestions),
            "top_priority": "Meal Prep Sundays",
            "insight": (
                "The biggest lifestyle savings come from food habits. "
                "Even cooking 3 days a week saves hundreds monthly."
            ),
        },
    }
