"""
AI Agents for CostPilot

DESIGN DECISION: Gemini only ever words things. Every number it sees is
computed by the deterministic engine first, and every agent has a
deterministic fallback, so the product works with no API key at all.

CRITICAL BOUNDARIES:

1. INSIGHT AGENT:
   - CAN: Turn a fact bundle into a dashboard, recommendation or subsidy card
   - CANNOT: Invent numbers or recommend investment products
   - MUST: Fall back when the answer is missing a required key

2. WEALTH AGENT:
   - CAN: Propose an allocation and example instruments from the reference matrix
   - CANNOT: Compute the savings plan (the engine does that)
   - MUST: Fall back to the default strategy on any malformed answer

3. OPTIMIZATION AGENT (travel, EV, relocation, lifestyle planners):
   - CAN: Suggest Malaysian alternatives with estimated costs
   - MUST: Return the fixed reference plan when the model is unavailable

The LLM is a NARRATOR, not a CALCULATOR.
"""

import json
from datetime import date
from typing import Any, Callable, Optional

import google.generativeai as genai
import structlog
from google.api_core import exceptions as google_exceptions
from pydantic import BaseModel, ValidationError

from costpilot.agents.fallbacks import (
    ev_fallback,
    lifestyle_fallback,
    relocation_fallback,
    travel_fallback,
)
from costpilot.config import get_settings
from costpilot.config.settings import GeminiSettings
from costpilot.engine.insights import fallback_explain
from costpilot.engine.wealth import default_strategy
from costpilot.errors import AIServiceError
from costpilot.models.planner import (
    CommuteRequest,
    LifestyleRequest,
    RelocationRequest,
    VehicleRequest,
)
from costpilot.models.profile import TravelScenarios
from costpilot.models.wealth import WealthRequest, WealthStrategy


logger = structlog.get_logger(__name__)


class AgentResult(BaseModel):
    """A model answer, or the fallback that replaced it."""

    kind: str
    payload: dict[str, Any]
    used_fallback: bool = False
    fallback_reason: Optional[str] = None


def _dumps(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


def _or(value: Any, default: Any = "Not specified") -> Any:
    return value if value not in (None, "") else default


def extract_json(text: str) -> Optional[dict]:
    """The JSON object between the first '{' and the last '}', if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        data = json.loads(text[start:end + 1])
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def strip_fences(text: str) -> str:
    """Remove markdown code fences the model adds despite being told not to."""
    return text.replace("```json", "").replace("```", "").strip()


class GeminiAgent:
    """
    Shared Gemini plumbing.

    The SDK is only configured when a key is present; without one every
    call raises AIServiceError and subclasses take their fallback path.
    """

    def __init__(self, settings: Optional[GeminiSettings] = None):
        self._settings = settings or get_settings().gemini
        if self._settings.is_configured:
            genai.configure(api_key=self._settings.api_key)

    @property
    def is_enabled(self) -> bool:
        return self._settings.is_configured

    def _model(
        self,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False,
    ) -> genai.GenerativeModel:
        generation_config: dict[str, Any] = {
            "temperature": self._settings.temperature if temperature is None else temperature,
            "max_output_tokens": self._settings.max_tokens,
        }
        if json_mode:
            generation_config["response_mime_type"] = "application/json"
        return genai.GenerativeModel(
            model_name=model_name or self._settings.model_name,
            generation_config=generation_config,
        )

    async def _generate(self, prompt: str, **model_options: Any) -> str:
        if not self.is_enabled:
            raise AIServiceError("GEMINI_API_KEY is not configured")
        response = await self._model(**model_options).generate_content_async(prompt)
        return response.text.strip()

    async def _generate_document(
        self,
        kind: str,
        prompt: str,
        fallback: Callable[[], dict[str, Any]],
        required: tuple[str, ...] = (),
        validator: Optional[type[BaseModel]] = None,
        **model_options: Any,
    ) -> AgentResult:
        """Run a planner prompt, returning the fallback on any failure."""
        if not self.is_enabled:
            return AgentResult(
                kind=kind,
                payload=fallback(),
                used_fallback=True,
                fallback_reason="api_key_missing",
            )

        try:
            text = await self._generate(prompt, **model_options)
        except google_exceptions.ResourceExhausted:
            logger.warning("gemini_rate_limited", kind=kind)
            return AgentResult(kind=kind, payload=fallback(), used_fallback=True, fallback_reason="rate_limited")
        except Exception as e:
            logger.error("gemini_call_failed", kind=kind, error=str(e))
            return AgentResult(kind=kind, payload=fallback(), used_fallback=True, fallback_reason="api_error")

        payload = extract_json(strip_fences(text))
        if payload is None or any(key not in payload for key in required):
            logger.warning("gemini_invalid_response", kind=kind)
            return AgentResult(kind=kind, payload=fallback(), used_fallback=True, fallback_reason="invalid_response")

        if validator is not None:
            try:
                payload = validator.model_validate(payload).model_dump()
            except ValidationError as e:
                logger.warning("gemini_invalid_response", kind=kind, error=str(e))
                return AgentResult(kind=kind, payload=fallback(), used_fallback=True, fallback_reason="invalid_response")

        return AgentResult(kind=kind, payload=payload)


# =============================================================================
# Insight prompts
# =============================================================================

SYSTEM_PREAMBLE = """You are a financial assistant for Malaysia cost-of-living planning.
Your goal is to provide actionable, personalized, and location-aware insights.
Do NOT invent numbers. Use only the provided facts.
Do NOT provide financial advice (investment products).
Use "RM" for currency."""

REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    "dashboard": ("headline", "top_drivers", "next_moves", "warnings"),
    "recommendation": ("context", "outcome_headline", "outcome_bullets", "tradeoff"),
    "subsidy": ("eligible", "not_eligible", "missing_fields"),
}


def dashboard_prompt(facts: dict) -> str:
    return f"""Type: Dashboard Insight
Context: User overview.
Facts: {_dumps(facts)}

Output JSON:
{{
  "headline": "Short, punchy summary of financial health (e.g., 'Stable but Low Buffer').",
  "top_drivers": [{{ "name": "Category", "value": "Amount or %", "why": "Brief reason" }}],
  "next_moves": [{{ "title": "Action", "impact_rm": 0, "difficulty": "Easy/Med/Hard", "steps": ["Step 1", "Step 2"] }}],
  "warnings": ["Specific risk 1", "Specific risk 2"]
}}"""


def recommendation_prompt(facts: dict) -> str:
    delta = facts.get("delta") or {}
    balance = delta.get("monthlyBalance", "...") if isinstance(delta, dict) else "..."
    return f"""Type: Recommendation Specific
Context: Deep dive into a specific optimization for a user with these profile details: {_dumps(facts.get("profile") or {})} and location context: {_dumps(facts.get("location") or {})}.
The optimization is: {facts.get("title")}
The reason is: {facts.get("reason")}
Financial Impact: {_dumps(delta)}

Output JSON with specific structure for a rich UI card:
{{
  "context": "A **very brief** (max 2 sentences) personalized explanation. sentence 1: State the benefit clearly. sentence 2: Provide **specific, named Malaysian examples** (e.g. 'Use *NSK Trade City* or *Pasar Borong*'). Use *single asterisks* for bolding key terms (e.g. *RM 450*, *Karak*). Do NOT use double asterisks (**).",
  "highlight_box": {{
    "title": "KEY INSIGHT",
    "tags": ["Rent Optimization", "Savings Potential"],
    "description": "A punchy, actionable 1-sentence insight. e.g. 'By moving to [Specific Area], you save...'"
  }},
  "outcome_headline": "Estimated *RM {balance}* increase in monthly cash flow",
  "outcome_bullets": ["Increased monthly cash buffer by RM {balance}", "Reduced financial stress score", "Enhanced financial resilience"],
  "tradeoff": "The downside, like 'Tradeoff: Increased travel time by 20 mins.'"
}}
IMPORTANT:
- **EXTREME BREVITY.** Max 2 sentences total in 'context'.
- **SPECIFIC EXAMPLES.** Name actual places/brands.
- **FORMATTING:** Use *single asterisks* for bolding (e.g. *Word*). Do NOT use double (**)."""


def subsidy_prompt(facts: dict) -> str:
    return f"""Type: Subsidy Analysis
Context: Explain eligibility for government aid.
Facts: {_dumps(facts)}

Output JSON:
{{
  "eligible": [{{ "name": "Program Name", "benefit": "RM Value", "why_eligible": "matches income X and profile Y" }}],
  "not_eligible": [{{ "name": "Program Name", "reason": "income too high", "fix": "check household members?" }}],
  "missing_fields": ["details needed to check other programs"]
}}"""


PROMPTS: dict[str, Callable[[dict], str]] = {
    "dashboard": dashboard_prompt,
    "recommendation": recommendation_prompt,
    "subsidy": subsidy_prompt,
}


class InsightAgent(GeminiAgent):
    """
    Explains engine output in plain language.

    'optimize' is an alias of 'recommendation'. Kinds without a prompt
    (scenario, stress) always use the deterministic explanation.
    """

    def _fallback(self, kind: str, facts: dict, reason: str) -> AgentResult:
        return AgentResult(
            kind=kind,
            payload=fallback_explain(kind, facts),
            used_fallback=True,
            fallback_reason=reason,
        )

    async def explain_with_meta(self, kind: str, facts: dict[str, Any]) -> AgentResult:
        if not self.is_enabled:
            return self._fallback(kind, facts, "api_key_missing")

        prompt_key = "recommendation" if kind == "optimize" else kind
        build_prompt = PROMPTS.get(prompt_key)
        if build_prompt is None:
            logger.info("insight_kind_without_prompt", kind=kind)
            return self._fallback(kind, facts, "unknown_kind")

        prompt = f"{SYSTEM_PREAMBLE}\n\n{build_prompt(facts)}\n\nReturn ONLY valid JSON."

        try:
            text = await self._generate(prompt)
        except google_exceptions.ResourceExhausted:
            logger.warning("gemini_rate_limited", kind=kind)
            return self._fallback(kind, facts, "rate_limited")
        except Exception as e:
            logger.error("gemini_call_failed", kind=kind, error=str(e))
            return self._fallback(kind, facts, "api_error")

        payload = extract_json(text)
        if payload is None or any(key not in payload for key in REQUIRED_KEYS[prompt_key]):
            logger.warning("gemini_invalid_response", kind=kind)
            return self._fallback(kind, facts, "invalid_response")

        return AgentResult(kind=kind, payload=payload)

    async def explain(self, kind: str, facts: dict[str, Any]) -> dict[str, Any]:
        return (await self.explain_with_meta(kind, facts)).payload


# =============================================================================
# Wealth+
# =============================================================================

WEALTH_MATRIX = """🟢 SHORT-TERM - LOW RISK
Objective: Capital preservation + high liquidity
Typical Allocation: 70–85% savings, 15–30% safe investments (Fixed-Price ASNB)
Savings Options: GXBank, TNG GO+, AEON Bank, Boost Bank, Rize
Investment Options: ASNB (ASM, ASB, ASB2, ASM3), Malayan Banking Berhad, Public Bank Berhad, Tenaga Nasional Berhad

🟡 SHORT-TERM - MEDIUM RISK
Objective: Moderate growth with liquidity buffer
Typical Allocation: 40–60% savings, 40–60% balanced assets
Savings Options: GXBank, TNG GO+, KDI Save, FSMOne Money Market
Investment Options: ASNB (ASM/ASB), ASNB (ASN Sara 1/2 - Variable), MyETF FTSE Bursa Malaysia KLCI, Sunway REIT

🔴 SHORT-TERM - HIGH RISK
Objective: Maximize short-term upside (high volatility)
Typical Allocation: 20–40% savings, 60–80% equities/ETF
Savings Options: GXBank, FSMOne Money Market, KDI Save
Investment Options: ASNB (ASN Equity 2/3/5 - Variable), Inari Amertron, Greatech Technology, Gamuda Berhad, MyETF KLCI

🟢 LONG-TERM - LOW RISK
Objective: Steady growth, low volatility
Typical Allocation: 50–70% conservative income assets, 30–50% stable growth
Savings Options: EPF voluntary contribution, Principal Bond Fund, Public Mutual Bond, Kenanga Conservative
Investment Options: ASNB (ASM/ASB/ASM2/ASM3), ASNB (ASN Sukuk), Public Bank Berhad, IHH Healthcare

🟡 LONG-TERM - MEDIUM RISK
Objective: Balanced growth + income
Typical Allocation: 40–60% growth, 40–60% stable assets
Savings Options: EPF, Principal Balanced, FSMOne, Kenanga Balanced
Investment Options: ASNB (ASN Sara Global), ASNB (ASN Equity Malaysia), Press Metal, StashAway (Balanced)

🔴 LONG-TERM - HIGH RISK
Objective: Maximum capital appreciation
Typical Allocation: 10–30% liquidity buffer, 70–90% equities/global ETFs
Savings Options: EPF minimum, Money Market Fund, GXBank
Investment Options: ASNB (ASN Equity Global), Inari Amertron, Gamuda Berhad, StashAway (Aggressive), S&P 500 ETFs"""


def wealth_prompt(request: WealthRequest, today: date) -> str:
    timeline = "SHORT-TERM" if request.is_short else "LONG-TERM"
    return f"""You are the Wealth+ Engine, an AI-powered allocation system.
The user wants to accumulate RM{request.target_amount:g} in {request.months} months.
Timeline category: {timeline}
Their risk appetite is: {request.risk.value.upper()}

You must return a STRICT JSON object representing the strategy.
DO NOT use markdown formatting (```json). Return raw JSON only.

Use the following Reference Matrix to determine the best strategy based on Timeline and Risk:

{WEALTH_MATRIX}

Based on the parameters, you MUST:
1. Detect timeline
2. Detect risk appetite
3. Pull corresponding category from the matrix above
4. Allocate weights dynamically according to the "Typical Allocation" bounds. Ensure they total exactly 100.
5. For 'Savings Options', list 5 REAL, active Savings Options or Digital Banks in Malaysia that fit the category. Avoid Fixed Deposits; focus on high-interest liquid digital savings accounts or money market funds. Provide a realistic Estimated Annual Interest Rate and the official website "url".
6. For 'Investment Options' (Malaysian Shares/Stocks) provide 7-10 balanced options, each with:
    - "price_per_unit": Current share price in RM.
    - "cost_per_lot": Total RM for 100 units including fees.
      * ASNB Fixed Price (ASM/ASB): RM 1.00/unit, zero fees, total RM 100.00.
      * ASNB Variable Price: NAV x 100 plus a 3.5% to 5% sales charge and 8% SST on the sales charge.
      * Stocks: market price x 100 plus brokerage (min RM8 or 0.1%), stamp duty (RM1.50 per RM1000), clearing fee (0.03%) and 8% SST on brokerage.
    - Include both big caps and mid/small caps; at least 4 options must have a price_per_unit UNDER RM 3.00.
    - "roe": Return on Equity (%).
    - "dividend_yield": Annual Dividend Yield (%).
    - "url": Official deep link (Bursa company profile by stock code, or the specific ASNB fund page).
7. In 'analysis.strategy_summary' give a concrete monthly action, e.g. "To reach your RM5000 goal, save RM600 monthly in [Savings Option] and purchase 1 lot of [Stock] (est. cost RM400) every month." Lots must be whole numbers.

Required JSON Structure:
{{
  "allocation": {{"savings_percent": number, "dividend_percent": number, "etf_percent": number, "growth_percent": number}},
  "identified_instruments": [
    {{"category": "Savings / Conservative", "examples": [{{"name": "Option Name", "estimated_rate": 3.50, "url": "https://example.com"}}]}},
    {{"category": "Investments / Growth", "examples": [{{"name": "Stock Name", "price_per_unit": 5.20, "cost_per_lot": 525.00, "roe": 15.5, "dividend_yield": 4.2, "estimated_rate": 8.00, "url": "https://example.com"}}]}}
  ],
  "return_assumptions": {{"savings_range": [low, high], "dividend_range": [low, high], "etf_range": [low, high], "growth_range": [low, high]}},
  "analysis": {{
    "strategy_summary": "A 1-2 sentence overview referencing the strategy objective.",
    "risk_explanation": "Explanation of risk.",
    "liquidity_commentary": "Comment on liquidity.",
    "goal_feasibility": "Is the goal realistic?",
    "adjustment_suggestion": "Suggested tweaks if any. Also explicitly explain the split percentage here."
  }},
  "disclaimer": "This allocation is a simulation for educational purposes and does not constitute financial advice. Examples of instruments commonly used for this strategy are illustrative only. Never guarantee returns."
}}

Today's date is {today:%d/%m/%Y}. Use the most recent Bursa Malaysia prices and ASNB NAVs you know."""


class WealthAgent(GeminiAgent):
    """Wealth+ strategy generation."""

    async def generate_strategy(self, request: WealthRequest) -> tuple[WealthStrategy, bool]:
        """
        Returns (strategy, used_fallback).

        The model's allocation must total exactly 100; anything else is
        treated as a malformed answer.
        """
        def fallback() -> tuple[WealthStrategy, bool]:
            return default_strategy(
                request.target_amount,
                request.months,
                request.risk,
                request.is_short,
            ), True

        if not self.is_enabled:
            return fallback()

        try:
            text = await self._generate(
                wealth_prompt(request, date.today()),
                model_name=self._settings.strategy_model_name,
            )
        except Exception as e:
            logger.error("wealth_strategy_failed", error=str(e))
            return fallback()

        try:
            strategy = WealthStrategy.model_validate(json.loads(strip_fences(text)))
        except (ValueError, ValidationError) as e:
            logger.warning("wealth_strategy_invalid", error=str(e))
            return fallback()

        if strategy.allocation.total != 100 or not strategy.investment_options:
            logger.warning("wealth_strategy_incomplete", allocation_total=strategy.allocation.total)
            return fallback()

        return strategy, False


# =============================================================================
# Planners
# =============================================================================

def travel_prompt(request: CommuteRequest) -> str:
    return f"""You are a cost optimization and urban mobility expert.

A user has the following commute:

Start: {_or(request.start_location)}
Destination: {_or(request.destination)}
Current Method: {_or(request.method)}
Trips per week: {_or(request.trips_per_week)}
Average cost per trip: {_or(request.cost_per_trip)}
Weekly cost: {_or(request.weekly_cost)}
Monthly cost: {_or(request.monthly_cost)}
Yearly cost: {_or(request.yearly_cost)}
Average travel time (total daily): {_or(request.avg_travel_time_total)}

Your task:
1. Suggest alternative travel methods that reduce cost.
2. Suggest route adjustments if possible.
3. Estimate potential weekly, monthly and yearly savings.
4. Consider trade-offs between cost and time.

Provide 3 optimized scenarios:
- Cheapest possible option
- Balanced cost/time option
- Time-saving option

DO NOT use markdown formatting (```json). Return raw STRICT JSON only.

Required JSON structure (each option has method, estimated_cost_per_trip, weekly_cost, monthly_cost, yearly_cost, estimated_time such as "45 mins", reasoning):
{{
  "cheapest_option": {{...}},
  "balanced_option": {{...}},
  "fastest_option": {{...}},
  "estimated_monthly_savings": number,
  "estimated_yearly_savings": number
}}

Be realistic and practical."""


def ev_prompt(request: VehicleRequest) -> str:
    routes = f"\n- Common routes: {_dumps(request.commute_routes)}" if request.commute_routes else ""
    return f"""You are an automotive finance expert specializing in Malaysian EV vs ICE (petrol) vehicle cost analysis.

User's current petrol vehicle profile:
- Car model (if provided): {request.current_car_model or 'Generic petrol car'}
- Monthly driving distance: {request.monthly_distance_km or 1500} km
- Fuel price: RM{request.current_fuel_cost_per_litre or 2.05}/litre (RON95)
- Fuel consumption: {request.current_fuel_consumption_per_100km or 10} L/100km
- Current monthly petrol cost: RM{request.current_monthly_petrol_cost or 300}
- Current monthly maintenance: RM{request.current_monthly_maintenance or 100}
- Current monthly road tax: RM{request.current_monthly_roadtax or 50}
- Current monthly insurance: RM{request.current_monthly_insurance or 200}{routes}

Your task:
1. Calculate the user's TRUE monthly cost of owning their current petrol car.
2. Compare with 3 EV options available in Malaysia (budget, mid-range, premium).
3. Consider Malaysia-specific EV incentives:
   - Road tax exemption for EVs until 2027
   - Import/excise duty exemption
   - EV charging costs in Malaysia (DC fast charge ~RM1.20/kWh, home charge ~RM0.57/kWh)
4. Calculate break-even point (when EV savings offset the price difference).
5. Provide realistic monthly installment estimates for each EV.

DO NOT use markdown formatting. Return raw STRICT JSON only.

Required JSON structure:
{{
  "current_petrol_analysis": {{"car_model": "string", "monthly_fuel": number, "monthly_maintenance": number, "monthly_roadtax": number, "monthly_insurance": number, "monthly_total": number, "yearly_total": number, "five_year_total": number, "co2_monthly_kg": number}},
  "ev_options": [
    {{"model": "string (real Malaysian market EV)", "category": "budget | mid-range | premium", "price_rm": number, "monthly_installment": number, "battery_kwh": number, "range_km": number, "efficiency_kwh_per_100km": number, "monthly_charging_cost": number, "monthly_maintenance": number, "monthly_roadtax": 0, "monthly_insurance": number, "monthly_total_with_installment": number, "monthly_total_running_only": number, "yearly_total_running_only": number, "five_year_total_running_only": number, "monthly_savings_vs_petrol": number, "yearly_savings_vs_petrol": number, "break_even_months": number, "co2_monthly_kg": number, "key_features": ["string"]}}
  ],
  "summary": {{"best_value_pick": "string (model name)", "highest_savings_pick": "string (model name)", "recommendation": "string (1-2 sentences)", "environmental_impact": "string (CO2 reduction summary)", "malaysia_incentives": ["string"]}}
}}

Be realistic with Malaysian market prices and electricity costs. Use actual EV models sold in Malaysia (e.g., BYD Atto 3, BYD Dolphin, Tesla Model 3, Neta V, Smart #1, Chery Omoda E5, etc)."""


def relocation_prompt(request: RelocationRequest) -> str:
    return f"""You are a Malaysian housing and relocation cost-optimization expert.

A user is considering relocating to reduce their overall living costs. Analyze their situation:

Current Details:
- Current location: {_or(request.current_location)}
- Work location: {_or(request.work_location, 'Not specified / Remote')}
- Preferred areas to explore: {_or(request.preferred_areas, 'No preference')}
- Current monthly rent: RM{_or(request.current_rent)}
- Monthly income: RM{_or(request.monthly_income)}
- Current transport method: {_or(request.transport_method, 'Car')}
- Current monthly transport cost: RM{_or(request.monthly_transport_cost)}

Your task:
1. Suggest 2-3 realistic relocation options in Malaysia based on their preferences and work location.
2. For each suggestion, focus on FINANCIAL benefits: rent compared to the current area, transport cost impact, cost of living differences and access to amenities.
3. Calculate estimated monthly savings for each option.
4. Provide point-form reasons why each location is better financially.
5. Include any downsides or trade-offs honestly.

Consider real Malaysian areas, realistic rental prices, and actual public transport coverage (LRT, MRT, KTM, bus routes).

DO NOT use markdown formatting. Return raw STRICT JSON only.

Required JSON structure:
{{
  "current_analysis": {{"location": "string", "estimated_monthly_rent": number, "estimated_transport_cost": number, "estimated_total_living_cost": number, "area_pros": ["string"], "area_cons": ["string"]}},
  "relocation_options": [
    {{"location": "string (e.g. 'Setia Alam, Shah Alam')", "estimated_rent_range": "string (e.g. 'RM800 - RM1,200')", "estimated_avg_rent": number, "rent_savings_vs_current": number, "estimated_transport_cost": number, "transport_savings_vs_current": number, "estimated_total_monthly_savings": number, "estimated_yearly_savings": number, "commute_to_work": "string (e.g. '25 mins via LRT')", "public_transport_access": ["string"], "financial_benefits": ["string"], "trade_offs": ["string"], "suitability_score": number}}
  ],
  "summary": {{"best_overall_pick": "string", "highest_savings_pick": "string", "recommendation": "string (2-3 sentences)", "key_insight": "string (1 sentence)"}}
}}"""


def lifestyle_prompt(request: LifestyleRequest) -> str:
    return f"""You are a Malaysian personal finance lifestyle coach. Analyze the user's lifestyle habits and provide actionable money-saving suggestions.

User Profile:
- Monthly income: RM{_or(request.monthly_income)}
- State: {_or(request.state)}
- Occupation: {_or(request.occupation)}
- Household size: {request.household_size or 1}

Current Spending:
- Monthly food budget: RM{_or(request.food_budget)}
- Monthly subscriptions: RM{_or(request.subscriptions_budget)}
- Monthly utilities: RM{_or(request.utilities_budget)}

Lifestyle Habits:
- Cooking habit: {_or(request.cooking_habit)}
- Dining out frequency: {_or(request.dining_frequency)}
- Active subscriptions: {_or(request.subscription_list)}
- Shopping habits: {_or(request.shopping_habit)}
- Entertainment: {_or(request.entertainment_habit)}

Provide 3-5 specific, actionable lifestyle changes that can save the most money. For each suggestion give a short title, a 2-3 sentence description, estimated monthly savings in RM, difficulty (easy/medium/hard), category (food, subscriptions, utilities, shopping, entertainment, general) and one practical quick tip.

Be specific to Malaysian context (mention local alternatives, Malaysian prices, apps like Shopee, Grab, etc).

Return ONLY valid JSON:
{{
  "suggestions": [{{"title": "string", "description": "string", "estimated_monthly_savings": number, "difficulty": "easy", "category": "string", "quick_tip": "string"}}],
  "summary": {{"total_potential_savings": number, "top_priority": "string", "insight": "string"}}
}}"""


class OptimizationAgent(GeminiAgent):
    """The four cost planners."""

    async def travel_optimization(self, request: CommuteRequest) -> AgentResult:
        return await self._generate_document(
            "travel",
            travel_prompt(request),
            lambda: travel_fallback(request),
            validator=TravelScenarios,
        )

    async def ev_comparison(self, request: VehicleRequest) -> AgentResult:
        return await self._generate_document(
            "ev_comparison",
            ev_prompt(request),
            lambda: ev_fallback(request),
            required=("current_petrol_analysis", "ev_options", "summary"),
        )

    async def relocation_suggestions(self, request: RelocationRequest) -> AgentResult:
        return await self._generate_document(
            "relocation",
            relocation_prompt(request),
            lambda: relocation_fallback(request),
            required=("current_analysis", "relocation_options", "summary"),
        )

    async def lifestyle_suggestions(self, request: LifestyleRequest) -> AgentResult:
        return await self._generate_document(
            "lifestyle",
            lifestyle_prompt(request),
            lambda: lifestyle_fallback(request),
            required=("suggestions", "summary"),
            model_name=self._settings.strategy_model_name,
            temperature=0.7,
            json_mode=True,
        )
