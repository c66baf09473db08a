"""
Streamlit Frontend for CostPilot

A thin dashboard over the same orchestrator flows the HTTP API uses.

DESIGN PRINCIPLES:
1. Every figure on screen comes from the engine
2. AI text is labelled as such and always has a fallback
3. Nothing changes the profile without an explicit button press
"""

import asyncio
from uuid import uuid4

import streamlit as st

from costpilot.audit import create_correlation_id
from costpilot.errors import InputValidationError
from costpilot.models import (
    EmploymentStatus,
    RiskAppetite,
    SavingsPlanRequest,
    SubsidyProfile,
    UserProfile,
    WealthPlusStrategy,
    WealthRequest,
)
from costpilot.orchestrator import AnalysisFlow, PlanningFlow, ProfileFlow, create_app_components
from costpilot.validation import BudgetValidator


# Page configuration
st.set_page_config(
    page_title="CostPilot",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .info-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


RISK_BOX = {"Low": "success-box", "Moderate": "warning-box", "High": "warning-box"}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components(use_storage=True)


def analysis_body(profile: UserProfile) -> dict:
    """The /analysis body for a stored profile."""
    body = profile.to_monthly_inputs().model_dump(by_alias=True)
    body.update({
        "age": profile.age,
        "employmentStatus": profile.employment_status.value,
        "state": profile.state,
        "householdSize": profile.household_size,
    })
    if profile.coordinates:
        body["location"] = {"lat": profile.coordinates.lat, "lng": profile.coordinates.lng}
    return body


def main():
    """Main application entry point."""
    components = get_components()

    st.sidebar.title("🧭 CostPilot")
    st.sidebar.markdown("---")

    user_id = st.sidebar.text_input("User ID", value="demo-user")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "💡 Optimize", "🎁 Subsidies", "📈 Wealth+", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if components.sheets_client is None:
        st.sidebar.caption("Profiles are kept in memory for this session.")

    if not user_id:
        st.info("Enter a user ID in the sidebar to begin.")
        return

    profile = run_async(components.profiles.get_or_create(user_id))

    if page == "📊 Dashboard":
        render_dashboard_page(components.analysis, profile)
    elif page == "💡 Optimize":
        render_optimize_page(components.analysis, components.profiles, user_id, profile)
    elif page == "🎁 Subsidies":
        render_subsidies_page(components.analysis, components.profiles, user_id, profile)
    elif page == "📈 Wealth+":
        render_wealth_page(components.planning, components.profiles, user_id)
    elif page == "⚙️ Settings":
        render_settings_page(components.profiles, user_id, profile)


def render_dashboard_page(analysis_flow: AnalysisFlow, profile: UserProfile):
    """Stress score, signals and the AI insight."""
    st.title("📊 Dashboard")

    validator = BudgetValidator()
    result = validator.validate(profile.to_monthly_inputs())
    if result.issues:
        st.markdown(f"""
        <div class="warning-box">
            <p>{validator.get_user_friendly_summary(result)}</p>
        </div>
        """, unsafe_allow_html=True)

    correlation_id = create_correlation_id()
    with st.spinner("Analysing your budget..."):
        try:
            analysis = run_async(analysis_flow.run_full_analysis(
                analysis_body(profile),
                correlation_id=correlation_id,
            ))
        except InputValidationError as e:
            st.error(e.message)
            return

    stress = analysis.financials.stress
    derived = analysis.financials.derived

    col1, col2, col3 = st.columns(3)
    col1.metric("Stress score", f"{stress.stress_score:g}", stress.risk_level.value)
    col2.metric("Monthly balance", f"RM {derived.monthly_balance:,.2f}")
    col3.metric("Buffer", f"{derived.survival_months:g} months")

    st.markdown(f"""
    <div class="{RISK_BOX[stress.risk_level.value]}">
        <h4>{stress.risk_level.value} risk</h4>
        <p>Main pressure: {", ".join(s.value for s in stress.pressure_sources) or "none"}</p>
    </div>
    """, unsafe_allow_html=True)

    flags = analysis.financials.signals.risk_flags
    if flags.expenses_over_income:
        st.error("Your expenses are higher than your income.")
    if flags.high_debt:
        st.warning("Debt repayments take a large share of your income.")
    if flags.low_buffer:
        st.warning("Your savings cover less than two months of expenses.")

    if analysis.location_context:
        context = analysis.location_context
        with st.expander(f"📍 {context.city}, {context.state}"):
            for station in context.nearby_transit:
                st.markdown(f"- {station.name} ({station.distance_km:g} km, {station.operator})")

    st.markdown("---")
    st.subheader("🤖 AI insight")
    insight = run_async(analysis_flow.explain_analysis(
        "dashboard", analysis, correlation_id=correlation_id
    ))
    st.markdown(f"**{insight.get('headline', '')}**")
    for key in ("reason", "tradeoff"):
        if insight.get(key):
            st.markdown(insight[key])
    for move in insight.get("next_moves", []):
        st.markdown(f"- {move}")


def render_optimize_page(
    analysis_flow: AnalysisFlow,
    profile_flow: ProfileFlow,
    user_id: str,
    profile: UserProfile,
):
    """Recommendations with accept and what-if controls."""
    st.title("💡 Optimize")

    inputs = profile_flow.monthly_inputs(profile)
    try:
        result = run_async(analysis_flow.optimize(inputs.model_dump(by_alias=True)))
    except InputValidationError as e:
        st.error(e.message)
        return

    recommendations = profile_flow.visible_recommendations(profile, result.recommendations)
    if not recommendations:
        st.markdown("""
        <div class="success-box">
            <h4>✅ Nothing to optimize</h4>
            <p>Your budget has no open recommendations right now.</p>
        </div>
        """, unsafe_allow_html=True)
    else:
        st.metric("Potential monthly savings", f"RM {sum(r.potential_savings for r in recommendations):,.2f}")

    for recommendation in recommendations:
        with st.container(border=True):
            st.markdown(f"### {recommendation.title}")
            st.markdown(recommendation.reason)
            delta = recommendation.simulation_result.delta
            st.markdown(
                f"Saves **RM {recommendation.potential_savings:,.2f}** a month, "
                f"stress {delta.stress_score:+g}"
            )
            if st.button("✅ Accept", key=f"accept-{recommendation.type.value}"):
                run_async(profile_flow.accept_recommendation(user_id, recommendation))
                st.rerun()

    if len(recommendations) > 1 and st.button("Apply all"):
        run_async(profile_flow.apply_all(user_id, recommendations))
        st.rerun()

    st.markdown("---")
    st.subheader("🔮 What if?")
    col1, col2 = st.columns(2)
    with col1:
        rent = st.number_input("Rent (RM)", value=float(inputs.rent_monthly), min_value=0.0, step=50.0)
        food = st.number_input("Food (RM)", value=float(inputs.food_monthly), min_value=0.0, step=50.0)
    with col2:
        transport = st.number_input(
            "Transport (RM)", value=float(inputs.transport_monthly), min_value=0.0, step=50.0
        )
        subscriptions = st.number_input(
            "Subscriptions (RM)", value=float(inputs.subscriptions_monthly), min_value=0.0, step=10.0
        )

    if st.button("Simulate", type="primary"):
        try:
            scenario = run_async(analysis_flow.simulate(
                inputs.model_dump(by_alias=True),
                {
                    "rentMonthly": rent,
                    "foodMonthly": food,
                    "transportMonthly": transport,
                    "subscriptionsMonthly": subscriptions,
                },
            ))
        except InputValidationError as e:
            st.error(e.message)
            return
        col1, col2, col3 = st.columns(3)
        col1.metric("Stress", f"{scenario.after.stress_score:g}", f"{scenario.delta.stress_score:+g}")
        col2.metric("Balance change", f"RM {scenario.delta.monthly_balance:,.2f}")
        col3.metric("Survival", f"{scenario.delta.survival_months:g} months")


def render_subsidies_page(
    analysis_flow: AnalysisFlow,
    profile_flow: ProfileFlow,
    user_id: str,
    profile: UserProfile,
):
    """Matched aid programs and claims."""
    st.title("🎁 Subsidies")

    result = run_async(analysis_flow.match_subsidies(SubsidyProfile(
        income=profile.income,
        age=profile.age,
        employment_status=profile.employment_status.value,
        state=profile.state,
        household_size=profile.household_size,
    )))
    claimed = {c.program_id for c in profile.claimed_subsidies}

    st.subheader(f"Eligible ({len(result.matches)})")
    for match in result.matches:
        with st.container(border=True):
            st.markdown(f"**{match.name}** - {match.benefit_text}")
            st.caption("; ".join(match.reasons))
            if match.program_id in claimed:
                if st.button("Remove claim", key=f"unclaim-{match.program_id}"):
                    run_async(profile_flow.unclaim_subsidy(user_id, match.program_id))
                    st.rerun()
            elif st.button("Mark as claimed", key=f"claim-{match.program_id}"):
                run_async(profile_flow.claim_subsidy(user_id, match))
                st.rerun()

    with st.expander(f"Not eligible ({len(result.not_eligible)})"):
        for match in result.not_eligible:
            label = "needs more info" if match.needs_info else "; ".join(match.reasons)
            st.markdown(f"- **{match.name}**: {label}")


def render_wealth_page(planning_flow: PlanningFlow, profile_flow: ProfileFlow, user_id: str):
    """Wealth+ strategy and contribution plan."""
    st.title("📈 Wealth+")

    col1, col2, col3 = st.columns(3)
    with col1:
        target = st.number_input("Target (RM)", value=10000.0, min_value=1.0, step=500.0)
    with col2:
        is_short = st.checkbox("Short-term goal (months)", value=False)
        duration = st.number_input("Duration", value=12 if is_short else 5, min_value=1, step=1)
    with col3:
        risk = st.selectbox(
            "Risk appetite",
            options=list(RiskAppetite),
            index=1,
            format_func=lambda x: x.value.title(),
        )

    goal = WealthRequest(target_amount=target, duration=int(duration), is_short=is_short, risk=risk)

    if st.button("Generate strategy", type="primary"):
        with st.spinner("Building your strategy..."):
            st.session_state.wealth_strategy = run_async(planning_flow.wealth_strategy(goal))

    strategy = st.session_state.get("wealth_strategy")
    if strategy is None:
        return

    st.markdown(f"""
    <div class="info-box">
        <p>{strategy.analysis.strategy_summary}</p>
    </div>
    """, unsafe_allow_html=True)

    savings_names = [o.name for o in strategy.savings_options]
    savings_choice = st.selectbox(
        "Savings account",
        options=range(len(savings_names)),
        format_func=lambda i: savings_names[i],
    ) if savings_names else 0

    basket = {}
    for index, option in enumerate(strategy.investment_options):
        lots = st.number_input(
            f"{option.name} lots / month (RM {option.cost_per_lot or 0:,.0f} per lot)",
            min_value=0,
            value=0,
            step=1,
            key=f"lots-{index}",
        )
        if lots:
            basket[index] = int(lots)

    try:
        plan = planning_flow.savings_plan(SavingsPlanRequest(
            goal=goal,
            strategy=strategy,
            savings_choice=savings_choice,
            basket=basket,
        ))
    except InputValidationError as e:
        st.error(e.message)
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Monthly (no growth)", f"RM {plan.linear_monthly:,}")
    col2.metric("Monthly (with returns)", f"RM {plan.optimized_monthly:,}")
    col3.metric("Projected value", f"RM {plan.projected_value:,}")
    st.progress(
        plan.savings_percent / 100,
        text=f"{plan.savings_percent}% savings / {plan.investment_percent}% investments",
    )
    st.caption(strategy.disclaimer)

    if st.button("💾 Keep this plan"):
        run_async(profile_flow.save_wealth_strategy(user_id, WealthPlusStrategy(
            id=uuid4().hex,
            label=f"RM {target:,.0f} goal",
            monthly_amount=plan.linear_monthly,
            savings_alloc=plan.savings_percent,
            investment_alloc=plan.investment_percent,
            savings_option=savings_names[savings_choice] if savings_names else None,
            target_amount=target,
            duration=int(duration),
            risk=risk.value,
            goal_type=goal.goal_type.value,
        )))
        st.success("Plan saved to your profile.")


def render_settings_page(profile_flow: ProfileFlow, user_id: str, profile: UserProfile):
    """Profile form and connection status."""
    st.title("⚙️ Settings")

    with st.form("profile"):
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Name", value=profile.name)
            age = st.number_input("Age", value=profile.age, min_value=0, step=1)
            state = st.text_input("State", value=profile.state)
            household_size = st.number_input(
                "Household size", value=profile.household_size, min_value=1, step=1
            )
            employment_status = st.selectbox(
                "Employment",
                options=list(EmploymentStatus),
                index=list(EmploymentStatus).index(profile.employment_status),
                format_func=lambda x: x.value.replace("-", " ").title(),
            )
        with col2:
            income = st.number_input("Income (RM)", value=float(profile.income), min_value=0.0)
            rent = st.number_input("Rent (RM)", value=float(profile.rent), min_value=0.0)
            utilities = st.number_input("Utilities (RM)", value=float(profile.utilities), min_value=0.0)
            transport = st.number_input("Transport (RM)", value=float(profile.transport_cost), min_value=0.0)
            food = st.number_input("Food (RM)", value=float(profile.food), min_value=0.0)
            debt = st.number_input("Debt (RM)", value=float(profile.debt), min_value=0.0)
            subscriptions = st.number_input(
                "Subscriptions (RM)", value=float(profile.subscriptions), min_value=0.0
            )
            savings = st.number_input("Savings (RM)", value=float(profile.savings), min_value=0.0)

        if st.form_submit_button("Save", type="primary"):
            try:
                run_async(profile_flow.update(user_id, {
                    "name": name,
                    "age": int(age),
                    "state": state,
                    "householdSize": int(household_size),
                    "employmentStatus": employment_status.value,
                    "income": income,
                    "rent": rent,
                    "utilities": utilities,
                    "transportCost": transport,
                    "food": food,
                    "debt": debt,
                    "subscriptions": subscriptions,
                    "savings": savings,
                }))
                st.success("Profile saved.")
            except InputValidationError as e:
                st.error(e.message)

    st.markdown("---")
    st.markdown("### Connection Status")

    from costpilot.config import validate_all_settings

    status = validate_all_settings()
    services = [
        ("Gemini (AI)", "gemini"),
        ("Google Sheets (Storage)", "google_sheets"),
        ("Subsidy catalog", "subsidies"),
        ("Location services", "location"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
