"""
Engine Constants

Every threshold the deterministic engine uses lives here so that a
change to scoring policy is a one-file diff.
"""

from costpilot.models.finance import RiskLevel


# Stress score bands: first band whose max >= score wins
RISK_BANDS: list[tuple[float, RiskLevel]] = [
    (33, RiskLevel.LOW),
    (66, RiskLevel.MODERATE),
    (100, RiskLevel.HIGH),
]

WEIGHTS = {
    "expense": 0.55,
    "buffer": 0.25,
    "debt": 0.20,
}

# Stand-ins for "infinite" ratios and survival
NO_INCOME_RATIO = 999.0
NO_EXPENSE_BUFFER_MONTHS = 12.0
SAFE_SURVIVAL_MONTHS = 999.0

# Categories below this share of expenses are not pressure sources
PRESSURE_SHARE_MIN = 0.05
PRESSURE_SOURCE_LIMIT = 2

# Overspending thresholds as a share of income
OVERSPEND_FOOD = 0.25
OVERSPEND_TRANSPORT = 0.18
OVERSPEND_SUBSCRIPTIONS = 0.08

# Risk flags
LOW_BUFFER_MONTHS = 2
HIGH_DEBT_RATIO = 0.2

# Optimizer triggers
RENT_INCOME_TRIGGER = 0.3
TRANSPORT_TRIGGER = 400
SUBSCRIPTIONS_TRIGGER = 50
FOOD_TRIGGER = 800
DEBT_RATIO_TRIGGER = 0.15

# Commute estimate
AVERAGE_SPEED_KMH = 35
COST_PER_KM = 0.25
WEEKS_PER_MONTH = 4.33
WEEKS_PER_YEAR = 52
EARTH_RADIUS_KM = 6371

# Wealth+
FEASIBLE_MONTHLY_LIMIT = 5000
