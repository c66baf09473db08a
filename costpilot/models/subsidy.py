"""
Subsidy Models

Government aid programs and the result of matching a profile
against them.
"""

from typing import Any, Optional

from pydantic import Field, model_validator

from costpilot.models.finance import CamelModel


class SubsidyProgram(CamelModel):
    """
    A single aid program and its eligibility rules.

    Unset limits (None) mean the rule does not apply.
    """

    program_id: str
    name: str
    benefit_text: str = ""
    monthly_benefit: float = 0
    income_max_monthly: Optional[float] = None
    household_min: Optional[int] = None
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    requires_student: bool = False
    employment_restriction: Optional[str] = None
    state_restriction: Optional[str] = None
    required_fields: list[str] = Field(
        default_factory=list,
        description="Profile fields needed before eligibility can be decided"
    )
    link: Optional[str] = None
    category: Optional[str] = None


class SubsidyMatch(SubsidyProgram):
    """A program annotated with the outcome for one profile."""

    eligible: bool
    match_confidence: float = Field(ge=0, le=1)
    reasons: list[str] = Field(default_factory=list)
    missing_fields: list[str] = Field(default_factory=list)
    needs_info: bool = False


class SubsidyMatchResult(CamelModel):
    matches: list[SubsidyMatch] = Field(default_factory=list)
    not_eligible: list[SubsidyMatch] = Field(default_factory=list)


class SubsidyProfile(CamelModel):
    """
    The facts eligibility depends on.

    Accepts either a user profile (income) or engine inputs
    (incomeMonthly); zero or missing values count as unknown.
    """

    income: float = 0
    age: int = 0
    employment_status: str = ""
    household_size: Optional[int] = None
    state: str = ""

    @model_validator(mode="before")
    @classmethod
    def accept_engine_income(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("income"):
            monthly = data.get("incomeMonthly", data.get("income_monthly"))
            if monthly:
                data = {**data, "income": monthly}
        return data

    @model_validator(mode="before")
    @classmethod
    def blank_to_unknown(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {k: v for k, v in data.items() if v is not None}
        return data
