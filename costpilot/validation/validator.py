"""
Two-Stage Budget Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION (validate_and_normalize):
- Body shape
- Numeric coercion of the eight budget fields
- Non-negativity
- This rejects the request with a message the user can act on

STAGE 2 - SEMANTIC VALIDATION (BudgetValidator):
- Zero income
- Expenses above income
- Heavy debt or rent load
- Missing savings buffer
- This never rejects; it reports warnings for the dashboard

IMPORTANT: Validation NEVER silently fixes issues beyond the documented
normalization (blank -> 0). Everything else is reported.
"""

import math
from collections.abc import Mapping
from typing import Any

from costpilot.errors import InputValidationError
from costpilot.models.finance import (
    MONTHLY_FIELDS,
    MonthlyInputs,
    ValidationIssue,
    ValidationResult,
)


def _to_number(value: Any) -> float:
    """Coerce a JSON value to float; NaN signals 'not a number'."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


def validate_and_normalize(raw: Any) -> MonthlyInputs:
    """
    Stage 1: turn a request body into MonthlyInputs.

    Missing, null and blank (empty or whitespace) fields become 0. Unknown keys are
    ignored. Fields are checked in canonical order and the first
    failure is raised.

    Raises:
        InputValidationError: body is not an object, or a field is not
            a finite number, or a field is negative.
    """
    if not isinstance(raw, Mapping):
        raise InputValidationError("Body must be a JSON object")

    clean: dict[str, float] = {}
    for wire_name, attr in MONTHLY_FIELDS.items():
        n = _to_number(raw.get(wire_name))

        if not math.isfinite(n):
            raise InputValidationError(f"Field '{wire_name}' must be a number", field=wire_name)
        if n < 0:
            raise InputValidationError(f"Field '{wire_name}' must be >= 0", field=wire_name)

        clean[attr] = n

    return MonthlyInputs(**clean)


class BudgetValidator:
    """
    Stage 2: semantic review of a normalized budget.

    Only produces warnings and info; a budget that passed stage 1 is
    always usable by the engine.
    """

    DEBT_WARNING_RATIO = 0.35
    RENT_WARNING_RATIO = 0.30

    def _validate_semantic(self, inputs: MonthlyInputs) -> list[ValidationIssue]:
        issues = []
        income = inputs.income_monthly
        expenses = inputs.total_expenses

        if income <= 0:
            issues.append(ValidationIssue(
                field="incomeMonthly",
                issue_type="zero_income",
                message="No monthly income recorded; ratios will show as maximum stress",
                severity="warning",
                suggested_fix="Enter your take-home pay",
            ))
        elif expenses > income:
            issues.append(ValidationIssue(
                field="incomeMonthly",
                issue_type="expenses_over_income",
                message=f"Expenses (RM{expenses:,.2f}) exceed income (RM{income:,.2f})",
                severity="warning",
                suggested_fix="Review the largest expense categories first",
            ))

        if income > 0 and inputs.debt_monthly / income > self.DEBT_WARNING_RATIO:
            issues.append(ValidationIssue(
                field="debtMonthly",
                issue_type="high_debt",
                message=f"Debt repayments take {inputs.debt_monthly / income:.0%} of income",
                severity="warning",
                suggested_fix="Consider refinancing or consolidating",
            ))

        if income > 0 and inputs.rent_monthly / income > self.RENT_WARNING_RATIO:
            issues.append(ValidationIssue(
                field="rentMonthly",
                issue_type="high_rent",
                message=f"Rent takes {inputs.rent_monthly / income:.0%} of income",
                severity="info",
            ))

        if inputs.savings_balance <= 0 and expenses > 0:
            issues.append(ValidationIssue(
                field="savingsBalance",
                issue_type="no_buffer",
                message="No savings buffer recorded",
                severity="warning",
                suggested_fix="Even one month of expenses set aside lowers stress noticeably",
            ))

        return issues

    def validate(self, inputs: MonthlyInputs) -> ValidationResult:
        """Run the semantic stage against an already-normalized budget."""
        issues = self._validate_semantic(inputs)
        return ValidationResult(
            schema_valid=True,
            semantic_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
        )

    def validate_raw(self, raw: Any) -> tuple[MonthlyInputs | None, ValidationResult]:
        """
        Run both stages against a request body.

        Returns (inputs, result); inputs is None when stage 1 failed.
        """
        try:
            inputs = validate_and_normalize(raw)
        except InputValidationError as e:
            return None, ValidationResult(
                schema_valid=False,
                semantic_valid=False,
                issues=[ValidationIssue(
                    field=e.field or "body",
                    issue_type="invalid_value",
                    message=e.message,
                    severity="error",
                )],
            )
        return inputs, self.validate(inputs)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """One line per issue, for display to non-technical users."""
        if not result.issues:
            return "✅ Budget looks consistent."

        icons = {"error": "❌", "warning": "⚠️", "info": "ℹ️"}
        lines = []
        for issue in result.issues:
            line = f"{icons[issue.severity]} {issue.message}"
            if issue.suggested_fix:
                line += f" ({issue.suggested_fix})"
            lines.append(line)
        return "\n".join(lines)
