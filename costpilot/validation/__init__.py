"""Validation package."""

from costpilot.validation.validator import BudgetValidator, validate_and_normalize

__all__ = [
    "BudgetValidator",
    "validate_and_normalize",
]
