"""Validation package."""

from simple_budget.validation.validator import (
    FinanceValidator,
    ValidationFailedError,
    parse_amount,
)

__all__ = [
    "FinanceValidator",
    "ValidationFailedError",
    "parse_amount",
]
