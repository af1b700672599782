"""Input validation package."""

from meal_tracker.validation.validator import (
    ExpenseValidator,
    ValidationFailedError,
    parse_amount,
    parse_iso_date,
)

__all__ = [
    "ExpenseValidator",
    "ValidationFailedError",
    "parse_amount",
    "parse_iso_date",
]
