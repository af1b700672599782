"""
Data Models Package

All Pydantic models used in the Meal Claims Tracker.
"""

from meal_tracker.models.expense import (
    WEEKDAY_NAMES,
    Expense,
    ExpenseInput,
    Holiday,
    HolidayInput,
    ReceiptUpload,
    ValidationIssue,
    ValidationResult,
    is_weekend,
    weekday_name,
)
from meal_tracker.models.report import (
    ExpenseSummary,
    ExportReport,
    ExportRow,
    RowKind,
)

__all__ = [
    # Records and input
    "WEEKDAY_NAMES",
    "Expense",
    "ExpenseInput",
    "Holiday",
    "HolidayInput",
    "ReceiptUpload",
    "ValidationIssue",
    "ValidationResult",
    "is_weekend",
    "weekday_name",
    # Reports
    "ExpenseSummary",
    "ExportReport",
    "ExportRow",
    "RowKind",
]
