"""
Core Data Models for Meal Claims Tracker

These models define the schemas for the records kept in the JSON documents
and for the raw input coming from the form.

Stored records use camelCase keys (receiptPath, createdAt) so the
documents keep the shape the front end reads. Amounts are Decimal in
Python and plain JSON numbers on disk.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from meal_tracker.rules.capping import round_to_cents


WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

HOLIDAY_NAME_MAX_LENGTH = 200


def weekday_name(day: dt.date) -> str:
    """
    English weekday name for a calendar date.

    Plain calendar arithmetic on the date itself: no timezone is involved,
    so a date entered late in the evening never shifts to the next day.
    """
    return WEEKDAY_NAMES[day.weekday()]


def is_weekend(day: dt.date) -> bool:
    return day.weekday() >= 5


# =============================================================================
# STORED RECORDS
# =============================================================================

class Expense(BaseModel):
    """
    A single meal expense as persisted in expenses.json.

    The stored amount is already clamped to the transaction cap.
    The daily cap is never stored; it is derived at summary/export time.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(
        ...,
        pattern=r"^\d+$",
        description="Creation timestamp token (milliseconds), unique and increasing"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the meal"
    )
    day: str = Field(
        ...,
        description="Weekday name derived from date"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Recorded amount, rounded to cents"
    )
    place: str = Field(
        ...,
        min_length=1,
        description="Restaurant or shop"
    )
    receipt_path: Optional[str] = Field(
        default=None,
        alias="receiptPath",
        description="Relative path of the uploaded receipt image"
    )
    created_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.timezone.utc),
        alias="createdAt",
        description="When the record was inserted (UTC)"
    )

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        """Floats from JSON go through their string form."""
        if isinstance(v, float):
            return repr(v)
        return v

    @field_validator("amount")
    @classmethod
    def round_amount(cls, v: Decimal) -> Decimal:
        return round_to_cents(v)

    @field_serializer("amount")
    def serialize_amount(self, v: Decimal) -> float:
        return float(v)

    @property
    def sort_id(self) -> int:
        return int(self.id)

    def to_document(self) -> dict:
        """Dict form used in the JSON document and API responses."""
        return self.model_dump(mode="json", by_alias=True)


class Holiday(BaseModel):
    """A public holiday. Kept for reference only, never checked against expenses."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., pattern=r"^\d+$")
    date: dt.date
    name: str = Field(..., min_length=1, max_length=HOLIDAY_NAME_MAX_LENGTH)

    def to_document(self) -> dict:
        return self.model_dump(mode="json")


# =============================================================================
# RAW INPUT
# =============================================================================

class ExpenseInput(BaseModel):
    """
    Raw expense form values, as strings.

    Nothing is trusted here; ExpenseValidator decides what is acceptable.
    """
    date: str = ""
    day: str = ""
    amount: str = ""
    place: str = ""


class HolidayInput(BaseModel):
    """Raw holiday form values."""
    date: str = ""
    name: str = ""


class ReceiptUpload(BaseModel):
    """An uploaded receipt image before it is written to disk."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        """Lower-cased extension including the dot, or empty string."""
        _, dot, ext = self.filename.rpartition(".")
        return f".{ext.lower()}" if dot and ext else ""


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'weekend')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
    )


class ValidationResult(BaseModel):
    """Result of validating one form submission."""

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def first_error(self) -> Optional[ValidationIssue]:
        for issue in self.issues:
            if issue.severity == "error":
                return issue
        return None
