"""
Input Validation

Every check runs before anything is written: a request that fails
validation never touches the stores or the receipts directory.

Checks are simple range/format checks, reported with a specific message
the user can act on. All issues are collected; the HTTP layer reports the
first one, so the order of the checks below is the order the user sees.

Holidays are NOT cross-checked against expense dates. An expense on a
weekday public holiday is accepted.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from io import BytesIO
from typing import Callable, Optional

from PIL import Image

from meal_tracker.config import AppSettings, get_settings
from meal_tracker.models.expense import (
    HOLIDAY_NAME_MAX_LENGTH,
    ExpenseInput,
    HolidayInput,
    ReceiptUpload,
    ValidationIssue,
    ValidationResult,
    is_weekend,
)
from meal_tracker.rules.capping import round_to_cents


_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationFailedError(Exception):
    """User-correctable input problem. Maps to HTTP 400."""

    def __init__(self, result: ValidationResult):
        self.result = result
        first = result.first_error
        super().__init__(first.message if first else "Invalid input")


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse a strict YYYY-MM-DD string, None if it is not one."""
    if not value or not _ISO_DATE.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def parse_amount(value: Optional[str]) -> Optional[Decimal]:
    """Parse a finite decimal number, None if it is not one."""
    if value is None:
        return None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


class ExpenseValidator:
    """
    Validates expense and holiday form input.

    `today` is injectable so tests can pin the calendar.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self._settings = settings or get_settings()
        self._today = today or date.today

    def _validate_date(self, value: str) -> list[ValidationIssue]:
        parsed = parse_iso_date(value)
        if parsed is None:
            return [ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message="Invalid date: must be in YYYY-MM-DD format",
            )]

        issues = []
        if is_weekend(parsed):
            issues.append(ValidationIssue(
                field="date",
                issue_type="weekend",
                message="Invalid date: meal expenses can only be claimed for Monday-Friday",
            ))
        if parsed > self._today():
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message="Invalid date: cannot add expenses for future dates",
            ))
        return issues

    def _validate_amount(self, value: str) -> list[ValidationIssue]:
        amount = parse_amount(value)
        if amount is None:
            return [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Invalid amount: must be a number",
            )]
        # Stored amounts are whole cents; 0.004 would be stored as 0.00.
        if amount <= 0 or round_to_cents(amount) <= 0:
            return [ValidationIssue(
                field="amount",
                issue_type="out_of_range",
                message="Invalid amount: must be greater than 0",
            )]
        return []

    def _validate_receipt(self, receipt: ReceiptUpload) -> list[ValidationIssue]:
        allowed = self._settings.supported_formats_list
        if receipt.extension.lstrip(".") not in allowed:
            return [ValidationIssue(
                field="receipt",
                issue_type="invalid_format",
                message=f"Invalid receipt: supported formats are {', '.join(allowed)}",
            )]

        if receipt.size == 0:
            return [ValidationIssue(
                field="receipt",
                issue_type="empty",
                message="Invalid receipt: file is empty",
            )]

        if receipt.size > self._settings.max_upload_size_bytes:
            return [ValidationIssue(
                field="receipt",
                issue_type="too_large",
                message=(
                    f"Invalid receipt: file exceeds "
                    f"{self._settings.max_upload_size_mb} MB"
                ),
            )]

        try:
            with Image.open(BytesIO(receipt.content)) as img:
                img.verify()
        except (OSError, SyntaxError, ValueError):
            return [ValidationIssue(
                field="receipt",
                issue_type="not_an_image",
                message="Invalid receipt: file is not a readable image",
            )]

        return []

    def validate_expense(
        self,
        form: ExpenseInput,
        receipt: Optional[ReceiptUpload] = None,
    ) -> ValidationResult:
        """
        Validate an expense submission.

        Order: place, date format, weekend, future date, amount, receipt.
        """
        issues = []

        if not form.place or not form.place.strip():
            issues.append(ValidationIssue(
                field="place",
                issue_type="missing",
                message="Place/Restaurant is required",
            ))

        issues.extend(self._validate_date(form.date))
        issues.extend(self._validate_amount(form.amount))

        if receipt is not None:
            issues.extend(self._validate_receipt(receipt))

        return ValidationResult(issues=issues)

    def validate_holiday(self, form: HolidayInput) -> ValidationResult:
        issues = []

        if parse_iso_date(form.date) is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message="Invalid date: must be in YYYY-MM-DD format",
            ))

        if not form.name or not form.name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Holiday name is required",
            ))
        elif len(form.name.strip()) > HOLIDAY_NAME_MAX_LENGTH:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Holiday name must be at most {HOLIDAY_NAME_MAX_LENGTH} characters",
            ))

        return ValidationResult(issues=issues)
