"""Tests for expense and holiday input validation."""

import pytest
from decimal import Decimal

from meal_tracker.models.expense import ExpenseInput, HolidayInput, ReceiptUpload
from meal_tracker.validation import (
    ExpenseValidator,
    ValidationFailedError,
    parse_amount,
    parse_iso_date,
)

from tests.conftest import TODAY


@pytest.fixture
def validator(settings):
    return ExpenseValidator(settings, today=lambda: TODAY)


def _form(**overrides):
    values = {"date": "2024-01-08", "amount": "12.50", "place": "Mamak"}
    values.update(overrides)
    return ExpenseInput(**values)


class TestParsers:

    @pytest.mark.parametrize("value", ["2024-1-8", "08/01/2024", "2024-02-30", "", None, "yesterday"])
    def test_invalid_dates(self, value):
        assert parse_iso_date(value) is None

    def test_valid_date(self):
        assert parse_iso_date("2024-01-08").isoformat() == "2024-01-08"

    @pytest.mark.parametrize("value", ["abc", "", "NaN", "Infinity", None])
    def test_invalid_amounts(self, value):
        assert parse_amount(value) is None

    def test_valid_amount(self):
        assert parse_amount(" 12.5 ") == Decimal("12.5")


class TestExpenseValidation:

    def test_valid_expense(self, validator):
        result = validator.validate_expense(_form())
        assert result.is_valid

    def test_today_is_allowed(self, validator):
        assert validator.validate_expense(_form(date=TODAY.isoformat())).is_valid

    def test_missing_place(self, validator):
        result = validator.validate_expense(_form(place="   "))
        assert result.first_error.message == "Place/Restaurant is required"

    def test_bad_date_format(self, validator):
        result = validator.validate_expense(_form(date="08-01-2024"))
        assert result.first_error.message == "Invalid date: must be in YYYY-MM-DD format"

    @pytest.mark.parametrize("day", ["2024-01-06", "2024-01-07"])
    def test_weekend_rejected(self, validator, day):
        """Test Saturday and Sunday cannot be claimed."""
        result = validator.validate_expense(_form(date=day))
        assert result.first_error.issue_type == "weekend"
        assert "Monday-Friday" in result.first_error.message

    def test_future_date_rejected(self, validator):
        result = validator.validate_expense(_form(date="2024-01-15"))
        assert result.first_error.message == "Invalid date: cannot add expenses for future dates"

    @pytest.mark.parametrize("amount, message", [
        ("lunch", "Invalid amount: must be a number"),
        ("", "Invalid amount: must be a number"),
        ("0", "Invalid amount: must be greater than 0"),
        ("-3", "Invalid amount: must be greater than 0"),
        ("0.004", "Invalid amount: must be greater than 0"),
    ])
    def test_bad_amount(self, validator, amount, message):
        result = validator.validate_expense(_form(amount=amount))
        assert result.first_error.message == message

    def test_checks_are_reported_in_order(self, validator):
        """Test place is reported before date, and date before amount."""
        result = validator.validate_expense(ExpenseInput(date="2024-01-06", amount="x", place=""))
        assert [i.field for i in result.issues] == ["place", "date", "amount"]

    def test_holidays_are_not_checked(self, validator):
        """Test a weekday public holiday is still a valid claim date."""
        assert validator.validate_expense(_form(date="2024-01-11")).is_valid


class TestReceiptValidation:

    def test_valid_png(self, validator, png_bytes):
        receipt = ReceiptUpload(filename="r.png", content=png_bytes)
        assert validator.validate_expense(_form(), receipt).is_valid

    def test_unsupported_extension(self, validator, png_bytes):
        receipt = ReceiptUpload(filename="r.pdf", content=png_bytes)
        result = validator.validate_expense(_form(), receipt)
        assert result.first_error.field == "receipt"
        assert result.first_error.message.startswith("Invalid receipt: supported formats are")

    def test_empty_file(self, validator):
        result = validator.validate_expense(_form(), ReceiptUpload(filename="r.png", content=b""))
        assert result.first_error.issue_type == "empty"

    def test_not_an_image(self, validator):
        receipt = ReceiptUpload(filename="r.jpg", content=b"definitely not a jpeg")
        result = validator.validate_expense(_form(), receipt)
        assert result.first_error.issue_type == "not_an_image"

    def test_too_large(self, settings):
        settings.max_upload_size_mb = 1
        validator = ExpenseValidator(settings, today=lambda: TODAY)
        receipt = ReceiptUpload(filename="r.png", content=b"0" * (1024 * 1024 + 1))

        result = validator.validate_expense(_form(), receipt)

        assert result.first_error.issue_type == "too_large"


class TestHolidayValidation:

    def test_valid_holiday(self, validator):
        assert validator.validate_holiday(HolidayInput(date="2024-08-31", name="Merdeka")).is_valid

    def test_weekend_holiday_allowed(self, validator):
        assert validator.validate_holiday(HolidayInput(date="2024-01-06", name="X")).is_valid

    def test_name_too_long(self, validator):
        result = validator.validate_holiday(HolidayInput(date="2024-08-31", name="x" * 201))
        assert result.first_error.issue_type == "too_long"
        assert result.first_error.message == "Holiday name must be at most 200 characters"

    def test_name_at_limit(self, validator):
        assert validator.validate_holiday(HolidayInput(date="2024-08-31", name="x" * 200)).is_valid

    def test_missing_name(self, validator):
        result = validator.validate_holiday(HolidayInput(date="2024-08-31", name=""))
        assert result.first_error.message == "Holiday name is required"


class TestValidationFailedError:

    def test_message_is_first_error(self, validator):
        result = validator.validate_expense(ExpenseInput(place="", date="bad", amount="1"))
        error = ValidationFailedError(result)
        assert str(error) == "Place/Restaurant is required"
        assert error.result is result
