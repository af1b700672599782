"""Tests for the expense, holiday and export flows."""

import zipfile
import pytest
from datetime import date
from decimal import Decimal
from io import BytesIO

from openpyxl import load_workbook
from PIL import Image
from pydantic import ValidationError as PydanticValidationError

from meal_tracker.models.expense import (
    ExpenseInput,
    HolidayInput,
    ReceiptUpload,
    ValidationResult,
)
from meal_tracker.orchestrator import ExpenseFlow, next_record_id
from meal_tracker.services.storage import (
    JsonExpenseStorage,
    NotFoundError,
    ReceiptStore,
    StorageError,
)
from meal_tracker.validation import ValidationFailedError

from tests.conftest import START_MILLIS, TODAY


def _form(**overrides):
    values = {"date": "2024-01-08", "amount": "30", "place": "Mamak"}
    values.update(overrides)
    return ExpenseInput(**values)


class TestNextRecordId:

    def test_uses_clock(self):
        assert next_record_id([], 1000) == "1000"

    def test_strictly_increasing_when_clock_repeats(self):
        assert next_record_id(["1000"], 1000) == "1001"

    def test_strictly_increasing_when_clock_goes_back(self):
        assert next_record_id(["1000", "5000"], 1000) == "5001"


class TestExpenseFlow:

    def test_add_expense(self, components):
        expense = components.expense_flow.add_expense(_form(place="  Mamak  "))

        assert expense.id == str(START_MILLIS)
        assert expense.day == "Monday"
        assert expense.amount == Decimal("30.00")
        assert expense.place == "Mamak"
        assert expense.receipt_path is None

    def test_day_is_derived_from_date(self, components):
        """Test a client-supplied day name is ignored."""
        expense = components.expense_flow.add_expense(_form(day="Sunday"))
        assert expense.day == "Monday"

    def test_transaction_cap_applied_on_insert(self, components, expense_backend):
        """Test a 65.00 expense is stored as 50.00."""
        components.expense_flow.add_expense(_form(amount="65"))

        assert expense_backend.read()["expenses"][0]["amount"] == 50.0

    def test_weekend_rejected_without_writes(self, components, expense_backend, settings, png_bytes):
        """Test a rejected expense creates neither a record nor a receipt file."""
        receipt = ReceiptUpload(filename="r.png", content=png_bytes)

        with pytest.raises(ValidationFailedError) as exc_info:
            components.expense_flow.add_expense(_form(date="2024-01-06"), receipt)

        assert "Monday-Friday" in str(exc_info.value)
        assert expense_backend.write_count == 0
        assert not settings.receipts_path.exists()

    def test_add_with_receipt(self, components, settings, png_bytes):
        receipt = ReceiptUpload(filename="lunch.png", content=png_bytes)

        expense = components.expense_flow.add_expense(_form(amount="65"), receipt)

        assert expense.receipt_path == f"receipts/2024-01/2024-01-08_RM50.00_{START_MILLIS}.png"
        assert (settings.base_dir / expense.receipt_path).read_bytes() == png_bytes

    def test_receipt_discarded_when_persist_fails(self, components, expense_backend, settings, png_bytes):
        def failing_write(document):
            raise StorageError("disk full")

        expense_backend.write = failing_write
        receipt = ReceiptUpload(filename="lunch.png", content=png_bytes)

        with pytest.raises(StorageError):
            components.expense_flow.add_expense(_form(), receipt)

        assert list(settings.receipts_path.rglob("*.png")) == []

    def test_rejected_record_writes_no_receipt(self, expense_backend, settings, clock, png_bytes):
        """Test a record the model refuses never leaves a receipt file on disk."""
        class AcceptEverything:
            def validate_expense(self, form, receipt=None):
                return ValidationResult()

        flow = ExpenseFlow(
            JsonExpenseStorage(expense_backend),
            ReceiptStore(settings.base_dir),
            validator=AcceptEverything(),
            settings=settings,
            clock=clock,
            today=lambda: TODAY,
        )

        with pytest.raises(PydanticValidationError):
            flow.add_expense(_form(amount="0.004"), ReceiptUpload(filename="r.png", content=png_bytes))

        assert not settings.receipts_path.exists()
        assert expense_backend.write_count == 0

    def test_ids_are_unique_and_increasing(self, components):
        first = components.expense_flow.add_expense(_form())
        second = components.expense_flow.add_expense(_form())
        assert int(second.id) > int(first.id)

    def test_list_is_newest_first(self, components):
        flow = components.expense_flow
        flow.add_expense(_form(date="2024-01-08"))
        flow.add_expense(_form(date="2024-01-10"))
        flow.add_expense(_form(date="2024-01-08"))

        listed = flow.list_expenses()

        assert [e.date.isoformat() for e in listed] == ["2024-01-10", "2024-01-08", "2024-01-08"]
        assert int(listed[1].id) > int(listed[2].id)

    def test_delete_expense_removes_receipt(self, components, settings, png_bytes):
        flow = components.expense_flow
        expense = flow.add_expense(_form(), ReceiptUpload(filename="r.png", content=png_bytes))

        flow.delete_expense(expense.id)

        assert flow.list_expenses() == []
        assert not (settings.base_dir / expense.receipt_path).exists()

    def test_delete_unknown(self, components, expense_backend):
        components.expense_flow.add_expense(_form())
        before = expense_backend.read()

        with pytest.raises(NotFoundError):
            components.expense_flow.delete_expense("123")

        assert expense_backend.read() == before

    def test_summarize(self, components):
        flow = components.expense_flow
        flow.add_expense(_form(date=TODAY.isoformat(), amount="30"))
        flow.add_expense(_form(date=TODAY.isoformat(), amount="40"))

        summary = flow.summarize()

        assert summary.today_total == Decimal("70.00")
        assert summary.today_claimable == Decimal("50.00")


class TestHolidayFlow:

    def test_add_list_delete(self, components):
        flow = components.holiday_flow
        later = flow.add_holiday(HolidayInput(date="2024-08-31", name="Merdeka"))
        flow.add_holiday(HolidayInput(date="2024-02-10", name="Chinese New Year"))

        assert [h.name for h in flow.list_holidays()] == ["Chinese New Year", "Merdeka"]

        flow.delete_holiday(later.id)
        assert [h.name for h in flow.list_holidays()] == ["Chinese New Year"]

    def test_invalid_holiday(self, components, holiday_backend):
        with pytest.raises(ValidationFailedError):
            components.holiday_flow.add_holiday(HolidayInput(date="2024-08-31", name=" "))
        assert holiday_backend.write_count == 0


class TestExportFlow:

    def test_export_archive(self, components):
        flow = components.expense_flow
        flow.add_expense(_form(amount="30"))
        flow.add_expense(_form(amount="40"), ReceiptUpload(filename="r.jpg", content=_jpeg()))

        filename, archive = components.export_flow.export_archive()

        assert filename == "meal-expenses-2024-01-12.zip"
        with zipfile.ZipFile(BytesIO(archive)) as zf:
            names = zf.namelist()
            assert "meal-expenses-2024-01-12.xlsx" in names
            assert f"receipts/2024-01-08_RM40.00_{START_MILLIS + 1}.jpg" in names
            ws = load_workbook(BytesIO(zf.read("meal-expenses-2024-01-12.xlsx"))).active

        daily = [c.value for c in ws[4]]
        assert daily[1] == "Daily Total"
        assert daily[2] == 70
        assert daily[3] == 50

    def test_export_skips_missing_receipt(self, components, settings, png_bytes):
        expense = components.expense_flow.add_expense(
            _form(), ReceiptUpload(filename="r.png", content=png_bytes)
        )
        (settings.base_dir / expense.receipt_path).unlink()

        _, archive = components.export_flow.export_archive(date(2024, 1, 31))

        with zipfile.ZipFile(BytesIO(archive)) as zf:
            assert zf.namelist() == ["meal-expenses-2024-01-31.xlsx"]

    def test_empty_export(self, components):
        _, archive = components.export_flow.export_archive()

        with zipfile.ZipFile(BytesIO(archive)) as zf:
            assert zf.namelist() == ["meal-expenses-2024-01-12.xlsx"]
            ws = load_workbook(BytesIO(zf.read("meal-expenses-2024-01-12.xlsx"))).active

        assert ws.max_row == 3
        assert ws["A1"].value == "Date"
        assert ws["B3"].value == "* Daily claims are capped at RM50.00"

    def test_export_is_repeatable(self, components):
        components.expense_flow.add_expense(_form())
        first = components.export_flow.build_report()
        second = components.export_flow.build_report()
        assert first == second


def _jpeg() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (8, 8), (10, 120, 10)).save(buffer, format="JPEG")
    return buffer.getvalue()
