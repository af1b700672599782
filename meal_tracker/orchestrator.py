"""
Main Orchestrator for Meal Claims Tracker

This module ties together all the components and defines the flows for:
1. Expenses (validate -> cap -> save receipt -> persist)
2. Holidays (validate -> persist)
3. Export (read -> aggregate -> render -> package)

The orchestrator enforces the boundaries:
- Nothing is written before validation passes
- A receipt is only kept if its expense record was persisted
- The daily cap is only applied in derived views, never stored
"""

import time
from datetime import date
from typing import Callable, Iterable, NamedTuple, Optional

from meal_tracker.config import AppSettings, get_settings
from meal_tracker.export import (
    ArchivePackager,
    ExportAggregator,
    ExportError,
    SpreadsheetRenderer,
    export_basename,
    sort_for_listing,
)
from meal_tracker.logs import get_logger
from meal_tracker.models.expense import (
    Expense,
    ExpenseInput,
    Holiday,
    HolidayInput,
    ReceiptUpload,
    weekday_name,
)
from meal_tracker.models.report import ExpenseSummary, ExportReport
from meal_tracker.queries import SummaryCalculator
from meal_tracker.rules.capping import cap_transaction
from meal_tracker.services.storage import (
    DocumentBackend,
    ExpenseStorageInterface,
    HolidayStorageInterface,
    JsonExpenseStorage,
    JsonFileBackend,
    JsonHolidayStorage,
    ReceiptStore,
    StorageError,
)
from meal_tracker.validation import (
    ExpenseValidator,
    ValidationFailedError,
    parse_amount,
    parse_iso_date,
)


logger = get_logger(__name__)


def current_millis() -> int:
    return int(time.time() * 1000)


def next_record_id(existing_ids: Iterable[str], now_ms: int) -> str:
    """
    Timestamp token for a new record.

    Strictly greater than every existing id, even if the clock
    repeats or goes backwards.
    """
    highest = max((int(i) for i in existing_ids), default=0)
    return str(max(now_ms, highest + 1))


class ExpenseFlow:
    """
    Orchestrates expense creation, listing and deletion.

    Flow for a new expense:
    1. Validate the form and receipt (nothing written yet)
    2. Clamp the amount to the transaction cap
    3. Save the receipt under receipts/<YYYY-MM>/
    4. Persist the record (the receipt is removed again if this fails)
    """

    def __init__(
        self,
        expense_storage: ExpenseStorageInterface,
        receipt_store: ReceiptStore,
        validator: Optional[ExpenseValidator] = None,
        settings: Optional[AppSettings] = None,
        clock: Callable[[], int] = current_millis,
        today: Callable[[], date] = date.today,
    ):
        self._settings = settings or get_settings()
        self._storage = expense_storage
        self._receipts = receipt_store
        self._validator = validator or ExpenseValidator(self._settings, today=today)
        self._summary = SummaryCalculator(self._settings.daily_cap)
        self._clock = clock
        self._today = today

    def list_expenses(self) -> list[Expense]:
        """All expenses, newest first."""
        return sort_for_listing(self._storage.list_expenses())

    def add_expense(
        self,
        form: ExpenseInput,
        receipt: Optional[ReceiptUpload] = None,
    ) -> Expense:
        """
        Validate and store a new expense.

        Raises:
            ValidationFailedError: If the input is rejected
            StorageError: If the receipt or the record cannot be written
        """
        result = self._validator.validate_expense(form, receipt)
        if result.has_errors:
            logger.info(
                "expense_rejected",
                field=result.first_error.field,
                reason=result.first_error.issue_type,
            )
            raise ValidationFailedError(result)

        expense_date = parse_iso_date(form.date)
        raw_amount = parse_amount(form.amount)
        amount = cap_transaction(raw_amount, self._settings.transaction_cap)
        if amount < raw_amount:
            logger.info(
                "transaction_capped",
                raw_amount=str(raw_amount),
                stored_amount=str(amount),
            )

        existing_ids = [e.id for e in self._storage.list_expenses()]
        expense_id = next_record_id(existing_ids, self._clock())

        expense = Expense(
            id=expense_id,
            date=expense_date,
            day=weekday_name(expense_date),
            amount=amount,
            place=form.place.strip(),
        )

        # The record is complete before anything touches the disk.
        receipt_path = None
        if receipt is not None:
            receipt_path = self._receipts.save(receipt, expense_date, amount, expense_id)
            expense = expense.model_copy(update={"receipt_path": receipt_path})

        try:
            self._storage.add_expense(expense)
        except StorageError:
            if receipt_path:
                self._discard_receipt(receipt_path)
            raise

        logger.info(
            "expense_saved",
            expense_id=expense.id,
            date=expense.date.isoformat(),
            amount=str(expense.amount),
            has_receipt=receipt_path is not None,
        )
        return expense

    def delete_expense(self, expense_id: str) -> Expense:
        """
        Delete an expense and its receipt file.

        Raises:
            NotFoundError: If the id is unknown (store unchanged)
        """
        expense = self._storage.delete_expense(expense_id)
        if expense.receipt_path:
            self._discard_receipt(expense.receipt_path)
        logger.info("expense_deleted", expense_id=expense_id)
        return expense

    def summarize(self, today: Optional[date] = None) -> ExpenseSummary:
        return self._summary.summarize(
            self._storage.list_expenses(),
            today or self._today(),
        )

    def _discard_receipt(self, receipt_path: str) -> None:
        try:
            self._receipts.delete(receipt_path)
        except StorageError as e:
            logger.error("receipt_delete_failed", receipt_path=receipt_path, error=str(e))


class HolidayFlow:
    """Public holiday list. Independent of expenses."""

    def __init__(
        self,
        holiday_storage: HolidayStorageInterface,
        validator: ExpenseValidator,
        clock: Callable[[], int] = current_millis,
    ):
        self._storage = holiday_storage
        self._validator = validator
        self._clock = clock

    def list_holidays(self) -> list[Holiday]:
        """All holidays, earliest first."""
        return sorted(self._storage.list_holidays(), key=lambda h: (h.date, int(h.id)))

    def add_holiday(self, form: HolidayInput) -> Holiday:
        """
        Raises:
            ValidationFailedError: If the date or name is rejected
        """
        result = self._validator.validate_holiday(form)
        if result.has_errors:
            raise ValidationFailedError(result)

        existing_ids = [h.id for h in self._storage.list_holidays()]
        holiday = Holiday(
            id=next_record_id(existing_ids, self._clock()),
            date=parse_iso_date(form.date),
            name=form.name.strip(),
        )
        self._storage.add_holiday(holiday)
        logger.info("holiday_saved", holiday_id=holiday.id, date=holiday.date.isoformat())
        return holiday

    def delete_holiday(self, holiday_id: str) -> Holiday:
        holiday = self._storage.delete_holiday(holiday_id)
        logger.info("holiday_deleted", holiday_id=holiday_id)
        return holiday


class ExportFlow:
    """
    Orchestrates the export.

    Flow:
    1. Read every expense
    2. Aggregate into daily runs with capped totals
    3. Render the spreadsheet
    4. Package spreadsheet + receipts into a zip
    """

    def __init__(
        self,
        expense_storage: ExpenseStorageInterface,
        receipt_store: ReceiptStore,
        settings: Optional[AppSettings] = None,
        today: Callable[[], date] = date.today,
    ):
        settings = settings or get_settings()
        self._storage = expense_storage
        self._aggregator = ExportAggregator(settings.daily_cap)
        self._renderer = SpreadsheetRenderer(settings.currency_label, settings.daily_cap)
        self._packager = ArchivePackager(receipt_store)
        self._today = today

    def build_report(self) -> ExportReport:
        return self._aggregator.aggregate(self._storage.list_expenses())

    def export_archive(self, export_date: Optional[date] = None) -> tuple[str, bytes]:
        """
        Build the downloadable archive.

        Returns:
            (archive_filename, archive_bytes)

        Raises:
            StorageError: If the expense store cannot be read
            ExportError: If the spreadsheet or archive cannot be built
        """
        export_date = export_date or self._today()
        report = self.build_report()

        try:
            spreadsheet = self._renderer.render(report)
            archive = self._packager.package(spreadsheet, report.receipt_paths, export_date)
        except Exception as e:
            logger.error("export_failed", error=str(e), exc_info=True)
            raise ExportError(f"Failed to build export: {e}") from e

        logger.info(
            "export_built",
            expenses=report.expense_count,
            days=report.day_count,
            total_claimable=str(report.total_claimable),
        )
        return f"{export_basename(export_date)}.zip", archive


class AppComponents(NamedTuple):
    settings: AppSettings
    expense_flow: ExpenseFlow
    holiday_flow: HolidayFlow
    export_flow: ExportFlow


def create_app_components(
    settings: Optional[AppSettings] = None,
    expense_backend: Optional[DocumentBackend] = None,
    holiday_backend: Optional[DocumentBackend] = None,
    clock: Callable[[], int] = current_millis,
    today: Callable[[], date] = date.today,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; defaults to the cached environment settings
        expense_backend: Document backend for expenses; defaults to the JSON file
        holiday_backend: Document backend for holidays; defaults to the JSON file
        clock: Millisecond clock used for record ids
        today: Local "today", used for date validation and exports
    """
    settings = settings or get_settings()

    expense_storage = JsonExpenseStorage(
        expense_backend or JsonFileBackend(settings.expenses_file, {"expenses": []})
    )
    holiday_storage = JsonHolidayStorage(
        holiday_backend or JsonFileBackend(settings.holidays_file, {"holidays": []})
    )
    receipt_store = ReceiptStore(
        settings.base_dir,
        settings.receipts_dir,
        settings.currency_label,
    )
    validator = ExpenseValidator(settings, today=today)

    return AppComponents(
        settings=settings,
        expense_flow=ExpenseFlow(
            expense_storage,
            receipt_store,
            validator=validator,
            settings=settings,
            clock=clock,
            today=today,
        ),
        holiday_flow=HolidayFlow(holiday_storage, validator, clock=clock),
        export_flow=ExportFlow(expense_storage, receipt_store, settings=settings, today=today),
    )
