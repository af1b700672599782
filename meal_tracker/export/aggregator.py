"""
Export Aggregation

Turns the unsorted expense list into the ordered rows of the claim sheet.

Ordering is date ascending, then numeric id ascending. The id is the
creation timestamp, so ties within a day come out in insertion order.
This is the reverse of the list view, which shows newest first.

For each run of same-date expenses:
- one row per expense, capped column left empty
- one "Daily Total" row with the raw total and the capped claimable total
Then one grand total row with the sum of the capped daily totals.
"""

from decimal import Decimal
from itertools import groupby
from typing import Iterable

from meal_tracker.models.expense import Expense
from meal_tracker.models.report import ExportReport, ExportRow, RowKind
from meal_tracker.rules.capping import DAILY_CAP, daily_claimable, round_to_cents
from meal_tracker.services.storage.receipts import receipt_display_name


DAILY_TOTAL_LABEL = "Daily Total"
GRAND_TOTAL_LABEL = "TOTAL"
NOT_AVAILABLE = "N/A"


def sort_for_export(expenses: Iterable[Expense]) -> list[Expense]:
    """Oldest first: date ascending, then numeric id ascending."""
    return sorted(expenses, key=lambda e: (e.date, e.sort_id))


def sort_for_listing(expenses: Iterable[Expense]) -> list[Expense]:
    """Newest first: date descending, then numeric id descending."""
    return sorted(expenses, key=lambda e: (e.date, e.sort_id), reverse=True)


class ExportAggregator:
    """Groups expenses into daily runs and computes capped totals."""

    def __init__(self, daily_cap: Decimal = DAILY_CAP):
        self._daily_cap = daily_cap

    def _expense_row(self, expense: Expense) -> ExportRow:
        return ExportRow(
            kind=RowKind.EXPENSE,
            date=expense.date.isoformat(),
            day=expense.day,
            amount=expense.amount,
            claimable=None,
            place=expense.place or NOT_AVAILABLE,
            receipt=(
                receipt_display_name(expense.receipt_path)
                if expense.receipt_path
                else NOT_AVAILABLE
            ),
        )

    def aggregate(self, expenses: Iterable[Expense]) -> ExportReport:
        report = ExportReport()
        total_claimable = Decimal("0.00")
        seen_receipts = set()

        for expense_date, run in groupby(sort_for_export(expenses), key=lambda e: e.date):
            run = list(run)

            for expense in run:
                report.rows.append(self._expense_row(expense))
                report.expense_count += 1

                if expense.receipt_path and expense.receipt_path not in seen_receipts:
                    seen_receipts.add(expense.receipt_path)
                    report.receipt_paths.append(expense.receipt_path)

            daily_total, claimable_daily = daily_claimable(
                (e.amount for e in run),
                self._daily_cap,
            )
            total_claimable = round_to_cents(total_claimable + claimable_daily)
            report.day_count += 1

            report.rows.append(ExportRow(
                kind=RowKind.DAILY_TOTAL,
                date=expense_date.isoformat(),
                day=DAILY_TOTAL_LABEL,
                amount=daily_total,
                claimable=claimable_daily,
                over_cap=daily_total > self._daily_cap,
            ))

        if report.expense_count:
            report.rows.append(ExportRow(
                kind=RowKind.GRAND_TOTAL,
                date=GRAND_TOTAL_LABEL,
                claimable=total_claimable,
            ))

        report.total_claimable = total_claimable
        return report
