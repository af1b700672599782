"""
Dashboard Summary

Totals shown above the expense list:
- today: raw total, claimable (daily cap applied), remaining allowance
- this week: Monday through today
- this month: first of the month through today
- overall

Only the "today" figures apply the daily cap. Period totals are raw sums,
which is what the user actually spent.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from meal_tracker.models.expense import Expense
from meal_tracker.models.report import ExpenseSummary
from meal_tracker.rules.capping import (
    DAILY_CAP,
    daily_claimable,
    round_to_cents,
    sum_to_cents,
)


ZERO = Decimal("0.00")


def start_of_week(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


class SummaryCalculator:
    """Computes the dashboard figures for a given day."""

    def __init__(self, daily_cap: Decimal = DAILY_CAP):
        self._daily_cap = daily_cap

    def summarize(self, expenses: Iterable[Expense], today: date) -> ExpenseSummary:
        expenses = list(expenses)
        monday = start_of_week(today)

        today_total, today_claimable = daily_claimable(
            (e.amount for e in expenses if e.date == today),
            self._daily_cap,
        )
        week_total = sum_to_cents(e.amount for e in expenses if monday <= e.date <= today)
        month_total = sum_to_cents(
            e.amount for e in expenses
            if (e.date.year, e.date.month) == (today.year, today.month) and e.date <= today
        )

        return ExpenseSummary(
            today_total=today_total,
            today_claimable=today_claimable,
            remaining_today=round_to_cents(max(self._daily_cap - today_total, ZERO)),
            over_limit=round_to_cents(max(today_total - self._daily_cap, ZERO)),
            week_total=week_total,
            month_total=month_total,
            overall_total=sum_to_cents(e.amount for e in expenses),
            expense_count=len(expenses),
            daily_cap=self._daily_cap,
        )
