"""Tests for the dashboard summary figures."""

from datetime import date
from decimal import Decimal

from meal_tracker.models.expense import Expense
from meal_tracker.queries import SummaryCalculator, start_of_week

from tests.conftest import TODAY


def _expense(expense_id, day, amount):
    return Expense(id=expense_id, date=day, day=day.strftime("%A"), amount=Decimal(amount), place="X")


class TestStartOfWeek:

    def test_monday(self):
        assert start_of_week(date(2024, 1, 12)) == date(2024, 1, 8)
        assert start_of_week(date(2024, 1, 8)) == date(2024, 1, 8)
        assert start_of_week(date(2024, 1, 7)) == date(2024, 1, 1)


class TestSummaryCalculator:

    def test_empty(self):
        summary = SummaryCalculator().summarize([], TODAY)

        assert summary.today_total == Decimal("0.00")
        assert summary.remaining_today == Decimal("50.00")
        assert summary.expense_count == 0
        assert summary.usage_percent == 0.0

    def test_today_over_cap(self):
        """Test today's claimable is capped and the excess is reported."""
        summary = SummaryCalculator().summarize([
            _expense("1", TODAY, "30.00"),
            _expense("2", TODAY, "40.00"),
        ], TODAY)

        assert summary.today_total == Decimal("70.00")
        assert summary.today_claimable == Decimal("50.00")
        assert summary.over_limit == Decimal("20.00")
        assert summary.remaining_today == Decimal("0.00")
        assert summary.usage_percent == 100.0

    def test_period_totals(self):
        summary = SummaryCalculator().summarize([
            _expense("1", date(2024, 1, 12), "10.00"),
            _expense("2", date(2024, 1, 8), "20.00"),
            _expense("3", date(2024, 1, 5), "5.00"),
            _expense("4", date(2023, 12, 29), "7.50"),
        ], TODAY)

        assert summary.today_total == Decimal("10.00")
        assert summary.week_total == Decimal("30.00")
        assert summary.month_total == Decimal("35.00")
        assert summary.overall_total == Decimal("42.50")
        assert summary.expense_count == 4

    def test_period_totals_are_not_capped(self):
        summary = SummaryCalculator().summarize([
            _expense("1", date(2024, 1, 8), "50.00"),
            _expense("2", date(2024, 1, 8), "50.00"),
        ], TODAY)

        assert summary.week_total == Decimal("100.00")
