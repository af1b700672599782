"""Read-side queries over stored expenses."""

from meal_tracker.queries.summary import SummaryCalculator, start_of_week

__all__ = ["SummaryCalculator", "start_of_week"]
