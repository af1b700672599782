"""
Report Models

Rows produced by the export aggregator and the dashboard summary.
The renderer only reads these; all arithmetic happens before a row exists.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RowKind(str, Enum):
    """Kinds of data rows in the exported sheet."""
    EXPENSE = "expense"
    DAILY_TOTAL = "daily_total"
    GRAND_TOTAL = "grand_total"


class ExportRow(BaseModel):
    """
    One data row of the export, before any styling.

    Expense rows leave `claimable` empty: capping only means something
    at the daily level.
    """

    kind: RowKind
    date: str = ""
    day: str = ""
    amount: Optional[Decimal] = None
    claimable: Optional[Decimal] = None
    place: str = ""
    receipt: str = ""
    over_cap: bool = Field(
        default=False,
        description="Daily total above the daily cap"
    )


class ExportReport(BaseModel):
    """Aggregated export: ordered rows plus the receipts they reference."""

    rows: list[ExportRow] = Field(default_factory=list)
    total_claimable: Decimal = Decimal("0.00")
    receipt_paths: list[str] = Field(
        default_factory=list,
        description="Distinct receipt paths in export order"
    )
    expense_count: int = 0
    day_count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.expense_count == 0

    def rows_of(self, kind: RowKind) -> list[ExportRow]:
        return [row for row in self.rows if row.kind == kind]


class ExpenseSummary(BaseModel):
    """Dashboard figures: today's allowance and period totals."""

    today_total: Decimal = Decimal("0.00")
    today_claimable: Decimal = Decimal("0.00")
    remaining_today: Decimal = Decimal("0.00")
    over_limit: Decimal = Decimal("0.00")
    week_total: Decimal = Decimal("0.00")
    month_total: Decimal = Decimal("0.00")
    overall_total: Decimal = Decimal("0.00")
    expense_count: int = 0
    daily_cap: Decimal = Decimal("50.00")

    @property
    def usage_percent(self) -> float:
        """Share of the daily cap used today, capped at 100."""
        if self.daily_cap <= 0:
            return 100.0
        return min(float(self.today_total / self.daily_cap) * 100, 100.0)

    def to_document(self) -> dict:
        """JSON-ready dict with amounts as numbers."""
        document = self.model_dump()
        for key, value in document.items():
            if isinstance(value, Decimal):
                document[key] = float(value)
        document["usage_percent"] = round(self.usage_percent, 1)
        return document
