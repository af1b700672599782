"""
Spreadsheet Renderer

Writes an ExportReport to an .xlsx workbook with openpyxl.

Row styles:
- header:       bold, light gray, thin borders, frozen, auto-filter
- expense:      plain, thin borders
- daily total:  bold, light blue, medium bottom border,
                raw amount in red when the day is over the cap
- grand total:  bold, amber, medium top border
- note:         italic, small, always appended after a spacer row
"""

from decimal import Decimal
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from meal_tracker.models.report import ExportReport, ExportRow, RowKind
from meal_tracker.rules.capping import DAILY_CAP


SHEET_TITLE = "Meal Expenses"
AMOUNT_FORMAT = "0.00"

HEADER_FILL = "FFD3D3D3"
DAILY_TOTAL_FILL = "FFE3F2FD"
GRAND_TOTAL_FILL = "FFFFEB9C"
WARNING_COLOR = "FFFF0000"
GRID_COLOR = "FFD0D0D0"
SEPARATOR_COLOR = "FF000000"

COLUMN_WIDTHS = (15, 18, 15, 15, 40, 35)
AMOUNT_COLUMN = 3
CLAIMABLE_COLUMN = 4

_thin = Side(style="thin", color=GRID_COLOR)
_separator = Side(style="medium", color=SEPARATOR_COLOR)

GRID_BORDER = Border(left=_thin, right=_thin, top=_thin, bottom=_thin)
DAILY_TOTAL_BORDER = Border(left=_thin, right=_thin, top=_thin, bottom=_separator)
GRAND_TOTAL_BORDER = Border(left=_thin, right=_thin, top=_separator, bottom=_thin)


def _solid(color: str) -> PatternFill:
    return PatternFill(fill_type="solid", start_color=color, end_color=color)


def _number(value):
    return float(value) if value is not None else None


class SpreadsheetRenderer:
    """Renders the aggregated export rows into a styled worksheet."""

    def __init__(self, currency_label: str = "RM", daily_cap: Decimal = DAILY_CAP):
        self._currency = currency_label
        self._daily_cap = daily_cap

    @property
    def headers(self) -> list[str]:
        return [
            "Date",
            "Day",
            f"Amount ({self._currency})",
            f"Capped Amount ({self._currency})",
            "Place",
            "Receipt File",
        ]

    @property
    def note(self) -> str:
        return f"* Daily claims are capped at {self._currency}{self._daily_cap:.2f}"

    def _write_header(self, ws: Worksheet) -> None:
        ws.append(self.headers)
        for cell in ws[1]:
            cell.font = Font(bold=True)
            cell.fill = _solid(HEADER_FILL)
            cell.border = GRID_BORDER

        for idx, width in enumerate(COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(idx)].width = width

        ws.freeze_panes = "A2"
        ws.auto_filter.ref = f"A1:{get_column_letter(len(self.headers))}1"

    def _write_row(self, ws: Worksheet, row: ExportRow) -> None:
        ws.append([
            row.date,
            row.day,
            _number(row.amount),
            _number(row.claimable),
            row.place,
            row.receipt,
        ])
        cells = ws[ws.max_row]

        for cell in cells:
            cell.border = GRID_BORDER
        cells[AMOUNT_COLUMN - 1].number_format = AMOUNT_FORMAT
        cells[CLAIMABLE_COLUMN - 1].number_format = AMOUNT_FORMAT

        if row.kind == RowKind.DAILY_TOTAL:
            for cell in cells:
                cell.font = Font(bold=True)
                cell.fill = _solid(DAILY_TOTAL_FILL)
                cell.border = DAILY_TOTAL_BORDER
            if row.over_cap:
                cells[AMOUNT_COLUMN - 1].font = Font(bold=True, color=WARNING_COLOR)

        elif row.kind == RowKind.GRAND_TOTAL:
            for cell in cells:
                cell.font = Font(bold=True)
                cell.fill = _solid(GRAND_TOTAL_FILL)
                cell.border = GRAND_TOTAL_BORDER

    def _write_note(self, ws: Worksheet) -> None:
        ws.append([])
        ws.append([None, self.note])
        note_cell = ws.cell(row=ws.max_row, column=2)
        note_cell.font = Font(italic=True, size=10)
        note_cell.alignment = Alignment(horizontal="left")

    def build_workbook(self, report: ExportReport) -> Workbook:
        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE

        self._write_header(ws)
        for row in report.rows:
            self._write_row(ws, row)
        self._write_note(ws)

        return wb

    def render(self, report: ExportReport) -> bytes:
        """Render the report to .xlsx bytes."""
        buffer = BytesIO()
        self.build_workbook(report).save(buffer)
        return buffer.getvalue()
