"""Export pipeline: aggregate -> render spreadsheet -> package archive."""

from meal_tracker.export.aggregator import (
    ExportAggregator,
    sort_for_export,
    sort_for_listing,
)
from meal_tracker.export.packager import ArchivePackager, export_basename
from meal_tracker.export.renderer import SpreadsheetRenderer


class ExportError(Exception):
    """Spreadsheet or archive generation failed."""
    pass


__all__ = [
    "ArchivePackager",
    "ExportAggregator",
    "ExportError",
    "SpreadsheetRenderer",
    "export_basename",
    "sort_for_export",
    "sort_for_listing",
]
