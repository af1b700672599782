"""
Archive Packager

Bundles the rendered spreadsheet and the referenced receipt images into
one zip archive, built in memory:

    meal-expenses-2024-01-31.xlsx
    receipts/2024-01-08_RM30.00_1704700800000.jpg
    ...

A receipt that is missing or unreadable is skipped with a warning;
it never aborts the export. No directory entries are written.
"""

import zipfile
from datetime import date
from io import BytesIO
from pathlib import PurePosixPath
from typing import Iterable

from meal_tracker.logs import get_logger
from meal_tracker.services.storage.interface import StorageError
from meal_tracker.services.storage.receipts import ReceiptStore


logger = get_logger(__name__)

RECEIPTS_FOLDER = "receipts"
EXPORT_PREFIX = "meal-expenses"


def export_basename(export_date: date) -> str:
    return f"{EXPORT_PREFIX}-{export_date.isoformat()}"


class ArchivePackager:
    """Builds the export zip from spreadsheet bytes and receipt paths."""

    def __init__(self, receipt_store: ReceiptStore):
        self._receipts = receipt_store

    def package(
        self,
        spreadsheet: bytes,
        receipt_paths: Iterable[str],
        export_date: date,
    ) -> bytes:
        """
        Build the archive.

        Returns:
            The zip file as bytes
        """
        buffer = BytesIO()
        added = set()
        skipped = 0

        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(f"{export_basename(export_date)}.xlsx", spreadsheet)

            for receipt_path in receipt_paths:
                arcname = f"{RECEIPTS_FOLDER}/{PurePosixPath(receipt_path).name}"
                if arcname in added:
                    continue
                try:
                    content = self._receipts.read(receipt_path)
                except StorageError as e:
                    skipped += 1
                    logger.warning(
                        "receipt_skipped",
                        receipt_path=receipt_path,
                        error=str(e),
                    )
                    continue
                zf.writestr(arcname, content)
                added.add(arcname)

        logger.info(
            "archive_packaged",
            receipts=len(added),
            skipped=skipped,
            size=buffer.tell(),
        )
        return buffer.getvalue()
