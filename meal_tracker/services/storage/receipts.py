"""
Receipt Image Storage

Receipts are stored on local disk, grouped by month:

    receipts/2024-01/2024-01-08_RM30.00_1704700800000.jpg

The filename encodes the expense date, the stored (capped) amount and the
insertion timestamp, which keeps names collision-free and sortable.
Paths handed to the rest of the system are relative to the base directory
and always use forward slashes.
"""

import re
from decimal import Decimal
from datetime import date
from pathlib import Path, PurePosixPath

from meal_tracker.logs import get_logger
from meal_tracker.models.expense import ReceiptUpload
from meal_tracker.services.storage.interface import NotFoundError, StorageError


logger = get_logger(__name__)

# "2024-01-08_RM30.00_1704700800000.jpg" -> "2024-01-08_RM30.00.jpg"
_TIMESTAMP_SUFFIX = re.compile(r"_\d+(\.\w+)$")


def receipt_display_name(receipt_path: str) -> str:
    """Basename with the trailing timestamp removed, for the spreadsheet."""
    name = PurePosixPath(receipt_path).name
    return _TIMESTAMP_SUFFIX.sub(r"\1", name)


class ReceiptStore:
    """Saves, reads and deletes receipt images under one directory."""

    def __init__(
        self,
        base_dir: Path,
        receipts_dir: str = "receipts",
        currency_label: str = "RM",
    ):
        self._base_dir = Path(base_dir)
        self._receipts_dir = receipts_dir
        self._currency_label = currency_label

    @property
    def root(self) -> Path:
        return self._base_dir / self._receipts_dir

    def build_filename(
        self,
        expense_date: date,
        amount: Decimal,
        timestamp: str,
        extension: str,
    ) -> str:
        return f"{expense_date.isoformat()}_{self._currency_label}{amount:.2f}_{timestamp}{extension}"

    def resolve(self, receipt_path: str) -> Path:
        """
        Absolute path for a stored relative receipt path.

        Raises:
            StorageError: If the path points outside the receipts directory
        """
        full_path = (self._base_dir / receipt_path).resolve()
        root = self.root.resolve()
        if root != full_path and root not in full_path.parents:
            raise StorageError(f"Receipt path outside receipts directory: {receipt_path}")
        return full_path

    def save(
        self,
        upload: ReceiptUpload,
        expense_date: date,
        amount: Decimal,
        timestamp: str,
    ) -> str:
        """
        Write an uploaded receipt to its month folder.

        Returns:
            The relative path to store on the expense record

        Raises:
            StorageError: If the file cannot be written
        """
        month_dir = expense_date.strftime("%Y-%m")
        filename = self.build_filename(expense_date, amount, timestamp, upload.extension)
        relative = PurePosixPath(self._receipts_dir, month_dir, filename).as_posix()
        target = self._base_dir / relative

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(upload.content)
        except OSError as e:
            raise StorageError(f"Failed to save receipt {filename}: {e}")

        logger.info("receipt_saved", receipt_path=relative, size=upload.size)
        return relative

    def read(self, receipt_path: str) -> bytes:
        """
        Read a stored receipt.

        Raises:
            NotFoundError: If the file does not exist
            StorageError: If the file cannot be read
        """
        full_path = self.resolve(receipt_path)
        if not full_path.is_file():
            raise NotFoundError(f"Receipt not found: {receipt_path}")
        try:
            return full_path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read receipt {receipt_path}: {e}")

    def delete(self, receipt_path: str) -> bool:
        """
        Delete a stored receipt.

        Returns:
            True if a file was removed, False if it was already gone
        """
        full_path = self.resolve(receipt_path)
        try:
            full_path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete receipt {receipt_path}: {e}")
        logger.info("receipt_deleted", receipt_path=receipt_path)
        return True
