"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements JSON documents on local disk, but designed to be swappable.
"""

from meal_tracker.services.storage.interface import (
    DocumentBackend,
    DuplicateError,
    ExpenseStorageInterface,
    HolidayStorageInterface,
    NotFoundError,
    StorageError,
)
from meal_tracker.services.storage.json_documents import (
    InMemoryBackend,
    JsonExpenseStorage,
    JsonFileBackend,
    JsonHolidayStorage,
)
from meal_tracker.services.storage.receipts import (
    ReceiptStore,
    receipt_display_name,
)

__all__ = [
    # Interfaces
    "DocumentBackend",
    "ExpenseStorageInterface",
    "HolidayStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # JSON document implementation
    "InMemoryBackend",
    "JsonExpenseStorage",
    "JsonFileBackend",
    "JsonHolidayStorage",
    # Receipts
    "ReceiptStore",
    "receipt_display_name",
]
