"""Services package."""

from meal_tracker.services.storage import (
    DocumentBackend,
    DuplicateError,
    ExpenseStorageInterface,
    HolidayStorageInterface,
    InMemoryBackend,
    JsonExpenseStorage,
    JsonFileBackend,
    JsonHolidayStorage,
    NotFoundError,
    ReceiptStore,
    StorageError,
)

__all__ = [
    "DocumentBackend",
    "DuplicateError",
    "ExpenseStorageInterface",
    "HolidayStorageInterface",
    "InMemoryBackend",
    "JsonExpenseStorage",
    "JsonFileBackend",
    "JsonHolidayStorage",
    "NotFoundError",
    "ReceiptStore",
    "StorageError",
]
