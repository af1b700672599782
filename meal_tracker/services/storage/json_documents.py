"""
JSON Document Storage Implementation

Each collection lives in its own JSON document:

    data/expenses.json  ->  {"expenses": [...]}
    data/holidays.json  ->  {"holidays": [...]}

Every mutation reads the full document, changes the list in memory and
writes the full document back.

File writes go to a temporary file in the same directory which then
replaces the target with os.replace, so a crash mid-write never leaves
a truncated document behind.
"""

import json
import os
import tempfile
from copy import deepcopy
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from meal_tracker.logs import get_logger
from meal_tracker.models.expense import Expense, Holiday
from meal_tracker.services.storage.interface import (
    DocumentBackend,
    DuplicateError,
    ExpenseStorageInterface,
    HolidayStorageInterface,
    NotFoundError,
    StorageError,
)


logger = get_logger(__name__)


class JsonFileBackend(DocumentBackend):
    """
    Document backend over a JSON file on disk.

    A missing file is created with `empty_document` on first read.
    """

    def __init__(self, path: Path, empty_document: Optional[dict] = None):
        self._path = Path(path)
        self._empty_document = empty_document or {}

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> dict:
        if not self._path.exists():
            self.write(deepcopy(self._empty_document))
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

    def write(self, document: dict) -> None:
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=str(self._path.parent),
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to write {self._path}: {e}")


class InMemoryBackend(DocumentBackend):
    """Document backend kept in a dict. Used by tests."""

    def __init__(self, document: Optional[dict] = None):
        self._document = deepcopy(document) if document is not None else {}
        self.write_count = 0

    def read(self) -> dict:
        return deepcopy(self._document)

    def write(self, document: dict) -> None:
        self._document = deepcopy(document)
        self.write_count += 1


class _JsonCollection:
    """One named list inside a document."""

    def __init__(self, backend: DocumentBackend, key: str):
        self._backend = backend
        self._key = key

    def load(self) -> list[dict]:
        document = self._backend.read()
        items = document.get(self._key, [])
        if not isinstance(items, list):
            raise StorageError(f"Document key '{self._key}' is not a list")
        return items

    def save(self, items: list[dict]) -> None:
        document = self._backend.read()
        document[self._key] = items
        self._backend.write(document)


class JsonExpenseStorage(ExpenseStorageInterface):
    """
    Expense storage over a JSON document.

    Records are kept in insertion order; callers sort for their view.
    """

    def __init__(self, backend: DocumentBackend):
        self._collection = _JsonCollection(backend, "expenses")

    @classmethod
    def from_path(cls, path: Path) -> "JsonExpenseStorage":
        return cls(JsonFileBackend(path, {"expenses": []}))

    def _parse(self, item: dict) -> Expense:
        try:
            return Expense.model_validate(item)
        except ValidationError as e:
            raise StorageError(f"Malformed expense record {item.get('id')!r}: {e}")

    def list_expenses(self) -> list[Expense]:
        return [self._parse(item) for item in self._collection.load()]

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        for item in self._collection.load():
            if item.get("id") == expense_id:
                return self._parse(item)
        return None

    def add_expense(self, expense: Expense) -> Expense:
        items = self._collection.load()
        if any(item.get("id") == expense.id for item in items):
            raise DuplicateError(f"Expense already exists: {expense.id}")
        items.append(expense.to_document())
        self._collection.save(items)
        logger.info("expense_stored", expense_id=expense.id, count=len(items))
        return expense

    def delete_expense(self, expense_id: str) -> Expense:
        items = self._collection.load()
        for idx, item in enumerate(items):
            if item.get("id") == expense_id:
                removed = self._parse(item)
                del items[idx]
                self._collection.save(items)
                logger.info("expense_removed", expense_id=expense_id, count=len(items))
                return removed
        raise NotFoundError(f"Expense not found: {expense_id}")


class JsonHolidayStorage(HolidayStorageInterface):
    """Holiday storage over a JSON document."""

    def __init__(self, backend: DocumentBackend):
        self._collection = _JsonCollection(backend, "holidays")

    @classmethod
    def from_path(cls, path: Path) -> "JsonHolidayStorage":
        return cls(JsonFileBackend(path, {"holidays": []}))

    def list_holidays(self) -> list[Holiday]:
        try:
            return [Holiday.model_validate(item) for item in self._collection.load()]
        except ValidationError as e:
            raise StorageError(f"Malformed holiday record: {e}")

    def add_holiday(self, holiday: Holiday) -> Holiday:
        items = self._collection.load()
        if any(item.get("id") == holiday.id for item in items):
            raise DuplicateError(f"Holiday already exists: {holiday.id}")
        items.append(holiday.to_document())
        self._collection.save(items)
        return holiday

    def delete_holiday(self, holiday_id: str) -> Holiday:
        items = self._collection.load()
        for idx, item in enumerate(items):
            if item.get("id") == holiday_id:
                removed = Holiday.model_validate(item)
                del items[idx]
                self._collection.save(items)
                return removed
        raise NotFoundError(f"Holiday not found: {holiday_id}")
