"""
Abstract Storage Interface

We define abstract interfaces for storage operations.
This allows us to:
1. Keep the JSON documents today and move to a real database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple: full-list reads, insert, and
delete by id. There is no update operation.

KNOWN CONSTRAINT: the document stores read the whole document and
overwrite it on every mutation. There is no locking, so two concurrent
writers lose one of the updates (last writer wins). This is accepted
for a single-user tool.
"""

from abc import ABC, abstractmethod
from typing import Optional

from meal_tracker.models.expense import Expense, Holiday


class DocumentBackend(ABC):
    """
    Reads and writes one whole JSON document.

    Stores receive a backend instead of a path, so the same store code
    runs against a file in production and a dict in tests.
    """

    @abstractmethod
    def read(self) -> dict:
        """
        Return the current document.

        Raises:
            StorageError: If the document cannot be read or parsed
        """
        pass

    @abstractmethod
    def write(self, document: dict) -> None:
        """
        Replace the document wholesale.

        Raises:
            StorageError: If the document cannot be written
        """
        pass


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def list_expenses(self) -> list[Expense]:
        """
        Return every stored expense in stored (insertion) order.

        Raises:
            StorageError: If the store cannot be read
        """
        pass

    @abstractmethod
    def get_expense(self, expense_id: str) -> Optional[Expense]:
        """
        Retrieve an expense by its id.

        Returns:
            The expense if found, None otherwise
        """
        pass

    @abstractmethod
    def add_expense(self, expense: Expense) -> Expense:
        """
        Append an expense.

        Raises:
            DuplicateError: If the id is already present
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete_expense(self, expense_id: str) -> Expense:
        """
        Remove an expense by id.

        Returns:
            The removed expense

        Raises:
            NotFoundError: If no expense has this id
            StorageError: If the write fails
        """
        pass


class HolidayStorageInterface(ABC):
    """Abstract interface for the public holiday list."""

    @abstractmethod
    def list_holidays(self) -> list[Holiday]:
        pass

    @abstractmethod
    def add_holiday(self, holiday: Holiday) -> Holiday:
        pass

    @abstractmethod
    def delete_holiday(self, holiday_id: str) -> Holiday:
        """
        Remove a holiday by id.

        Raises:
            NotFoundError: If no holiday has this id
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
