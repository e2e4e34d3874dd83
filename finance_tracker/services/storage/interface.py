"""
Abstract Storage Interfaces

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Use a relational database in production
2. Use in-memory storage for tests and demos
3. Keep callers (an HTTP layer, a UI) decoupled from the backend

Regional expenses are a separate capability. A backend that cannot
store them simply does not implement RegionalExpenseStorageInterface,
so the gap shows up when the storage is constructed, not when a
request happens to touch it.

Both backends follow one failure discipline:
- update of a missing id raises NotFoundError
- delete of a missing id returns False
- invalid input raises InvalidRecordError
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping

from finance_tracker.models.records import Expense, RecordCategory, Salary


RecordData = Mapping[str, Any]


class FinanceStorageInterface(ABC):
    """
    Abstract interface for salary and expense storage.

    Any storage implementation (SQL, in-memory, etc.)
    must implement these methods.
    """

    # ------------------------------------------------------------------
    # Salaries
    # ------------------------------------------------------------------

    @abstractmethod
    async def list_salaries(self) -> list[Salary]:
        """
        List all salary entries.

        Returns:
            Salaries ordered by creation time ascending (ties by id)
        """
        pass

    @abstractmethod
    async def add_salary(self, data: RecordData) -> Salary:
        """
        Add a salary entry.

        Args:
            data: Salary fields; omitted fields get defaults

        Returns:
            The stored salary with a fresh id and creation timestamp

        Raises:
            InvalidRecordError: If a field cannot be coerced
        """
        pass

    @abstractmethod
    async def update_salary(self, salary_id: int, data: RecordData) -> Salary:
        """
        Update some fields of a salary entry.

        Args:
            salary_id: The salary's identifier
            data: Fields to change; anything omitted stays as it is

        Returns:
            The updated salary

        Raises:
            NotFoundError: If no salary has this id
            InvalidRecordError: If a field cannot be coerced
        """
        pass

    @abstractmethod
    async def delete_salary(self, salary_id: int) -> bool:
        """
        Delete a salary entry.

        Returns:
            True if a salary was removed, False if none had this id
        """
        pass

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    @abstractmethod
    async def list_expenses(self) -> list[Expense]:
        """
        List all expenses.

        Returns:
            Expenses ordered by creation time ascending (ties by id)
        """
        pass

    @abstractmethod
    async def add_expense(self, data: RecordData) -> Expense:
        """
        Add an expense.

        The creation timestamp is the expense's own date when one is
        supplied, otherwise the current time.

        Raises:
            InvalidRecordError: If amount/category are missing or invalid
        """
        pass

    @abstractmethod
    async def update_expense(self, expense_id: int, data: RecordData) -> Expense:
        """
        Update some fields of an expense.

        The creation timestamp is left untouched, even when the date
        changes.

        Raises:
            NotFoundError: If no expense has this id
            InvalidRecordError: If a field cannot be coerced
        """
        pass

    @abstractmethod
    async def delete_expense(self, expense_id: int) -> bool:
        """
        Delete an expense.

        Returns:
            True if an expense was removed, False if none had this id
        """
        pass


class RegionalExpenseStorageInterface(ABC):
    """
    Abstract interface for the regional expense collection.

    Same semantics as the expense operations, but a separate
    collection with its own identifier sequence.
    """

    @abstractmethod
    async def list_regional_expenses(self) -> list[Expense]:
        """
        List all regional expenses.

        Returns:
            Regional expenses ordered by creation time ascending (ties by id)
        """
        pass

    @abstractmethod
    async def add_regional_expense(self, data: RecordData) -> Expense:
        """
        Add a regional expense.

        Args:
            data: Same fields as an expense; amount and category are required

        Returns:
            The stored record with its id from the regional sequence

        Raises:
            InvalidRecordError: If amount/category are missing or invalid
        """
        pass

    @abstractmethod
    async def update_regional_expense(self, expense_id: int, data: RecordData) -> Expense:
        """
        Update some fields of a regional expense.

        The creation timestamp is left untouched, even when the date
        changes.

        Raises:
            NotFoundError: If no regional expense has this id
            InvalidRecordError: If a field cannot be coerced
        """
        pass

    @abstractmethod
    async def delete_regional_expense(self, expense_id: int) -> bool:
        """
        Delete a regional expense.

        Returns:
            True if a regional expense was removed, False if none had this id
        """
        pass


def supports_regional_expenses(storage: object) -> bool:
    """True if the storage can hold regional expenses."""
    return isinstance(storage, RegionalExpenseStorageInterface)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""

    def __init__(self, category: RecordCategory, record_id: int):
        self.category = category
        self.record_id = record_id
        label = category.value.replace("_", " ").capitalize()
        super().__init__(f"{label} with id {record_id} not found")


class InvalidRecordError(StorageError):
    """Input could not be coerced into a valid record."""

    def __init__(self, category: RecordCategory, fields: list[str], message: str):
        self.category = category
        self.fields = fields
        super().__init__(f"Invalid {category.value} data ({', '.join(fields)}): {message}")


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class UnsupportedCapabilityError(StorageError):
    """The configured backend does not offer the requested capability."""
    pass
