"""
In-Memory Storage Implementation

Holds every record category in a process-local list. Data disappears
with the process, which is exactly what tests and demos want.

Each category keeps its own identifier counter, starting at 1 and never
reused, even after deletes.

Operations contain no await points, so under asyncio each one runs to
completion without interleaving with another.
"""

from typing import Callable, Generic, Optional, Type, TypeVar

from finance_tracker.audit import AuditLogger, get_audit_logger
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.records import Expense, RecordCategory, Salary
from finance_tracker.services.storage.interface import (
    FinanceStorageInterface,
    InvalidRecordError,
    NotFoundError,
    RecordData,
    RegionalExpenseStorageInterface,
)
from finance_tracker.services.storage.normalize import (
    prepare_expense,
    prepare_expense_changes,
    prepare_salary,
    prepare_salary_changes,
)


RecordT = TypeVar("RecordT", Salary, Expense)


class _Collection(Generic[RecordT]):
    """An ordered list of records plus its identifier counter."""

    def __init__(self, category: RecordCategory, model: Type[RecordT]):
        self.category = category
        self.model = model
        self.records: list[RecordT] = []
        self._next_id = 1

    def allocate_id(self) -> int:
        record_id = self._next_id
        self._next_id += 1
        return record_id

    def index_of(self, record_id: int) -> Optional[int]:
        for index, record in enumerate(self.records):
            if record.id == record_id:
                return index
        return None


class InMemoryStorage(FinanceStorageInterface, RegionalExpenseStorageInterface):
    """
    In-memory implementation of every storage capability.

    Each instance owns its data; two instances never share records.
    """

    backend_name = "memory"

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit = get_audit_logger(audit_logger)
        self._salaries: _Collection[Salary] = _Collection(RecordCategory.SALARY, Salary)
        self._expenses: _Collection[Expense] = _Collection(RecordCategory.EXPENSE, Expense)
        self._regional_expenses: _Collection[Expense] = _Collection(
            RecordCategory.REGIONAL_EXPENSE, Expense
        )

    # ------------------------------------------------------------------
    # Generic operations
    # ------------------------------------------------------------------

    def _list(self, collection: _Collection[RecordT]) -> list[RecordT]:
        return sorted(collection.records, key=lambda r: (r.created_at, r.id))

    def _add(
        self,
        collection: _Collection[RecordT],
        prepare: Callable[[RecordData], dict],
        data: RecordData,
    ) -> RecordT:
        try:
            values = prepare(data)
        except InvalidRecordError as e:
            self._audit.log(AuditEventBuilder.record_rejected(
                collection.category, self.backend_name, e.fields, str(e),
            ))
            raise

        record = collection.model(id=collection.allocate_id(), **values)
        collection.records.append(record)

        self._audit.log(AuditEventBuilder.record_created(
            collection.category, record.id, self.backend_name, amount=record.amount,
        ))
        return record

    def _update(
        self,
        collection: _Collection[RecordT],
        prepare_changes: Callable[[RecordData], dict],
        record_id: int,
        data: RecordData,
    ) -> RecordT:
        try:
            changes = prepare_changes(data)
        except InvalidRecordError as e:
            self._audit.log(AuditEventBuilder.record_rejected(
                collection.category, self.backend_name, e.fields, str(e), record_id=record_id,
            ))
            raise

        index = collection.index_of(record_id)
        if index is None:
            self._audit.log(AuditEventBuilder.record_not_found(
                collection.category, record_id, self.backend_name,
            ))
            raise NotFoundError(collection.category, record_id)

        # Changes are already validated, so a shallow merge is enough
        updated = collection.records[index].model_copy(update=changes)
        collection.records[index] = updated

        self._audit.log(AuditEventBuilder.record_updated(
            collection.category, record_id, self.backend_name, list(changes),
        ))
        return updated

    def _delete(self, collection: _Collection[RecordT], record_id: int) -> bool:
        index = collection.index_of(record_id)
        if index is None:
            return False

        del collection.records[index]
        self._audit.log(AuditEventBuilder.record_deleted(
            collection.category, record_id, self.backend_name,
        ))
        return True

    # ------------------------------------------------------------------
    # Salaries
    # ------------------------------------------------------------------

    async def list_salaries(self) -> list[Salary]:
        return self._list(self._salaries)

    async def add_salary(self, data: RecordData) -> Salary:
        return self._add(self._salaries, prepare_salary, data)

    async def update_salary(self, salary_id: int, data: RecordData) -> Salary:
        return self._update(self._salaries, prepare_salary_changes, salary_id, data)

    async def delete_salary(self, salary_id: int) -> bool:
        return self._delete(self._salaries, salary_id)

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    async def list_expenses(self) -> list[Expense]:
        return self._list(self._expenses)

    async def add_expense(self, data: RecordData) -> Expense:
        return self._add(self._expenses, prepare_expense, data)

    async def update_expense(self, expense_id: int, data: RecordData) -> Expense:
        return self._update(self._expenses, prepare_expense_changes, expense_id, data)

    async def delete_expense(self, expense_id: int) -> bool:
        return self._delete(self._expenses, expense_id)

    # ------------------------------------------------------------------
    # Regional expenses
    # ------------------------------------------------------------------

    async def list_regional_expenses(self) -> list[Expense]:
        return self._list(self._regional_expenses)

    async def add_regional_expense(self, data: RecordData) -> Expense:
        return self._add(
            self._regional_expenses,
            lambda d: prepare_expense(d, RecordCategory.REGIONAL_EXPENSE),
            data,
        )

    async def update_regional_expense(self, expense_id: int, data: RecordData) -> Expense:
        return self._update(
            self._regional_expenses,
            lambda d: prepare_expense_changes(d, RecordCategory.REGIONAL_EXPENSE),
            expense_id,
            data,
        )

    async def delete_regional_expense(self, expense_id: int) -> bool:
        return self._delete(self._regional_expenses, expense_id)

    def clear(self) -> None:
        """Drop every record. Identifier counters keep counting."""
        self._salaries.records.clear()
        self._expenses.records.clear()
        self._regional_expenses.records.clear()
