"""
SQL Storage Implementation

Salaries and expenses stored in a relational database through
SQLAlchemy Core. Each operation is one statement in its own
transaction; there is no multi-statement work and no in-process
locking. Two concurrent updates of the same row race at the
database's discretion.

SqlStorage implements FinanceStorageInterface only. Regional expenses
have no table here, so this backend does not claim that capability.
"""

from typing import Any, Callable, Optional, Type, TypeVar

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from finance_tracker.audit import AuditLogger, get_audit_logger
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.records import Expense, RecordCategory, Salary
from finance_tracker.services.storage.database import Database, expenses, salaries
from finance_tracker.services.storage.interface import (
    FinanceStorageInterface,
    InvalidRecordError,
    NotFoundError,
    RecordData,
    StorageError,
)
from finance_tracker.services.storage.normalize import (
    prepare_expense,
    prepare_expense_changes,
    prepare_salary,
    prepare_salary_changes,
)


RecordT = TypeVar("RecordT", Salary, Expense)

# Drivers refuse to bind integers outside the signed 64-bit range
_MAX_ID = 2**63 - 1


def _storable_id(record_id: int) -> bool:
    return -_MAX_ID - 1 <= record_id <= _MAX_ID


class SqlStorage(FinanceStorageInterface):
    """
    Relational implementation of salary and expense storage.

    Identifiers and row ordering come from the database.
    """

    backend_name = "sql"

    def __init__(self, database: Database, audit_logger: Optional[AuditLogger] = None):
        self._db = database
        self._audit = get_audit_logger(audit_logger)

    def _fail(
        self,
        category: RecordCategory,
        operation: str,
        error: SQLAlchemyError,
        record_id: Optional[int] = None,
    ) -> StorageError:
        self._audit.log(AuditEventBuilder.storage_error(
            category, self.backend_name, operation, error, record_id=record_id,
        ))
        return StorageError(f"Failed to {operation} {category.value}: {error}")

    # ------------------------------------------------------------------
    # Generic operations
    # ------------------------------------------------------------------

    def _list(
        self,
        table: Table,
        model: Type[RecordT],
        category: RecordCategory,
    ) -> list[RecordT]:
        query = select(table).order_by(table.c.created_at, table.c.id)
        try:
            with self._db.engine.connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as e:
            raise self._fail(category, "list", e) from e
        return [model.model_validate(dict(row)) for row in rows]

    def _add(
        self,
        table: Table,
        model: Type[RecordT],
        category: RecordCategory,
        prepare: Callable[[RecordData], dict[str, Any]],
        data: RecordData,
    ) -> RecordT:
        try:
            values = prepare(data)
        except InvalidRecordError as e:
            self._audit.log(AuditEventBuilder.record_rejected(
                category, self.backend_name, e.fields, str(e),
            ))
            raise

        statement = insert(table).values(**values).returning(*table.c)
        try:
            with self._db.engine.begin() as conn:
                row = conn.execute(statement).mappings().one()
        except SQLAlchemyError as e:
            raise self._fail(category, "add", e) from e

        record = model.model_validate(dict(row))
        self._audit.log(AuditEventBuilder.record_created(
            category, record.id, self.backend_name, amount=record.amount,
        ))
        return record

    def _update(
        self,
        table: Table,
        model: Type[RecordT],
        category: RecordCategory,
        prepare_changes: Callable[[RecordData], dict[str, Any]],
        record_id: int,
        data: RecordData,
    ) -> RecordT:
        try:
            changes = prepare_changes(data)
        except InvalidRecordError as e:
            self._audit.log(AuditEventBuilder.record_rejected(
                category, self.backend_name, e.fields, str(e), record_id=record_id,
            ))
            raise

        if not _storable_id(record_id):
            statement = None
        elif changes:
            statement = (
                update(table)
                .where(table.c.id == record_id)
                .values(**changes)
                .returning(*table.c)
            )
        else:
            # Nothing to change: still report whether the row exists
            statement = select(table).where(table.c.id == record_id)

        row = None
        if statement is not None:
            try:
                with self._db.engine.begin() as conn:
                    row = conn.execute(statement).mappings().first()
            except SQLAlchemyError as e:
                raise self._fail(category, "update", e, record_id=record_id) from e

        if row is None:
            self._audit.log(AuditEventBuilder.record_not_found(
                category, record_id, self.backend_name,
            ))
            raise NotFoundError(category, record_id)

        self._audit.log(AuditEventBuilder.record_updated(
            category, record_id, self.backend_name, list(changes),
        ))
        return model.model_validate(dict(row))

    def _delete(self, table: Table, category: RecordCategory, record_id: int) -> bool:
        if not _storable_id(record_id):
            return False

        statement = delete(table).where(table.c.id == record_id)
        try:
            with self._db.engine.begin() as conn:
                deleted = conn.execute(statement).rowcount
        except SQLAlchemyError as e:
            raise self._fail(category, "delete", e, record_id=record_id) from e

        if deleted > 0:
            self._audit.log(AuditEventBuilder.record_deleted(
                category, record_id, self.backend_name,
            ))
            return True
        return False

    # ------------------------------------------------------------------
    # Salaries
    # ------------------------------------------------------------------

    async def list_salaries(self) -> list[Salary]:
        return self._list(salaries, Salary, RecordCategory.SALARY)

    async def add_salary(self, data: RecordData) -> Salary:
        return self._add(salaries, Salary, RecordCategory.SALARY, prepare_salary, data)

    async def update_salary(self, salary_id: int, data: RecordData) -> Salary:
        return self._update(
            salaries, Salary, RecordCategory.SALARY, prepare_salary_changes, salary_id, data,
        )

    async def delete_salary(self, salary_id: int) -> bool:
        return self._delete(salaries, RecordCategory.SALARY, salary_id)

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    async def list_expenses(self) -> list[Expense]:
        return self._list(expenses, Expense, RecordCategory.EXPENSE)

    async def add_expense(self, data: RecordData) -> Expense:
        return self._add(expenses, Expense, RecordCategory.EXPENSE, prepare_expense, data)

    async def update_expense(self, expense_id: int, data: RecordData) -> Expense:
        return self._update(
            expenses, Expense, RecordCategory.EXPENSE, prepare_expense_changes, expense_id, data,
        )

    async def delete_expense(self, expense_id: int) -> bool:
        return self._delete(expenses, RecordCategory.EXPENSE, expense_id)
