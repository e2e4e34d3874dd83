"""
Record Normalization

Both backends run caller input through these functions before touching
their store, so default-filling and coercion can never drift apart
between them.

Every function returns a plain dict of column values, or raises
InvalidRecordError.
"""

from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

from finance_tracker.models.records import (
    ExpenseCreate,
    ExpenseUpdate,
    RecordCategory,
    SalaryCreate,
    SalaryUpdate,
    coerce_amount,
    coerce_timestamp,
    utc_now,
)
from finance_tracker.services.storage.interface import InvalidRecordError


__all__ = [
    "coerce_amount",
    "coerce_timestamp",
    "prepare_expense",
    "prepare_expense_changes",
    "prepare_salary",
    "prepare_salary_changes",
]


_InputModel = TypeVar("_InputModel", bound=BaseModel)


def _validate(
    model: Type[_InputModel],
    category: RecordCategory,
    data: Any,
) -> _InputModel:
    """Validate caller input, translating pydantic errors."""
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    if not isinstance(data, Mapping):
        raise InvalidRecordError(
            category,
            ["__root__"],
            f"expected a mapping of fields, got {type(data).__name__}",
        )

    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        fields = []
        messages = []
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]) or "__root__"
            fields.append(field)
            messages.append(f"{field}: {error['msg']}")
        raise InvalidRecordError(category, fields, "; ".join(messages)) from e


def prepare_salary(data: Any) -> dict[str, Any]:
    """
    Build the column values for a new salary.

    Omitted fields are filled in; the creation timestamp is always now.
    """
    salary = _validate(SalaryCreate, RecordCategory.SALARY, data)
    values = salary.model_dump()
    values["created_at"] = utc_now()
    return values


def prepare_expense(
    data: Any,
    category: RecordCategory = RecordCategory.EXPENSE,
) -> dict[str, Any]:
    """
    Build the column values for a new expense or regional expense.

    An expense is considered created on its own date when one was
    given; otherwise both its date and creation timestamp are now.
    """
    expense = _validate(ExpenseCreate, category, data)
    values = expense.model_dump()
    now = utc_now()
    if expense.date is None:
        values["date"] = now
        values["created_at"] = now
    else:
        values["created_at"] = expense.date
    return values


def prepare_salary_changes(data: Any) -> dict[str, Any]:
    """Return only the salary fields the caller supplied, coerced."""
    changes = _validate(SalaryUpdate, RecordCategory.SALARY, data)
    return changes.model_dump(exclude_unset=True)


def prepare_expense_changes(
    data: Any,
    category: RecordCategory = RecordCategory.EXPENSE,
) -> dict[str, Any]:
    """
    Return only the expense fields the caller supplied, coerced.

    created_at is never part of the result: a new date does not move
    the creation timestamp.
    """
    changes = _validate(ExpenseUpdate, category, data)
    return changes.model_dump(exclude_unset=True)
