"""
Record Models for Finance Tracker

Two families of models live here:
1. Stored records (Salary, Expense) - what a storage backend returns
2. Input models (SalaryCreate, SalaryUpdate, ...) - what callers send in

DESIGN DECISION: Coercion happens in the input models, once.
Callers may send amounts as numeric strings and dates as ISO strings
(they usually come straight from a JSON request body). Both backends
validate through the same models, so an amount is a float and a date is
an aware UTC datetime no matter which backend stored it.

Invalid input is rejected here rather than stored as a sentinel.
"""

import math
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class RecordCategory(str, Enum):
    """
    Record categories.

    Each category has its own collection and its own identifier sequence.
    """
    SALARY = "salary"
    EXPENSE = "expense"
    REGIONAL_EXPENSE = "regional_expense"


# =============================================================================
# COERCION HELPERS
# =============================================================================

def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coerce_amount(value: Any) -> float:
    """
    Convert a monetary amount to float.

    Accepts ints, floats, Decimals and numeric strings ("150.5").
    Rejects booleans, blank strings, NaN and infinities.
    """
    if isinstance(value, bool):
        raise ValueError("amount must be a number, not a boolean")

    if isinstance(value, (int, float, Decimal)):
        try:
            result = float(value)
        except OverflowError:
            raise ValueError("amount must be a finite number") from None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("amount must not be blank")
        try:
            result = float(text)
        except ValueError:
            raise ValueError(f"amount is not numeric: {value!r}") from None
    else:
        raise ValueError(f"amount must be a number, got {type(value).__name__}")

    if not math.isfinite(result):
        raise ValueError("amount must be a finite number")
    return result


def coerce_timestamp(value: Any) -> datetime:
    """
    Convert a date-like value to an aware UTC datetime.

    Accepts datetime, date and ISO-8601 strings ("2024-01-15",
    "2024-01-15T10:30:00Z", "2024-01-15T10:30:00+05:30").
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"not an ISO-8601 date: {value!r}") from None
        return ensure_utc(parsed)
    raise ValueError(f"date must be a date or ISO string, got {type(value).__name__}")


def _current_year() -> int:
    return utc_now().year


# =============================================================================
# STORED RECORDS
# =============================================================================

class _StoredRecord(BaseModel):
    """Fields shared by every stored record."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int = Field(..., description="Identifier, unique within its category")
    amount: float = Field(..., description="Monetary amount")
    date: datetime = Field(..., description="Effective date (UTC)")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")

    @field_validator("date", "created_at")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        # Some stores (SQLite) hand back naive datetimes
        return ensure_utc(v)


class Salary(_StoredRecord):
    """A salary entry."""

    month: str = Field(..., description="Month label, e.g. 'Jan'")
    year: int = Field(..., description="Calendar year")
    notes: str = Field(default="", description="Free-text note")

    @field_validator("notes", mode="before")
    @classmethod
    def notes_default(cls, v: Any) -> Any:
        return "" if v is None else v


class Expense(_StoredRecord):
    """
    An expense entry.

    Regional expenses share this shape; they differ only in which
    collection (and identifier sequence) holds them.
    """

    category: str = Field(..., description="Category label")
    description: str = Field(default="", description="What the money was spent on")

    @field_validator("description", mode="before")
    @classmethod
    def description_default(cls, v: Any) -> Any:
        return "" if v is None else v


# =============================================================================
# INPUT MODELS
# =============================================================================

class _RecordInput(BaseModel):
    """
    Base for caller-supplied input.

    Unknown keys (including "id" and "created_at") are ignored, and
    None is treated the same as an omitted key.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_none_values(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @field_validator("amount", mode="before", check_fields=False)
    @classmethod
    def validate_amount(cls, v: Any) -> float:
        return coerce_amount(v)

    @field_validator("date", mode="before", check_fields=False)
    @classmethod
    def validate_date(cls, v: Any) -> datetime:
        return coerce_timestamp(v)


class SalaryCreate(_RecordInput):
    """
    Input for adding a salary entry.

    Every omitted field gets a default, so an empty payload is valid.
    """

    amount: float = Field(default=0.0)
    month: str = Field(default="", max_length=20)
    year: int = Field(default_factory=_current_year, ge=1900, le=9999)
    notes: str = Field(default="", max_length=1000)
    date: datetime = Field(default_factory=utc_now)


class SalaryUpdate(_RecordInput):
    """Partial update of a salary entry. Only supplied fields change."""

    amount: Optional[float] = None
    month: Optional[str] = Field(default=None, max_length=20)
    year: Optional[int] = Field(default=None, ge=1900, le=9999)
    notes: Optional[str] = Field(default=None, max_length=1000)
    date: Optional[datetime] = None


class ExpenseCreate(_RecordInput):
    """
    Input for adding an expense (or regional expense).

    Amount and category are required. The date is left as None when
    omitted so callers can tell whether one was supplied.
    """

    amount: float
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=1000)
    date: Optional[datetime] = None


class ExpenseUpdate(_RecordInput):
    """Partial update of an expense. Only supplied fields change."""

    amount: Optional[float] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    date: Optional[datetime] = None
