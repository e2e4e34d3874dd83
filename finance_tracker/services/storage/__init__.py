"""
Storage Services Package

Provides the storage contracts and their two implementations:
an in-memory backend and a relational (SQLAlchemy) backend.
"""

from finance_tracker.services.storage.interface import (
    ConnectionError,
    FinanceStorageInterface,
    InvalidRecordError,
    NotFoundError,
    RegionalExpenseStorageInterface,
    StorageError,
    UnsupportedCapabilityError,
    supports_regional_expenses,
)
from finance_tracker.services.storage.database import Database
from finance_tracker.services.storage.memory import InMemoryStorage
from finance_tracker.services.storage.sql import SqlStorage
from finance_tracker.services.storage.factory import (
    create_regional_storage,
    create_storage,
)

__all__ = [
    # Interfaces
    "FinanceStorageInterface",
    "RegionalExpenseStorageInterface",
    "supports_regional_expenses",
    # Exceptions
    "ConnectionError",
    "InvalidRecordError",
    "NotFoundError",
    "StorageError",
    "UnsupportedCapabilityError",
    # Implementations
    "Database",
    "InMemoryStorage",
    "SqlStorage",
    # Construction
    "create_regional_storage",
    "create_storage",
]
