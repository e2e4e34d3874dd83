"""Services package."""

from finance_tracker.services.storage import (
    ConnectionError,
    Database,
    FinanceStorageInterface,
    InMemoryStorage,
    InvalidRecordError,
    NotFoundError,
    RegionalExpenseStorageInterface,
    SqlStorage,
    StorageError,
    UnsupportedCapabilityError,
    create_regional_storage,
    create_storage,
    supports_regional_expenses,
)

__all__ = [
    "ConnectionError",
    "Database",
    "FinanceStorageInterface",
    "InMemoryStorage",
    "InvalidRecordError",
    "NotFoundError",
    "RegionalExpenseStorageInterface",
    "SqlStorage",
    "StorageError",
    "UnsupportedCapabilityError",
    "create_regional_storage",
    "create_storage",
    "supports_regional_expenses",
]
