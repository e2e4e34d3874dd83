"""
Storage Construction

There is no module-level storage instance. Whoever needs storage
(an HTTP layer, a script, a test) builds one here and passes it on.
"""

from typing import Optional

import structlog

from finance_tracker.audit import AuditLogger
from finance_tracker.config import Settings, get_settings
from finance_tracker.services.storage.database import Database
from finance_tracker.services.storage.interface import (
    FinanceStorageInterface,
    RegionalExpenseStorageInterface,
    UnsupportedCapabilityError,
    supports_regional_expenses,
)
from finance_tracker.services.storage.memory import InMemoryStorage
from finance_tracker.services.storage.sql import SqlStorage


logger = structlog.get_logger(__name__)


def create_storage(
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> FinanceStorageInterface:
    """
    Build the storage backend selected by STORAGE_BACKEND.

    For the sql backend this verifies connectivity (with retries) and,
    unless STORAGE_CREATE_SCHEMA is false, creates missing tables.

    Raises:
        ConnectionError: If the sql backend cannot reach its database
    """
    settings = settings or get_settings()

    backend = settings.storage.backend
    if backend == "memory":
        logger.info("storage_created", backend="memory")
        return InMemoryStorage(audit_logger=audit_logger)

    database = Database(settings.database)
    database.connect()
    if settings.storage.create_schema:
        database.create_schema()

    logger.info("storage_created", backend="sql", url=database.safe_url)
    return SqlStorage(database, audit_logger=audit_logger)


def create_regional_storage(
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> RegionalExpenseStorageInterface:
    """
    Build a storage that can hold regional expenses.

    Raises:
        UnsupportedCapabilityError: If the configured backend cannot
    """
    storage = create_storage(settings, audit_logger)
    if not supports_regional_expenses(storage):
        raise UnsupportedCapabilityError(
            f"The {type(storage).__name__} backend does not support regional expenses"
        )
    return storage
