"""
Audit Models for Finance Tracker

Every mutation a storage backend performs is logged for audit purposes.
This provides:
1. Traceability of who-changed-what in the ledger
2. Debugging information when a write is rejected or fails

DESIGN DECISION: Audit events describe storage outcomes, not requests.
A rejected payload and a missed update are events too.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from finance_tracker.models.records import RecordCategory


class AuditEventType(str, Enum):
    """Types of events we audit."""
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    RECORD_NOT_FOUND = "record_not_found"
    RECORD_REJECTED = "record_rejected"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    One storage operation produces at most one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Which record is this about?
    category: RecordCategory = Field(
        ...,
        description="Record category the event relates to"
    )
    record_id: Optional[int] = Field(
        default=None,
        description="Identifier of the record, when one is known"
    )
    backend: str = Field(
        ...,
        description="Name of the storage backend that emitted the event"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "category": self.category.value,
            "record_id": self.record_id,
            "backend": self.backend,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_created(RecordCategory.SALARY, 1, "memory")
        event = AuditEventBuilder.record_not_found(RecordCategory.EXPENSE, 7, "sql")
    """

    @staticmethod
    def record_created(
        category: RecordCategory,
        record_id: int,
        backend: str,
        amount: Optional[float] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            category=category,
            record_id=record_id,
            backend=backend,
            description=f"{category.value} {record_id} created",
            details={"amount": amount} if amount is not None else {},
        )

    @staticmethod
    def record_updated(
        category: RecordCategory,
        record_id: int,
        backend: str,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            category=category,
            record_id=record_id,
            backend=backend,
            description=f"{category.value} {record_id} updated",
            details={"fields": sorted(fields)},
        )

    @staticmethod
    def record_deleted(
        category: RecordCategory,
        record_id: int,
        backend: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            category=category,
            record_id=record_id,
            backend=backend,
            description=f"{category.value} {record_id} deleted",
        )

    @staticmethod
    def record_not_found(
        category: RecordCategory,
        record_id: int,
        backend: str,
        operation: str = "update",
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            category=category,
            record_id=record_id,
            backend=backend,
            description=f"{operation} skipped: {category.value} {record_id} does not exist",
            details={"operation": operation},
        )

    @staticmethod
    def record_rejected(
        category: RecordCategory,
        backend: str,
        fields: list[str],
        error_message: str,
        record_id: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_REJECTED,
            severity=AuditSeverity.WARNING,
            category=category,
            record_id=record_id,
            backend=backend,
            description=f"Invalid {category.value} input rejected",
            details={"fields": sorted(fields)},
            error_message=error_message,
        )

    @staticmethod
    def storage_error(
        category: RecordCategory,
        backend: str,
        operation: str,
        error: Exception,
        record_id: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            category=category,
            record_id=record_id,
            backend=backend,
            description=f"{operation} on {category.value} failed",
            details={
                "operation": operation,
                "error_type": type(error).__name__,
            },
            error_message=str(error),
        )
