"""Data models package."""

from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from finance_tracker.models.records import (
    Expense,
    ExpenseCreate,
    ExpenseUpdate,
    RecordCategory,
    Salary,
    SalaryCreate,
    SalaryUpdate,
)

__all__ = [
    # Records
    "Expense",
    "ExpenseCreate",
    "ExpenseUpdate",
    "RecordCategory",
    "Salary",
    "SalaryCreate",
    "SalaryUpdate",
    # Audit
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
