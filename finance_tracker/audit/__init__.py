"""Audit logging package."""

from finance_tracker.audit.logger import AuditLogger, configure_logging, get_audit_logger

__all__ = ["AuditLogger", "configure_logging", "get_audit_logger"]
