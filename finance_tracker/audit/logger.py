"""
Audit Logger

DESIGN DECISION: Every storage mutation is logged.
This provides:
1. Traceability of changes to the ledger
2. Debugging capability when input is rejected or the database fails

The audit logger:
- Never raises into the operation that is being audited
- Emits one structured "audit_event" line per event
"""

import logging
from typing import Optional

import structlog

from finance_tracker.models.audit import AuditEvent, AuditSeverity


def _configure_structlog(json_output: bool) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Configuration may change after loggers are created
        cache_logger_on_first_use=False,
    )


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Set the package log level and the structlog renderer.

    Meant for the application entry point. Root handlers are left
    alone; attaching them is the host application's job.
    Safe to call more than once; the last call wins.
    """
    logging.getLogger("finance_tracker").setLevel(
        getattr(logging, level.upper(), logging.INFO)
    )
    _configure_structlog(json_output)


# Structured output by default; handlers and levels are left to the application
_configure_structlog(json_output=True)


class AuditLogger:
    """
    Central audit logging service.

    Storage backends receive one of these by injection. Events are
    written to the structured local log.
    """

    def __init__(self, logger_name: str = "finance_tracker.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Auditing must not break the storage operation
            logging.getLogger(__name__).warning(
                "Could not write audit event %s: %s", event.event_id, e
            )
            return False

        return True


def get_audit_logger(audit_logger: Optional[AuditLogger] = None) -> AuditLogger:
    """Return the given logger, or a fresh default one."""
    return audit_logger or AuditLogger()
