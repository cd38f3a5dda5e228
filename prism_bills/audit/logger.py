"""
Audit Logger

DESIGN DECISION: Every document mutation and every absorbed failure is
logged. This provides:
1. Traceability of changes to bills, accounts and settings
2. A visible record of storage and notification failures the engine
   swallows instead of raising

The audit logger:
- Is synchronous, like the rest of the engine
- Keeps an optional bounded history for hosts that display recent activity
"""

from typing import Optional
from uuid import UUID

import structlog

from prism_bills.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Events go to the structured local log. An optional in-memory history
    keeps the most recent events for hosts that want to display them.
    """

    def __init__(self, history_size: int = 0, logger_name: str = "prism_bills.audit"):
        """
        Args:
            history_size: How many recent events to keep in memory.
                          0 disables the history.
            logger_name: Name of the underlying structlog logger.
        """
        self._history_size = history_size
        self._history: list[AuditEvent] = []
        self._logger = structlog.get_logger(logger_name)

    @property
    def history(self) -> list[AuditEvent]:
        """Most recent events, oldest first."""
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at its own severity."""
        log_dict = event.to_log_dict()
        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._history_size:
            self._history.append(event)
            del self._history[:-self._history_size]

    def log_bill_created(self, bill_id: UUID, name: str, amount: str, due_date: str) -> None:
        self.log(AuditEventBuilder.bill_created(bill_id, name, amount, due_date))

    def log_bill_updated(self, bill_id: UUID, fields: list[str]) -> None:
        self.log(AuditEventBuilder.bill_updated(bill_id, fields))

    def log_bill_deleted(self, bill_id: UUID) -> None:
        self.log(AuditEventBuilder.bill_deleted(bill_id))

    def log_payment_status(self, bill_id: UUID, paid: bool) -> None:
        self.log(AuditEventBuilder.payment_status_updated(bill_id, paid))

    def log_recurring_generated(self, count: int, horizon: str) -> None:
        self.log(AuditEventBuilder.recurring_bills_generated(count, horizon))

    def log_account_created(self, account_id: UUID, name: str, account_type: str) -> None:
        self.log(AuditEventBuilder.account_created(account_id, name, account_type))

    def log_account_updated(self, account_id: UUID, fields: list[str]) -> None:
        self.log(AuditEventBuilder.account_updated(account_id, fields))

    def log_account_deleted(self, account_id: UUID, unlinked: list[UUID]) -> None:
        self.log(AuditEventBuilder.account_deleted(account_id))
        if unlinked:
            self.log(AuditEventBuilder.bills_unlinked(account_id, unlinked))

    def log_settings_updated(self, fields: list[str]) -> None:
        self.log(AuditEventBuilder.settings_updated(fields))

    def log_not_found(self, entity_type: str, entity_id: UUID, operation: str) -> None:
        self.log(AuditEventBuilder.entity_not_found(entity_type, entity_id, operation))

    def log_notification_shown(self, bill_id: UUID, kind: str, days_until_due: int) -> None:
        self.log(AuditEventBuilder.notification_shown(bill_id, kind, days_until_due))

    def log_notification_failed(self, bill_id: UUID, error_message: str) -> None:
        self.log(AuditEventBuilder.notification_failed(bill_id, error_message))

    def log_permission_denied(self, reason: str) -> None:
        self.log(AuditEventBuilder.notification_permission_denied(reason))

    def log_scheduler_started(self, interval_seconds: float) -> None:
        self.log(AuditEventBuilder.scheduler_started(interval_seconds))

    def log_scheduler_stopped(self) -> None:
        self.log(AuditEventBuilder.scheduler_stopped())

    def log_storage_read_failed(self, store_key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_read_failed(store_key, error_message))

    def log_storage_write_failed(self, store_key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_write_failed(store_key, error_message))


_default_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Shared process-wide audit logger."""
    global _default_logger
    if _default_logger is None:
        _default_logger = AuditLogger()
    return _default_logger
