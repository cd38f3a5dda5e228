"""
Audit Models for Prism Bills

Every mutation of the bill document, and every failure the engine absorbs,
is described by an AuditEvent. This provides:
1. Traceability of what changed and when
2. Debugging information when storage or notifications misbehave
3. A record of failures that were deliberately swallowed

DESIGN DECISION: Events are immutable records. Builders below are the only
place event descriptions are written, so wording stays consistent.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from prism_bills.models.bill import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Bills
    BILL_CREATED = "bill_created"
    BILL_UPDATED = "bill_updated"
    BILL_DELETED = "bill_deleted"
    PAYMENT_STATUS_UPDATED = "payment_status_updated"
    RECURRING_BILLS_GENERATED = "recurring_bills_generated"

    # Accounts
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"
    BILLS_UNLINKED = "bills_unlinked"

    # Settings
    SETTINGS_UPDATED = "settings_updated"

    # Lookups that found nothing
    ENTITY_NOT_FOUND = "entity_not_found"

    # Notifications
    NOTIFICATION_SHOWN = "notification_shown"
    NOTIFICATION_FAILED = "notification_failed"
    NOTIFICATION_PERMISSION_DENIED = "notification_permission_denied"
    SCHEDULER_STARTED = "scheduler_started"
    SCHEDULER_STOPPED = "scheduler_stopped"

    # Storage
    STORAGE_READ_FAILED = "storage_read_failed"
    STORAGE_WRITE_FAILED = "storage_write_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'bill', 'account', 'document')"
    )
    entity_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict[str, Any]:
        """Flatten to a dict suitable for structured logging."""
        data = {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "description": self.description,
        }
        if self.entity_type:
            data["entity_type"] = self.entity_type
        if self.entity_id:
            data["entity_id"] = str(self.entity_id)
        if self.details:
            data["details"] = self.details
        if self.error_message:
            data["error_message"] = self.error_message
        return data


class AuditEventBuilder:
    """Factory methods for the events the engine emits."""

    @staticmethod
    def bill_created(bill_id: UUID, name: str, amount: str, due_date: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_CREATED,
            entity_type="bill",
            entity_id=bill_id,
            description=f"Bill '{name}' created",
            details={"amount": amount, "due_date": due_date},
        )

    @staticmethod
    def bill_updated(bill_id: UUID, fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_UPDATED,
            entity_type="bill",
            entity_id=bill_id,
            description="Bill updated",
            details={"fields": fields},
        )

    @staticmethod
    def bill_deleted(bill_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_DELETED,
            entity_type="bill",
            entity_id=bill_id,
            description="Bill deleted",
        )

    @staticmethod
    def payment_status_updated(bill_id: UUID, paid: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_STATUS_UPDATED,
            entity_type="bill",
            entity_id=bill_id,
            description="Bill marked paid" if paid else "Bill marked unpaid",
            details={"paid": paid},
        )

    @staticmethod
    def recurring_bills_generated(count: int, horizon: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_BILLS_GENERATED,
            entity_type="document",
            description=f"Generated {count} recurring bill(s)",
            details={"count": count, "horizon": horizon},
        )

    @staticmethod
    def account_created(account_id: UUID, name: str, account_type: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_id=account_id,
            description=f"Account '{name}' created",
            details={"type": account_type},
        )

    @staticmethod
    def account_updated(account_id: UUID, fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_UPDATED,
            entity_type="account",
            entity_id=account_id,
            description="Account updated",
            details={"fields": fields},
        )

    @staticmethod
    def account_deleted(account_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            entity_type="account",
            entity_id=account_id,
            description="Account deleted",
        )

    @staticmethod
    def bills_unlinked(account_id: UUID, bill_ids: list[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILLS_UNLINKED,
            entity_type="account",
            entity_id=account_id,
            description=f"Unlinked {len(bill_ids)} bill(s) from deleted account",
            details={"bill_ids": [str(bill_id) for bill_id in bill_ids]},
        )

    @staticmethod
    def settings_updated(fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            description="Settings updated",
            details={"fields": fields},
        )

    @staticmethod
    def entity_not_found(entity_type: str, entity_id: UUID, operation: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_NOT_FOUND,
            severity=AuditSeverity.DEBUG,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{operation}: {entity_type} not found",
        )

    @staticmethod
    def notification_shown(bill_id: UUID, kind: str, days_until_due: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_SHOWN,
            entity_type="bill",
            entity_id=bill_id,
            description=f"Notification shown ({kind})",
            details={"kind": kind, "days_until_due": days_until_due},
        )

    @staticmethod
    def notification_failed(bill_id: UUID, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="bill",
            entity_id=bill_id,
            description="Notification could not be displayed",
            error_message=error_message,
        )

    @staticmethod
    def notification_permission_denied(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_PERMISSION_DENIED,
            severity=AuditSeverity.WARNING,
            description="Notifications unavailable; scheduler stays idle",
            details={"reason": reason},
        )

    @staticmethod
    def scheduler_started(interval_seconds: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCHEDULER_STARTED,
            description="Notification scheduler started",
            details={"interval_seconds": interval_seconds},
        )

    @staticmethod
    def scheduler_stopped() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCHEDULER_STOPPED,
            description="Notification scheduler stopped",
        )

    @staticmethod
    def storage_read_failed(store_key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_READ_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="document",
            description=f"Could not read '{store_key}'; using empty document",
            error_message=error_message,
        )

    @staticmethod
    def storage_write_failed(store_key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="document",
            description=f"Could not write '{store_key}'; change kept in memory only",
            error_message=error_message,
        )
