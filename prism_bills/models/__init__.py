"""
Data Models Package

This package contains all Pydantic models used in Prism Bills.
Everything stored in the bill document conforms to these schemas.
"""

from prism_bills.models.bill import (
    DEFAULT_REMINDER_DAYS,
    SUGGESTED_CATEGORIES,
    Account,
    AccountType,
    Bill,
    BillDocument,
    NewAccount,
    NewBill,
    RecurrenceRule,
    TrackerSettings,
    coerce_decimal,
    utc_now,
)
from prism_bills.models.notification import (
    BillNotification,
    NotificationKind,
)
from prism_bills.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Document models
    "DEFAULT_REMINDER_DAYS",
    "SUGGESTED_CATEGORIES",
    "Account",
    "AccountType",
    "Bill",
    "BillDocument",
    "NewAccount",
    "NewBill",
    "RecurrenceRule",
    "TrackerSettings",
    "coerce_decimal",
    "utc_now",
    # Notification models
    "BillNotification",
    "NotificationKind",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
