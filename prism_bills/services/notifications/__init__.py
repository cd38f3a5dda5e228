"""
Notification Services Package

The scheduler decides which bills deserve a notification; notifiers
display them.
"""

from prism_bills.services.notifications.interface import (
    LogNotifier,
    NotificationError,
    NotifierInterface,
)
from prism_bills.services.notifications.scheduler import (
    NotificationScheduler,
    SchedulerState,
    build_notifications,
    notification_for,
)

__all__ = [
    "LogNotifier",
    "NotificationError",
    "NotificationScheduler",
    "NotifierInterface",
    "SchedulerState",
    "build_notifications",
    "notification_for",
]
