"""Services package."""

from prism_bills.services.notifications import (
    LogNotifier,
    NotificationError,
    NotificationScheduler,
    NotifierInterface,
    SchedulerState,
)
from prism_bills.services.storage import (
    DocumentStoreInterface,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    StorageError,
    StorageUnavailableError,
    StorageWriteError,
)

__all__ = [
    # Notification services
    "LogNotifier",
    "NotificationError",
    "NotificationScheduler",
    "NotifierInterface",
    "SchedulerState",
    # Storage services
    "DocumentStoreInterface",
    "InMemoryDocumentStore",
    "JsonFileDocumentStore",
    "StorageError",
    "StorageUnavailableError",
    "StorageWriteError",
]
