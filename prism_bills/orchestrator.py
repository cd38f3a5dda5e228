"""
Application Wiring for Prism Bills

Ties the components together for a host (UI, desktop shell, script):
- one BillGateway over the configured document store
- one NotificationScheduler reading through that same gateway

Both share one audit logger so a host can show a single activity feed.
"""

from pathlib import Path
from typing import Optional, Union

from prism_bills.audit import AuditLogger, get_audit_logger
from prism_bills.gateway import BillGateway
from prism_bills.services.notifications import (
    LogNotifier,
    NotificationScheduler,
    NotifierInterface,
)
from prism_bills.services.storage import (
    DocumentStoreInterface,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
)


def create_app_components(
    data_dir: Optional[Union[str, Path]] = None,
    persistent: bool = True,
    notifier: Optional[NotifierInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> tuple[BillGateway, NotificationScheduler]:
    """
    Factory function to create all application components.

    Args:
        data_dir: Directory for the JSON document store.
                  Defaults to StorageSettings.data_dir.
        persistent: Set to False to keep the document in memory only
                    (demos, tests).
        notifier: Notification display layer. Defaults to LogNotifier.
        audit_logger: Shared audit logger.

    Returns:
        (gateway, scheduler). The scheduler is not started; call
        scheduler.start() from inside the host's event loop.
    """
    audit_logger = audit_logger or get_audit_logger()

    store: DocumentStoreInterface
    if persistent:
        store = JsonFileDocumentStore(data_dir)
    else:
        store = InMemoryDocumentStore()

    gateway = BillGateway(store=store, audit_logger=audit_logger)
    scheduler = NotificationScheduler(
        gateway,
        notifier=notifier or LogNotifier(),
        audit_logger=audit_logger,
    )
    return gateway, scheduler
