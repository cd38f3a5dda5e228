"""
Notification Display Layer

DESIGN DECISION: The scheduler decides WHAT to notify; a notifier decides
HOW it is shown (desktop toast, browser notification, log line). Notifiers
replace an earlier notification that has the same tag, which is what keeps
hourly rescans from stacking duplicates for one bill.
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from prism_bills.models.notification import BillNotification


class NotifierInterface(ABC):
    """Abstract interface for a platform notification display."""

    @abstractmethod
    def request_permission(self) -> bool:
        """
        Ask the platform for permission to show notifications.

        Returns:
            True if notifications may be shown
        """
        pass

    @abstractmethod
    def show(self, notification: BillNotification) -> None:
        """
        Display a notification, replacing any shown with the same tag.

        Raises:
            NotificationError: If the platform refused to display it
        """
        pass


class NotificationError(Exception):
    """The display layer could not show a notification."""
    pass


class LogNotifier(NotifierInterface):
    """
    Notifier that writes notifications to the structured log.

    Keeps the latest notification per tag, mirroring how a platform
    notification center replaces tagged notifications.
    """

    def __init__(self, granted: bool = True):
        self._granted = granted
        self._displayed: dict[str, BillNotification] = {}
        self._logger = structlog.get_logger("prism_bills.notifications")

    @property
    def displayed(self) -> dict[str, BillNotification]:
        """Currently displayed notifications keyed by tag."""
        return dict(self._displayed)

    def get(self, tag: str) -> Optional[BillNotification]:
        return self._displayed.get(tag)

    def dismiss(self, tag: str) -> None:
        self._displayed.pop(tag, None)

    def request_permission(self) -> bool:
        return self._granted

    def show(self, notification: BillNotification) -> None:
        if not self._granted:
            raise NotificationError("Notification permission not granted")
        replaced = notification.tag in self._displayed
        self._displayed[notification.tag] = notification
        self._logger.info(
            "notification",
            tag=notification.tag,
            kind=notification.kind.value,
            title=notification.title,
            body=notification.body,
            replaced=replaced,
        )
