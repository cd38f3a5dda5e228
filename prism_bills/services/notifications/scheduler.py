"""
Notification Scheduler

Scans the stored bills on a fixed cadence (hourly by default, and once
immediately on start) and raises local notifications for:
- overdue bills
- bills due today
- bills due in exactly N days, for N in the user's reminder days

STATES:
- idle:   permission missing/denied or notifications disabled; every scan
          is a no-op
- active: permission granted and settings.notifications_enabled is true

DESIGN DECISION: The scheduler is stateless across scans. It does not
remember what it already sent; every notification carries the bill id as
its tag and the display layer replaces by tag. If the app is not running
when a bill crosses a reminder day, that reminder is simply missed (no
backfill).
"""

import asyncio
from contextlib import suppress
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from prism_bills.audit import AuditLogger, get_audit_logger
from prism_bills.config import get_settings
from prism_bills.models.bill import DEFAULT_REMINDER_DAYS, Bill
from prism_bills.models.notification import BillNotification, NotificationKind
from prism_bills.queries.urgency import days_until_due
from prism_bills.services.notifications.interface import (
    LogNotifier,
    NotifierInterface,
)

if TYPE_CHECKING:
    from prism_bills.gateway import BillGateway


class SchedulerState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


def _format_amount(amount: Decimal, currency_symbol: str) -> str:
    return f"{currency_symbol}{amount:,.2f}"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def notification_for(
    bill: Bill,
    today: date,
    reminder_days: Iterable[int] = DEFAULT_REMINDER_DAYS,
    currency_symbol: str = "$",
) -> Optional[BillNotification]:
    """The single notification a bill deserves today, if any."""
    if bill.paid:
        return None

    days = days_until_due(bill.due_date, today)
    amount = _format_amount(bill.amount, currency_symbol)
    tag = str(bill.id)

    if days < 0:
        return BillNotification(
            tag=tag,
            bill_id=bill.id,
            kind=NotificationKind.OVERDUE,
            title=f"Overdue: {bill.name}",
            body=f"{bill.name} was due {_plural(-days, 'day')} ago. Amount: {amount}",
            days_until_due=days,
            require_interaction=True,
        )
    if days == 0:
        return BillNotification(
            tag=tag,
            bill_id=bill.id,
            kind=NotificationKind.DUE_TODAY,
            title=f"Due Today: {bill.name}",
            body=f"Amount: {amount}",
            days_until_due=0,
        )
    if days in set(reminder_days):
        return BillNotification(
            tag=tag,
            bill_id=bill.id,
            kind=NotificationKind.UPCOMING,
            title=f"Upcoming Bill: {bill.name}",
            body=f"Due in {_plural(days, 'day')}. Amount: {amount}",
            days_until_due=days,
        )
    return None


def build_notifications(
    bills: Iterable[Bill],
    today: date,
    reminder_days: Iterable[int] = DEFAULT_REMINDER_DAYS,
    currency_symbol: str = "$",
) -> list[BillNotification]:
    """At most one notification per unpaid bill, in collection order."""
    reminder_days = set(reminder_days)
    notifications = []
    for bill in bills:
        notification = notification_for(bill, today, reminder_days, currency_symbol)
        if notification is not None:
            notifications.append(notification)
    return notifications


class NotificationScheduler:
    """
    Periodically turns the stored bills into local notifications.

    Usage (inside a running event loop):
        scheduler = NotificationScheduler(gateway)
        scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        gateway: "BillGateway",
        notifier: Optional[NotifierInterface] = None,
        interval_seconds: Optional[float] = None,
        today_provider: Optional[Callable[[], date]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._gateway = gateway
        self._notifier = notifier or LogNotifier()
        self._interval = interval_seconds or get_settings().notifications.check_interval_seconds
        self._today = today_provider or date.today
        self._audit = audit_logger or get_audit_logger()
        self._currency_symbol = get_settings().app.currency_symbol

        self._state = SchedulerState.IDLE
        self._permission: Optional[bool] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def activate(self) -> SchedulerState:
        """
        Move to ACTIVE if allowed.

        Permission is requested only once per scheduler; a denial (or a
        platform without notifications) keeps the scheduler IDLE for good.
        """
        if self._permission is None:
            try:
                self._permission = bool(self._notifier.request_permission())
                reason = "denied"
            except Exception as e:
                self._permission = False
                reason = f"unavailable: {e}"
            if not self._permission:
                self._audit.log_permission_denied(reason)

        enabled = self._gateway.get_settings().notifications_enabled
        self._state = (
            SchedulerState.ACTIVE if self._permission and enabled else SchedulerState.IDLE
        )
        return self._state

    def scan(self, today: Optional[date] = None) -> list[BillNotification]:
        """
        Scan all bills once and show the notifications due today.

        Returns:
            The notifications that were shown ([] when idle)
        """
        if self._state != SchedulerState.ACTIVE:
            return []

        document = self._gateway.load()
        if not document.settings.notifications_enabled:
            self._state = SchedulerState.IDLE
            return []

        notifications = build_notifications(
            document.bills,
            today or self._today(),
            document.settings.reminder_days,
            self._currency_symbol,
        )

        shown = []
        for notification in notifications:
            try:
                self._notifier.show(notification)
            except Exception as e:
                self._audit.log_notification_failed(notification.bill_id, str(e))
                continue
            self._audit.log_notification_shown(
                notification.bill_id,
                notification.kind.value,
                notification.days_until_due,
            )
            shown.append(notification)
        return shown

    async def run(self) -> None:
        """Scan now, then every interval, until cancelled."""
        while True:
            self.activate()
            self.scan()
            await asyncio.sleep(self._interval)

    def start(self) -> asyncio.Task:
        """
        Start the periodic scan on the running event loop.

        Calling start() while already running returns the existing task.
        """
        if self.is_running:
            return self._task
        self._task = asyncio.get_running_loop().create_task(self.run())
        self._audit.log_scheduler_started(self._interval)
        return self._task

    async def stop(self) -> None:
        """Cancel the periodic scan and return to IDLE."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
            self._audit.log_scheduler_stopped()
        self._state = SchedulerState.IDLE
