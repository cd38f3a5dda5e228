"""
Shared fixtures.

Nothing here touches the real clock or the real data directory:
"today" and the gateway clock are fixed, and the store is in memory.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from prism_bills.audit import AuditLogger
from prism_bills.gateway import BillGateway
from prism_bills.models.bill import Bill, RecurrenceRule
from prism_bills.services.notifications import NotifierInterface
from prism_bills.services.storage import InMemoryDocumentStore


FIXED_NOW = datetime(2024, 3, 10, 9, 30, tzinfo=timezone.utc)


class RecordingNotifier(NotifierInterface):
    """Notifier that records what it was asked to show."""

    def __init__(self, granted=True, fail=False):
        self.granted = granted
        self.fail = fail
        self.permission_requests = 0
        self.shown = []

    def request_permission(self):
        self.permission_requests += 1
        return self.granted

    def show(self, notification):
        if self.fail:
            raise RuntimeError("display unavailable")
        self.shown.append(notification)


@pytest.fixture
def today():
    return date(2024, 3, 10)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def audit_logger():
    return AuditLogger(history_size=200)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def gateway(store, audit_logger, clock):
    return BillGateway(store=store, audit_logger=audit_logger, clock=clock)


@pytest.fixture
def make_bill():
    """Factory for stored bills with sensible defaults."""
    def _make(
        name="Electricity",
        amount="100",
        due_date=date(2024, 3, 15),
        paid=False,
        recurring=RecurrenceRule.NONE,
        **kwargs,
    ):
        return Bill(
            name=name,
            amount=Decimal(str(amount)),
            due_date=due_date,
            paid=paid,
            paid_date=FIXED_NOW if paid else None,
            recurring=recurring,
            **kwargs,
        )
    return _make
