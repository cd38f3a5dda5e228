"""
Urgency Classification

DESIGN DECISION: "today" is always passed in. Nothing in this module reads
the wall clock, so the same inputs always give the same tier.
"""

from datetime import date, datetime
from enum import Enum
from typing import Union

from prism_bills.models.bill import Bill


class UrgencyLevel(str, Enum):
    """How close a bill is to its due date."""
    PAID = "paid"
    OVERDUE = "overdue"
    URGENT = "urgent"      # due within 3 days
    SOON = "soon"          # due within a week
    UPCOMING = "upcoming"


URGENT_MAX_DAYS = 3
SOON_MAX_DAYS = 7

URGENCY_LABELS = {
    UrgencyLevel.PAID: "Paid",
    UrgencyLevel.OVERDUE: "Overdue",
    UrgencyLevel.URGENT: "Due Soon",
    UrgencyLevel.SOON: "This Week",
    UrgencyLevel.UPCOMING: "Upcoming",
}


def as_date(value: Union[date, datetime]) -> date:
    """Drop the time-of-day component, if any."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until_due(due_date: Union[date, datetime], today: Union[date, datetime]) -> int:
    """Civil days from today to the due date (negative once overdue)."""
    return (as_date(due_date) - as_date(today)).days


def classify(bill: Bill, today: date) -> UrgencyLevel:
    """
    Classify a bill into an urgency tier.

    Boundaries are inclusive on the more urgent tier:
    0-3 days is urgent, 4-7 days is soon.
    """
    if bill.paid:
        return UrgencyLevel.PAID

    days = days_until_due(bill.due_date, today)
    if days < 0:
        return UrgencyLevel.OVERDUE
    if days <= URGENT_MAX_DAYS:
        return UrgencyLevel.URGENT
    if days <= SOON_MAX_DAYS:
        return UrgencyLevel.SOON
    return UrgencyLevel.UPCOMING


def urgency_label(level: UrgencyLevel) -> str:
    """Short display label for a tier."""
    return URGENCY_LABELS.get(level, "Unknown")
