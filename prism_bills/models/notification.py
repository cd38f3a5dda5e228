"""
Notification Models

A BillNotification is what the scheduler hands to the display layer.
The tag is the bill id, so a display layer that replaces notifications by
tag shows at most one notification per bill.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from prism_bills.models.bill import utc_now


class NotificationKind(str, Enum):
    """Why a notification was raised."""
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    UPCOMING = "upcoming"


class BillNotification(BaseModel):
    """A single local notification about one bill."""

    tag: str = Field(
        ...,
        description="Replacement key for the display layer (the bill id)"
    )
    bill_id: UUID
    kind: NotificationKind
    title: str
    body: str
    days_until_due: int
    require_interaction: bool = Field(
        default=False,
        description="Keep on screen until dismissed (overdue bills)"
    )
    created_at: datetime = Field(default_factory=utc_now)
