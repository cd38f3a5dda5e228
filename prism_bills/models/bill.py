"""
Core Data Models for Prism Bills

These models define the schemas for everything stored in the bill document.
They are designed to:
1. Round-trip through the persisted JSON document (camelCase keys)
2. Accept the loose values a form layer hands over (amount strings, etc.)
3. Enforce the paid / paid_date invariant on every bill

DESIGN DECISION: Python code uses snake_case attributes while the stored
document keeps camelCase keys. Both spellings are accepted on input.
"""

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def coerce_decimal(value: Any) -> Decimal:
    """
    Convert a loosely typed amount to Decimal.

    Unparsable values (empty strings, text, None) become 0 rather than
    failing; the form layer owns real input validation.
    """
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return result if result.is_finite() else Decimal("0")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class RecurrenceRule(str, Enum):
    """How often a bill repeats."""
    NONE = "none"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"


class AccountType(str, Enum):
    """Kinds of accounts a bill can be paid from."""
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    OTHER = "other"


# Suggested (not enforced) bill categories offered by the bill form.
SUGGESTED_CATEGORIES = (
    "Housing",
    "Utilities",
    "Insurance",
    "Subscriptions",
    "Transportation",
    "Food",
    "Healthcare",
    "Entertainment",
    "Education",
    "Other",
)


# =============================================================================
# BASE MODEL
# =============================================================================

class DocumentModel(BaseModel):
    """Base for every model persisted inside the bill document."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_document_dict(self) -> dict[str, Any]:
        """JSON-compatible dict using the stored (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# BILLS
# =============================================================================

class NewBill(DocumentModel):
    """
    Payload for creating a bill.

    Carries everything the user (or the recurrence generator) supplies.
    Identity, payment state and timestamps are assigned on insertion.
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Bill label, e.g. 'Rent'"
    )
    amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount in currency units"
    )
    due_date: date = Field(
        ...,
        description="Calendar date the bill is due"
    )
    recurring: RecurrenceRule = Field(
        default=RecurrenceRule.NONE,
        description="Repeat cadence"
    )
    category: str = Field(
        default="",
        max_length=100,
        description="Free-form category (see SUGGESTED_CATEGORIES)"
    )
    account_id: Optional[UUID] = Field(
        default=None,
        description="Account this bill is paid from (weak reference)"
    )

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v: Any) -> Decimal:
        return coerce_decimal(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def strip_time_component(cls, v: Any) -> Any:
        """Accept datetimes and ISO datetime strings; keep only the date."""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and len(v) > 10 and v[10] in ("T", " "):
            return v[:10]
        return v

    @field_validator("recurring", mode="before")
    @classmethod
    def default_recurrence(cls, v: Any) -> Any:
        if v is None or v == "":
            return RecurrenceRule.NONE
        return v

    @field_validator("account_id", mode="before")
    @classmethod
    def empty_account_is_unlinked(cls, v: Any) -> Any:
        # The bill form sends "" for "No account"
        if v == "":
            return None
        return v


class Bill(NewBill):
    """
    A stored bill.

    CRITICAL: paid and paid_date move together. A paid bill always has a
    paid_date and an unpaid bill never has one.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique bill ID (immutable)"
    )
    paid: bool = Field(
        default=False,
        description="Has this bill been paid?"
    )
    paid_date: Optional[datetime] = Field(
        default=None,
        description="When the bill was marked paid"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the bill was created (immutable)"
    )

    @model_validator(mode="after")
    def validate_payment_state(self) -> "Bill":
        if self.paid and self.paid_date is None:
            raise ValueError("A paid bill must have a paid date")
        if not self.paid and self.paid_date is not None:
            raise ValueError("An unpaid bill cannot have a paid date")
        return self

    def to_new_bill(self) -> NewBill:
        """Creation payload cloned from this bill."""
        return NewBill(
            name=self.name,
            amount=self.amount,
            due_date=self.due_date,
            recurring=self.recurring,
            category=self.category,
            account_id=self.account_id,
        )


# =============================================================================
# ACCOUNTS
# =============================================================================

class NewAccount(DocumentModel):
    """Payload for creating an account."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Account label"
    )
    type: AccountType = Field(
        default=AccountType.CHECKING,
        description="Account type"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Current balance (credit accounts may be negative)"
    )

    @field_validator("balance", mode="before")
    @classmethod
    def parse_balance(cls, v: Any) -> Decimal:
        return coerce_decimal(v)


class Account(NewAccount):
    """A stored account. Accounts own nothing about bills."""

    id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# SETTINGS & DOCUMENT
# =============================================================================

DEFAULT_REMINDER_DAYS = (1, 3, 7)


class TrackerSettings(DocumentModel):
    """User-facing settings stored with the bills."""

    notifications_enabled: bool = Field(
        default=True,
        description="Send local notifications for due/overdue bills"
    )
    reminder_days: list[int] = Field(
        default_factory=lambda: list(DEFAULT_REMINDER_DAYS),
        description="Days before the due date at which to remind"
    )

    @field_validator("reminder_days")
    @classmethod
    def normalize_reminder_days(cls, v: list[int]) -> list[int]:
        """Ordered set: sorted, no duplicates, no negative offsets."""
        if any(day < 0 for day in v):
            raise ValueError("Reminder days cannot be negative")
        return sorted(set(v))


class BillDocument(DocumentModel):
    """
    The aggregate root: everything the tracker persists.

    The whole document is rewritten after every mutation.
    """

    bills: list[Bill] = Field(default_factory=list)
    accounts: list[Account] = Field(default_factory=list)
    settings: TrackerSettings = Field(default_factory=TrackerSettings)

    def find_bill(self, bill_id: UUID) -> Optional[int]:
        """Index of the bill with this id, or None."""
        for index, bill in enumerate(self.bills):
            if bill.id == bill_id:
                return index
        return None

    def find_account(self, account_id: UUID) -> Optional[int]:
        """Index of the account with this id, or None."""
        for index, account in enumerate(self.accounts):
            if account.id == account_id:
                return index
        return None
