"""
Bill Query Engine

Read-only queries over a bill collection, used by the dashboard widgets
and the bill list. Every function is pure: it never mutates its input and
takes "today" as a parameter.

Filtering always happens before sorting, and sorting is stable so bills
with equal keys keep their stored order.
"""

from calendar import monthrange
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, Field

from prism_bills.models.bill import Account, Bill
from prism_bills.queries.urgency import SOON_MAX_DAYS, days_until_due


class BillFilter(str, Enum):
    """Status filters offered by the bill list."""
    ALL = "all"
    UNPAID = "unpaid"
    PAID = "paid"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"  # unpaid, due within a week


class SortKey(str, Enum):
    """Sort orders offered by the bill list."""
    DUE_DATE = "dueDate"   # earliest first
    AMOUNT = "amount"      # largest first
    NAME = "name"          # alphabetical


class DashboardSummary(BaseModel):
    """Figures shown on the dashboard stat cards."""

    due_this_week: list[Bill] = Field(default_factory=list)
    overdue: list[Bill] = Field(default_factory=list)
    total_upcoming: Decimal = Decimal("0")
    total_balance: Decimal = Decimal("0")
    account_count: int = 0


def end_of_month(day: date) -> date:
    """Last calendar day of the month containing ``day``."""
    return day.replace(day=monthrange(day.year, day.month)[1])


def overdue(bills: Iterable[Bill], today: date) -> list[Bill]:
    """Unpaid bills whose due date has passed."""
    return [
        bill for bill in bills
        if not bill.paid and days_until_due(bill.due_date, today) < 0
    ]


def due_within_days(bills: Iterable[Bill], today: date, days: int) -> list[Bill]:
    """Unpaid bills due between today and ``days`` days from now, inclusive."""
    return [
        bill for bill in bills
        if not bill.paid and 0 <= days_until_due(bill.due_date, today) <= days
    ]


def due_this_week(bills: Iterable[Bill], today: date) -> list[Bill]:
    return due_within_days(bills, today, SOON_MAX_DAYS)


def total_upcoming_this_month(bills: Iterable[Bill], today: date) -> Decimal:
    """Sum of unpaid amounts due from today through the end of this month."""
    month_end = end_of_month(today)
    return sum(
        (bill.amount for bill in bills
         if not bill.paid and today <= bill.due_date <= month_end),
        Decimal("0"),
    )


def bills_on_date(bills: Iterable[Bill], day: date) -> list[Bill]:
    """Bills due on exactly this calendar day, paid or not."""
    return [bill for bill in bills if bill.due_date == day]


def total_account_balance(accounts: Iterable[Account]) -> Decimal:
    return sum((account.balance for account in accounts), Decimal("0"))


def _matches(bill: Bill, bill_filter: BillFilter, today: date) -> bool:
    if bill_filter == BillFilter.UNPAID:
        return not bill.paid
    if bill_filter == BillFilter.PAID:
        return bill.paid
    if bill_filter == BillFilter.OVERDUE:
        return not bill.paid and days_until_due(bill.due_date, today) < 0
    if bill_filter == BillFilter.UPCOMING:
        return not bill.paid and 0 <= days_until_due(bill.due_date, today) <= SOON_MAX_DAYS
    return True


def filter_bills(
    bills: Iterable[Bill],
    bill_filter: BillFilter,
    today: date,
) -> list[Bill]:
    """Apply a status filter. Applying the same filter twice changes nothing."""
    bill_filter = BillFilter(bill_filter)
    return [bill for bill in bills if _matches(bill, bill_filter, today)]


def sort_bills(bills: Iterable[Bill], sort_key: SortKey) -> list[Bill]:
    """Stable sort by the given key."""
    sort_key = SortKey(sort_key)
    if sort_key == SortKey.AMOUNT:
        return sorted(bills, key=lambda bill: bill.amount, reverse=True)
    if sort_key == SortKey.NAME:
        return sorted(bills, key=lambda bill: bill.name.casefold())
    return sorted(bills, key=lambda bill: bill.due_date)


def filter_and_sort(
    bills: Iterable[Bill],
    bill_filter: BillFilter = BillFilter.ALL,
    sort_key: SortKey = SortKey.DUE_DATE,
    today: Optional[date] = None,
) -> list[Bill]:
    """
    Filter, then sort, a bill collection for the bill list.

    Args:
        bills: Bills to query
        bill_filter: Status filter
        sort_key: Sort order
        today: Reference date for the overdue/upcoming filters.
               Required unless the filter is ALL, UNPAID or PAID.
    """
    bill_filter = BillFilter(bill_filter)
    if today is None and bill_filter in (BillFilter.OVERDUE, BillFilter.UPCOMING):
        raise ValueError(f"Filter '{bill_filter.value}' needs a reference date")
    return sort_bills(filter_bills(bills, bill_filter, today), sort_key)


def dashboard_summary(
    bills: Sequence[Bill],
    accounts: Sequence[Account],
    today: date,
) -> DashboardSummary:
    """Everything the dashboard stat cards display, in one pass."""
    return DashboardSummary(
        due_this_week=due_this_week(bills, today),
        overdue=overdue(bills, today),
        total_upcoming=total_upcoming_this_month(bills, today),
        total_balance=total_account_balance(accounts),
        account_count=len(accounts),
    )
