"""
Calendar Queries

Buckets bills into the cells of a month grid. The grid starts on Sunday,
so a month whose first day is a Wednesday gets three empty leading cells.
"""

from calendar import monthrange
from datetime import date
from typing import Iterable

from pydantic import BaseModel, Field

from prism_bills.models.bill import Bill
from prism_bills.queries.bills import bills_on_date


class CalendarDay(BaseModel):
    """One cell of the month grid."""

    day: date
    bills: list[Bill] = Field(default_factory=list)


class CalendarMonth(BaseModel):
    """A whole month grid."""

    year: int
    month: int = Field(ge=1, le=12)
    leading_blank_days: int = Field(
        ge=0,
        le=6,
        description="Empty cells before the 1st in a Sunday-first week"
    )
    days: list[CalendarDay] = Field(default_factory=list)


def month_days(year: int, month: int) -> list[date]:
    """Every date in the given month."""
    last_day = monthrange(year, month)[1]
    return [date(year, month, day) for day in range(1, last_day + 1)]


def bills_for_month(bills: Iterable[Bill], year: int, month: int) -> list[Bill]:
    return [
        bill for bill in bills
        if bill.due_date.year == year and bill.due_date.month == month
    ]


def calendar_month(bills: Iterable[Bill], year: int, month: int) -> CalendarMonth:
    """Build the month grid with each day's bills attached."""
    in_month = bills_for_month(bills, year, month)
    days = month_days(year, month)
    # date.weekday() is Monday=0; shift so Sunday=0
    leading = (days[0].weekday() + 1) % 7
    return CalendarMonth(
        year=year,
        month=month,
        leading_blank_days=leading,
        days=[CalendarDay(day=day, bills=bills_on_date(in_month, day)) for day in days],
    )
