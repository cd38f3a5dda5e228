"""
Recurring Bill Generator

Projects future instances of recurring bills and returns only the ones
that are not already in the collection, so regenerating never duplicates
a bill.

DESIGN DECISION: The k-th occurrence is computed from the original due
date (k intervals ahead), never from the previous occurrence. A bill due
on the 31st therefore stays on the 31st in long months even after being
clamped to the 29th/30th in a short one.

Generation is bounded twice: by the horizon date and by a maximum number
of occurrences per call (RecurrenceSettings.max_iterations).
"""

from calendar import monthrange
from datetime import date, timedelta
from typing import Iterable, Optional

from prism_bills.config import get_settings
from prism_bills.models.bill import Bill, NewBill, RecurrenceRule


INTERVAL_DAYS = {
    RecurrenceRule.WEEKLY: 7,
    RecurrenceRule.BI_WEEKLY: 14,
}


def add_months(day: date, months: int) -> date:
    """Same day-of-month ``months`` later, clamped to the month's last day."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, monthrange(year, month)[1]))


def occurrence_after(due_date: date, rule: RecurrenceRule, count: int) -> Optional[date]:
    """The date ``count`` intervals after ``due_date``; None if not recurring."""
    rule = RecurrenceRule(rule)
    if rule == RecurrenceRule.MONTHLY:
        return add_months(due_date, count)
    if rule in INTERVAL_DAYS:
        return due_date + timedelta(days=INTERVAL_DAYS[rule] * count)
    return None


def next_occurrence(bill: NewBill) -> Optional[date]:
    """Next due date for a recurring bill, or None for one-off bills."""
    return occurrence_after(bill.due_date, bill.recurring, 1)


def default_horizon(today: date, months: Optional[int] = None) -> date:
    if months is None:
        months = get_settings().recurrence.horizon_months
    return add_months(today, months)


def occurrence_dates(
    bill: NewBill,
    horizon: date,
    max_iterations: Optional[int] = None,
    start_after: Optional[date] = None,
) -> list[date]:
    """
    Candidate due dates strictly after the bill's own due date.

    Ascending; stops at the first date past ``horizon`` or after
    ``max_iterations`` candidates. Dates on or before ``start_after`` are
    skipped and do not count towards the cap.
    """
    if max_iterations is None:
        max_iterations = get_settings().recurrence.max_iterations

    dates = []
    count = 0
    while len(dates) < max_iterations:
        count += 1
        candidate = occurrence_after(bill.due_date, bill.recurring, count)
        if candidate is None or candidate > horizon:
            break
        if start_after is not None and candidate <= start_after:
            continue
        dates.append(candidate)
    return dates


def _identity(name: str, due_date: date, recurring: RecurrenceRule) -> tuple:
    return (name, due_date, RecurrenceRule(recurring))


def generate(
    bill: NewBill,
    existing_bills: Iterable[NewBill],
    horizon: Optional[date] = None,
    today: Optional[date] = None,
    max_iterations: Optional[int] = None,
    start_after: Optional[date] = None,
) -> list[NewBill]:
    """
    New bill payloads for the occurrences of ``bill`` not yet stored.

    Args:
        bill: Source bill (its recurrence rule drives generation)
        existing_bills: Every bill already in the collection
        horizon: Last date to generate for (inclusive). Defaults to
                 ``horizon_months`` calendar months after ``today``.
        today: Reference date for the default horizon
        max_iterations: Cap on candidates considered
        start_after: Only consider occurrences after this date

    Returns:
        Payloads in ascending due-date order. Ids, payment state and
        timestamps are assigned when they are inserted.
    """
    if RecurrenceRule(bill.recurring) == RecurrenceRule.NONE:
        return []
    if horizon is None:
        if today is None:
            raise ValueError("Either horizon or today is required")
        horizon = default_horizon(today)

    seen = {_identity(b.name, b.due_date, b.recurring) for b in existing_bills}
    template = bill.to_new_bill() if isinstance(bill, Bill) else bill

    generated = []
    for candidate in occurrence_dates(bill, horizon, max_iterations, start_after):
        if _identity(bill.name, candidate, bill.recurring) in seen:
            continue
        generated.append(template.model_copy(update={"due_date": candidate}))
    return generated


def generate_all(
    bills: Iterable[Bill],
    today: date,
    horizon: Optional[date] = None,
    max_iterations: Optional[int] = None,
) -> list[NewBill]:
    """
    Run ``generate`` once per recurring series in a collection.

    A series is every bill sharing a name and recurrence rule, so stored
    occurrences produced by an earlier run are not sources of their own.
    Each series is anchored on its earliest due date and continues after
    its latest one. A month-end series keeps its day of month however
    often this is called.
    """
    bills = list(bills)
    if horizon is None:
        horizon = default_horizon(today)

    anchors: dict[tuple, Bill] = {}
    latest: dict[tuple, date] = {}
    for bill in bills:
        rule = RecurrenceRule(bill.recurring)
        if rule == RecurrenceRule.NONE:
            continue
        key = (bill.name, rule)
        if key not in anchors or bill.due_date < anchors[key].due_date:
            anchors[key] = bill
        if key not in latest or bill.due_date > latest[key]:
            latest[key] = bill.due_date

    generated: list[NewBill] = []
    for key, anchor in anchors.items():
        generated.extend(generate(
            anchor,
            bills,
            horizon=horizon,
            max_iterations=max_iterations,
            start_after=latest[key],
        ))
    return generated
