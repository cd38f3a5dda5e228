"""Bill queries: urgency tiers, list/dashboard queries and calendar buckets."""

from prism_bills.queries.bills import (
    BillFilter,
    DashboardSummary,
    SortKey,
    bills_on_date,
    dashboard_summary,
    due_this_week,
    due_within_days,
    end_of_month,
    filter_and_sort,
    filter_bills,
    overdue,
    sort_bills,
    total_account_balance,
    total_upcoming_this_month,
)
from prism_bills.queries.calendar import (
    CalendarDay,
    CalendarMonth,
    bills_for_month,
    calendar_month,
    month_days,
)
from prism_bills.queries.urgency import (
    UrgencyLevel,
    classify,
    days_until_due,
    urgency_label,
)

__all__ = [
    "BillFilter",
    "CalendarDay",
    "CalendarMonth",
    "DashboardSummary",
    "SortKey",
    "UrgencyLevel",
    "bills_for_month",
    "bills_on_date",
    "calendar_month",
    "classify",
    "dashboard_summary",
    "days_until_due",
    "due_this_week",
    "due_within_days",
    "end_of_month",
    "filter_and_sort",
    "filter_bills",
    "month_days",
    "overdue",
    "sort_bills",
    "total_account_balance",
    "total_upcoming_this_month",
    "urgency_label",
]
