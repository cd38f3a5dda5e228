"""Recurring bill generation."""

from prism_bills.recurrence.generator import (
    add_months,
    default_horizon,
    generate,
    generate_all,
    next_occurrence,
    occurrence_after,
    occurrence_dates,
)

__all__ = [
    "add_months",
    "default_horizon",
    "generate",
    "generate_all",
    "next_occurrence",
    "occurrence_after",
    "occurrence_dates",
]
