"""Frequency rule evaluation."""

from .frequency import (
    project_occurrences,
    project_item,
    next_occurrence,
    add_cycle,
    add_months,
    days_in_month,
    last_working_day_of_month,
    semimonthly_pair,
)

__all__ = [
    "project_occurrences",
    "project_item",
    "next_occurrence",
    "add_cycle",
    "add_months",
    "days_in_month",
    "last_working_day_of_month",
    "semimonthly_pair",
]
