"""Salary calculation."""

from house_help.calculators.salary import (
    calculate_salary,
    clamp_int,
    count_month_totals,
    money,
    month_status_dates,
)
from house_help.calculators.types import AttendanceTotals, SalaryResult

__all__ = [
    "AttendanceTotals",
    "SalaryResult",
    "calculate_salary",
    "clamp_int",
    "count_month_totals",
    "money",
    "month_status_dates",
]
