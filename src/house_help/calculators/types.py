"""Type definitions for the salary calculation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class AttendanceTotals:
    """Day counts for one worker and month, one entry per day."""

    worked: int = 0
    half: int = 0
    absent: int = 0
    off: int = 0
    hours: Decimal = Decimal("0")

    @property
    def marked_days(self) -> int:
        return self.worked + self.half + self.absent + self.off


@dataclass(frozen=True)
class SalaryResult:
    """Salary breakdown for one worker and month.

    Amounts are unrounded; use ``money()`` when presenting them.
    """

    month_key: str
    days_in_month: int
    monthly_salary: int  # after clamping
    paid_off_allowance: int  # after clamping

    per_day: Decimal
    half_day: Decimal

    paid_off_count: int
    unpaid_off_count: int

    worked_amount: Decimal
    half_amount: Decimal
    off_amount: Decimal

    gross_payable: Decimal
    deductions_total: Decimal
    net_payable: Decimal
