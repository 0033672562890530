"""Monthly salary calculation.

Pure functions, no state. The monthly salary is spread over the actual
number of days in the month:

1) per_day = monthly_salary / days_in_month, half_day = per_day / 2
2) OFF days are paid up to the paid-off allowance, the rest are unpaid
3) gross = worked * per_day + half * half_day + paid_off * per_day
   (absent days earn nothing)
4) deductions = sum of positive, finite deduction amounts
5) net = max(0, gross - deductions)

Nothing is rounded until presentation (``money``).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from house_help.calculators.types import AttendanceTotals, SalaryResult
from house_help.ledger.dates import days_in_month_from_key
from house_help.ledger.schema import ShiftEntry, ShiftStatus

MAX_MONTHLY_SALARY = 1_000_000_000
MAX_PAID_OFF_ALLOWANCE = 366


def to_decimal(value: Any) -> Decimal | None:
    """Convert a stored number to Decimal; None when missing or not finite."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    else:
        return None
    return result if result.is_finite() else None


def clamp_int(value: Any, minimum: int, maximum: int) -> int:
    """Round to an integer and clamp into [minimum, maximum].

    Non-numeric or non-finite input becomes ``minimum``.
    """
    number = to_decimal(value)
    if number is None:
        return minimum
    rounded = int(number.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(minimum, min(maximum, rounded))


def money(value: Decimal | int | float) -> int:
    """Round an amount to whole currency units for display."""
    number = to_decimal(value)
    if number is None:
        return 0
    return int(number.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _deduction_amount(deduction: Any) -> Any:
    if isinstance(deduction, Mapping):
        return deduction.get("amount")
    return getattr(deduction, "amount", deduction)


def sum_deductions(deductions: Iterable[Any]) -> Decimal:
    """Sum positive, finite amounts; anything else is ignored."""
    total = Decimal("0")
    for deduction in deductions:
        amount = to_decimal(_deduction_amount(deduction))
        if amount is not None and amount > 0:
            total += amount
    return total


def calculate_salary(
    month_key: str,
    totals: AttendanceTotals,
    monthly_salary: Any,
    paid_off_allowance: Any,
    deductions: Iterable[Any] = (),
) -> SalaryResult:
    """Compute the salary breakdown for one worker and month."""
    days = days_in_month_from_key(month_key)
    salary = clamp_int(monthly_salary, 0, MAX_MONTHLY_SALARY)
    allowance = clamp_int(paid_off_allowance, 0, MAX_PAID_OFF_ALLOWANCE)

    per_day = Decimal(salary) / Decimal(days) if days > 0 else Decimal("0")
    half_day = per_day / 2

    paid_off_count = min(totals.off, allowance)
    unpaid_off_count = max(0, totals.off - allowance)

    worked_amount = totals.worked * per_day
    half_amount = totals.half * half_day
    off_amount = paid_off_count * per_day
    gross = worked_amount + half_amount + off_amount

    deductions_total = sum_deductions(deductions)
    net = max(Decimal("0"), gross - deductions_total)

    return SalaryResult(
        month_key=month_key,
        days_in_month=days,
        monthly_salary=salary,
        paid_off_allowance=allowance,
        per_day=per_day,
        half_day=half_day,
        paid_off_count=paid_off_count,
        unpaid_off_count=unpaid_off_count,
        worked_amount=worked_amount,
        half_amount=half_amount,
        off_amount=off_amount,
        gross_payable=gross,
        deductions_total=deductions_total,
        net_payable=net,
    )


def _latest_per_day(entries: Iterable[ShiftEntry], month_key: str) -> list[ShiftEntry]:
    by_day: dict[str, ShiftEntry] = {}
    for entry in entries:
        if entry.month_key != month_key:
            continue
        current = by_day.get(entry.date_iso)
        if current is None or entry.updated_at >= current.updated_at:
            by_day[entry.date_iso] = entry
    return [by_day[day] for day in sorted(by_day)]


def count_month_totals(entries: Iterable[ShiftEntry], month_key: str) -> AttendanceTotals:
    """Count statuses and sum hours for one month of a worker's entries."""
    counts = {status: 0 for status in ShiftStatus}
    hours = Decimal("0")
    for entry in _latest_per_day(entries, month_key):
        counts[entry.status] += 1
        entry_hours = to_decimal(entry.hours)
        if entry_hours is not None:
            hours += entry_hours

    return AttendanceTotals(
        worked=counts[ShiftStatus.WORKED],
        half=counts[ShiftStatus.HALF],
        absent=counts[ShiftStatus.ABSENT],
        off=counts[ShiftStatus.OFF],
        hours=hours,
    )


def month_status_dates(
    entries: Iterable[ShiftEntry], month_key: str
) -> dict[ShiftStatus, list[str]]:
    """Sorted day keys per status for one month."""
    dates: dict[ShiftStatus, list[str]] = {status: [] for status in ShiftStatus}
    for entry in _latest_per_day(entries, month_key):
        dates[entry.status].append(entry.date_iso)
    return dates
