"""Tests for the salary calculation."""

from decimal import Decimal

import pytest

from house_help.calculators.salary import (
    calculate_salary,
    clamp_int,
    count_month_totals,
    money,
    month_status_dates,
    sum_deductions,
)
from house_help.calculators.types import AttendanceTotals
from house_help.ledger.schema import Deduction, ShiftEntry, ShiftStatus


def make_entry(day: str, status: str, updated_at: int = 1, entry_id: str | None = None, **kwargs):
    return ShiftEntry(
        id=entry_id or f"entry_{day}",
        worker_id="w1",
        date_iso=day,
        status=status,
        updated_at=updated_at,
        **kwargs,
    )


class TestCalculateSalary:
    """Test the salary breakdown."""

    def test_reference_month(self):
        """Worked, half, paid and unpaid OFF days with one advance."""
        totals = AttendanceTotals(worked=24, half=2, off=3, absent=1)
        result = calculate_salary("2024-06", totals, 12000, 2, [500])

        assert result.days_in_month == 30
        assert result.per_day == Decimal("400")
        assert result.half_day == Decimal("200")
        assert result.paid_off_count == 2
        assert result.unpaid_off_count == 1
        assert result.worked_amount == Decimal("9600")
        assert result.half_amount == Decimal("400")
        assert result.off_amount == Decimal("800")
        assert result.gross_payable == Decimal("10800")
        assert result.deductions_total == Decimal("500")
        assert result.net_payable == Decimal("10300")

    def test_net_never_negative(self):
        totals = AttendanceTotals(worked=24, half=2, off=3, absent=1)
        result = calculate_salary("2024-06", totals, 12000, 2, [6000, 6000])

        assert result.gross_payable == Decimal("10800")
        assert result.deductions_total == Decimal("12000")
        assert result.net_payable == Decimal("0")

    @pytest.mark.parametrize("off,allowance", [(0, 0), (3, 0), (3, 2), (3, 3), (2, 10)])
    def test_off_days_split(self, off, allowance):
        totals = AttendanceTotals(off=off)
        result = calculate_salary("2024-06", totals, 9000, allowance)

        assert result.paid_off_count + result.unpaid_off_count == off
        assert result.paid_off_count == min(off, allowance)

    def test_absent_days_earn_nothing(self):
        result = calculate_salary("2024-06", AttendanceTotals(absent=30), 12000, 4)
        assert result.gross_payable == Decimal("0")

    def test_uses_actual_month_length(self):
        totals = AttendanceTotals(worked=29)
        result = calculate_salary("2024-02", totals, 2900, 0)

        assert result.days_in_month == 29
        assert result.gross_payable == Decimal("2900")

    def test_is_deterministic(self):
        totals = AttendanceTotals(worked=20, half=3, off=4)
        first = calculate_salary("2024-07", totals, 10000, 2, [100, 250])
        second = calculate_salary("2024-07", totals, 10000, 2, [100, 250])
        assert first == second

    def test_inputs_are_clamped(self):
        totals = AttendanceTotals(worked=1, off=1)
        result = calculate_salary("2024-06", totals, -500, "abc")

        assert result.monthly_salary == 0
        assert result.paid_off_allowance == 0
        assert result.gross_payable == Decimal("0")

    def test_accepts_deduction_records(self):
        deduction = Deduction(
            id="d1", worker_id="w1", month_key="2024-06", date_iso="2024-06-02", amount=300
        )
        result = calculate_salary("2024-06", AttendanceTotals(worked=30), 3000, 0, [deduction])
        assert result.net_payable == Decimal("2700")


class TestSumDeductions:
    """Test deduction totals."""

    def test_ignores_non_positive_and_non_finite(self):
        total = sum_deductions([100, -50, 0, float("nan"), float("inf"), "abc", None, {"amount": 25}])
        assert total == Decimal("125")

    def test_empty(self):
        assert sum_deductions([]) == Decimal("0")


class TestNumberHelpers:
    """Test clamping and display rounding."""

    def test_clamp_int(self):
        assert clamp_int("12000.5", 0, 100_000) == 12001
        assert clamp_int(-3, 0, 10) == 0
        assert clamp_int(50, 0, 10) == 10
        assert clamp_int(None, 0, 10) == 0
        assert clamp_int(True, 0, 10) == 0
        assert clamp_int(float("nan"), 0, 10) == 0

    def test_money_rounds_half_up(self):
        assert money(Decimal("333.5")) == 334
        assert money(Decimal("333.49")) == 333
        assert money(Decimal("10000") / Decimal("31")) == 323


class TestMonthTotals:
    """Test attendance aggregation."""

    def test_counts_one_entry_per_day(self):
        entries = [
            make_entry("2024-06-01", "WORKED"),
            make_entry("2024-06-02", "HALF", hours=4),
            make_entry("2024-06-03", "OFF"),
            make_entry("2024-06-04", "ABSENT"),
            make_entry("2024-06-05", "WORKED", hours=8.5),
            make_entry("2024-05-31", "WORKED"),
        ]
        totals = count_month_totals(entries, "2024-06")

        assert totals.worked == 2
        assert totals.half == 1
        assert totals.off == 1
        assert totals.absent == 1
        assert totals.hours == Decimal("12.5")
        assert totals.marked_days == 5

    def test_duplicate_day_uses_latest(self):
        entries = [
            make_entry("2024-06-01", "WORKED", updated_at=1, entry_id="a"),
            make_entry("2024-06-01", "OFF", updated_at=2, entry_id="b"),
        ]
        totals = count_month_totals(entries, "2024-06")
        assert totals.worked == 0
        assert totals.off == 1

    def test_status_dates_sorted(self):
        entries = [
            make_entry("2024-06-09", "OFF"),
            make_entry("2024-06-02", "OFF"),
            make_entry("2024-06-05", "WORKED"),
        ]
        dates = month_status_dates(entries, "2024-06")

        assert dates[ShiftStatus.OFF] == ["2024-06-02", "2024-06-09"]
        assert dates[ShiftStatus.WORKED] == ["2024-06-05"]
        assert dates[ShiftStatus.HALF] == []
