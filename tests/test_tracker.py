"""Tests for the worker tracker use cases."""

import sys
from decimal import Decimal

import pytest

from house_help.calculators.salary import MAX_PAID_OFF_ALLOWANCE
from house_help.ledger import LedgerValidationError, MonthLockedError, ShiftStatus
from house_help.services.tracker import WorkerNotFoundError


class TestWorkers:
    """Test worker management."""

    def test_add_and_update(self, tracker):
        worker = tracker.add_worker("  Asha ", " Morning ")
        assert worker.name == "Asha"
        assert worker.default_shift_label == "Morning"
        assert worker.id.startswith("worker_")

        updated = tracker.update_worker(worker.id, name="Asha Devi", default_shift_label="")
        assert updated.name == "Asha Devi"
        assert updated.default_shift_label is None
        assert updated.created_at == worker.created_at
        assert updated.updated_at > worker.updated_at

    def test_empty_name_rejected(self, tracker):
        with pytest.raises(LedgerValidationError):
            tracker.add_worker("   ")

    def test_unknown_worker(self, tracker):
        with pytest.raises(WorkerNotFoundError) as exc_info:
            tracker.update_worker("missing", name="X")
        assert exc_info.value.worker_id == "missing"

    def test_remove(self, tracker, worker):
        tracker.mark_day(worker.id, "2024-06-01", "worked")
        tracker.remove_worker(worker.id)
        assert tracker.list_workers() == []
        assert tracker.store.load().entries == []


class TestMarkDay:
    """Test attendance marking."""

    def test_creates_then_updates_same_record(self, tracker, worker):
        first = tracker.mark_day(worker.id, "2024-06-10", "WORKED", hours=8)
        second = tracker.mark_day(worker.id, "2024-06-10", "half")

        assert second.id == first.id
        assert second.status == ShiftStatus.HALF
        assert second.hours == 8
        assert len(tracker.store.load().entries) == 1

    def test_future_date_rejected(self, tracker, worker):
        with pytest.raises(LedgerValidationError):
            tracker.mark_day(worker.id, "2024-06-16", "WORKED")
        tracker.mark_day(worker.id, "2024-06-15", "WORKED")

    def test_invalid_inputs(self, tracker, worker):
        with pytest.raises(LedgerValidationError):
            tracker.mark_day(worker.id, "2024-06-10", "sleeping")
        with pytest.raises(LedgerValidationError):
            tracker.mark_day(worker.id, "10/06/2024", "WORKED")
        with pytest.raises(LedgerValidationError):
            tracker.mark_day(worker.id, "2024-06-1x", "WORKED")

    @pytest.mark.skipif(sys.version_info < (3, 11), reason="compact ISO dates need 3.11")
    def test_compact_date_is_stored_as_day_key(self, tracker, worker):
        entry = tracker.mark_day(worker.id, "20240610", "WORKED")

        assert entry.date_iso == "2024-06-10"
        assert tracker.store.find_entry(worker.id, "2024-06-10") is not None

    def test_hours_must_be_numeric(self, tracker, worker):
        with pytest.raises(LedgerValidationError):
            tracker.mark_day(worker.id, "2024-06-10", "WORKED", hours="lots")
        assert tracker.store.load().entries == []

        tracker.mark_day(worker.id, "2024-06-10", "WORKED", hours=8)
        with pytest.raises(LedgerValidationError):
            tracker.mark_day(worker.id, "2024-06-10", "HALF", hours=[4])
        with pytest.raises(LedgerValidationError):
            tracker.update_entry_details(worker.id, "2024-06-10", hours="x")

        stored = tracker.store.find_entry(worker.id, "2024-06-10")
        assert stored.hours == 8
        assert stored.status == ShiftStatus.WORKED

    def test_locked_month(self, tracker, worker):
        tracker.set_month_locked(worker.id, "2024-05", True)
        with pytest.raises(MonthLockedError):
            tracker.mark_day(worker.id, "2024-05-20", "OFF")

    def test_set_month_locked_returns_record(self, tracker, worker):
        lock = tracker.set_month_locked(worker.id, "2024-05", True, "owner@example.com")
        assert lock.locked is True
        assert lock.locked_by == "owner@example.com"

        unlocked = tracker.set_month_locked(worker.id, "2024-05", False)
        assert unlocked.locked is False
        assert unlocked.id == lock.id

    def test_update_entry_details(self, tracker, worker):
        tracker.mark_day(worker.id, "2024-06-10", "WORKED")
        entry = tracker.update_entry_details(worker.id, "2024-06-10", hours=6.5, note="left early")
        assert entry.hours == 6.5
        assert entry.note == "left early"

        cleared = tracker.update_entry_details(worker.id, "2024-06-10", note="")
        assert cleared.note is None
        assert cleared.hours == 6.5

        with pytest.raises(LedgerValidationError):
            tracker.update_entry_details(worker.id, "2024-06-11", note="x")


class TestSalaryAndDeductions:
    """Test salary settings and deductions."""

    def test_save_salary_clamps(self, tracker, worker):
        config = tracker.save_salary(worker.id, "2024-06", "12000.4", 999)
        assert config.monthly_salary == 12000
        assert config.paid_off_allowance == MAX_PAID_OFF_ALLOWANCE

        again = tracker.save_salary(worker.id, "2024-06", -5, "x")
        assert again.id == config.id
        assert again.monthly_salary == 0
        assert again.paid_off_allowance == 0

    def test_invalid_month_key(self, tracker, worker):
        with pytest.raises(LedgerValidationError):
            tracker.save_salary(worker.id, "June", 1000, 0)
        with pytest.raises(LedgerValidationError):
            tracker.save_salary(worker.id, "2024-06\n", 1000, 0)
        assert tracker.store.load().salary_configs == []

    def test_add_deduction(self, tracker, worker):
        deduction = tracker.add_deduction(worker.id, "2024-06", "500", note=" advance ")
        assert deduction.amount == 500
        assert deduction.date_iso == "2024-06-15"
        assert deduction.note == "advance"
        assert deduction.month_key == "2024-06"

    @pytest.mark.parametrize("amount", [0, -10, "abc", None])
    def test_non_positive_deduction_rejected(self, tracker, worker, amount):
        with pytest.raises(LedgerValidationError):
            tracker.add_deduction(worker.id, "2024-06", amount)

    def test_remove_deduction(self, tracker, worker):
        deduction = tracker.add_deduction(worker.id, "2024-06", 100)
        tracker.remove_deduction(deduction.id)
        assert tracker.store.get_month_deductions(worker.id, "2024-06") == []


class TestMonthSummary:
    """Test the month view."""

    def test_summary(self, tracker, worker):
        for day in range(1, 16):
            tracker.mark_day(worker.id, f"2024-06-{day:02d}", "WORKED")
        tracker.mark_day(worker.id, "2024-06-10", "HALF")
        tracker.mark_day(worker.id, "2024-06-11", "OFF")
        tracker.save_salary(worker.id, "2024-06", 12000, 2)
        tracker.add_deduction(worker.id, "2024-06", 500)
        tracker.set_month_locked(worker.id, "2024-06", True)

        summary = tracker.month_summary(worker.id, "2024-06")

        assert summary.locked is True
        assert summary.totals.worked == 13
        assert summary.totals.half == 1
        assert summary.totals.off == 1
        assert summary.salary_config.monthly_salary == 12000
        assert len(summary.deductions) == 1
        # 13 * 400 + 200 + 400 - 500
        assert summary.salary.net_payable == Decimal("5300")

    def test_defaults_to_current_month(self, tracker, worker):
        summary = tracker.month_summary(worker.id)
        assert summary.month_key == "2024-06"
        assert summary.salary.gross_payable == Decimal("0")
        assert summary.salary_config is None
