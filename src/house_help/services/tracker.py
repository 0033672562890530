"""Worker tracking use cases over the ledger store.

These are the operations a user performs: add a worker, mark a day, save
salary settings, record an advance, lock a paid month. Each builds the
record (ids, timestamps, natural-key lookups) and hands it to the store,
which enforces month locks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

from pydantic import ValidationError

from house_help.calculators.salary import (
    MAX_MONTHLY_SALARY,
    MAX_PAID_OFF_ALLOWANCE,
    calculate_salary,
    clamp_int,
    count_month_totals,
)
from house_help.calculators.types import AttendanceTotals, SalaryResult
from house_help.ledger.dates import month_key_of, parse_month_key, to_iso_date
from house_help.ledger.ids import make_id
from house_help.ledger.schema import (
    Deduction,
    MonthLock,
    SalaryConfig,
    ShiftEntry,
    ShiftStatus,
    Worker,
    parse_status,
)
from house_help.ledger.store import LedgerStore, LedgerValidationError

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class WorkerNotFoundError(LookupError):
    def __init__(self, worker_id: str):
        self.worker_id = worker_id
        super().__init__(f"Worker {worker_id} not found")


@dataclass(frozen=True)
class MonthSummary:
    """Everything shown for one worker and month."""

    worker: Worker
    month_key: str
    locked: bool
    totals: AttendanceTotals
    salary_config: SalaryConfig | None
    deductions: list[Deduction]
    salary: SalaryResult


def _require_month_key(month_key: str) -> str:
    if parse_month_key(month_key) is None:
        raise LedgerValidationError(f"Invalid month key {month_key!r}, expected YYYY-MM")
    return month_key


def _require_day(date_iso: str) -> date:
    try:
        return date.fromisoformat(date_iso)
    except (TypeError, ValueError):
        raise LedgerValidationError(f"Invalid date {date_iso!r}, expected YYYY-MM-DD")


def _build_entry(data: dict[str, Any]) -> ShiftEntry:
    try:
        return ShiftEntry.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise LedgerValidationError(f"Invalid day entry ({fields or 'entry'})") from e


class WorkerTracker:
    """Attendance, salary and deduction operations for one owner."""

    def __init__(self, store: LedgerStore, *, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today

    def _require_worker(self, worker_id: str) -> Worker:
        worker = self.store.get_worker(worker_id)
        if worker is None:
            raise WorkerNotFoundError(worker_id)
        return worker

    # Workers

    def list_workers(self) -> list[Worker]:
        return list(self.store.load().workers)

    def add_worker(self, name: str, default_shift_label: str | None = None) -> Worker:
        now = self.store.clock()
        worker = Worker(
            id=make_id("worker"),
            name=name.strip(),
            default_shift_label=(default_shift_label or "").strip() or None,
            created_at=now,
            updated_at=now,
        )
        self.store.upsert_worker(worker)
        logger.info("Added worker %s", worker.id)
        return worker

    def update_worker(
        self,
        worker_id: str,
        *,
        name: str | None = None,
        default_shift_label: Any = _UNSET,
    ) -> Worker:
        worker = self._require_worker(worker_id)
        update: dict[str, Any] = {"updated_at": self.store.clock()}
        if name is not None:
            update["name"] = name.strip()
        if default_shift_label is not _UNSET:
            update["default_shift_label"] = (default_shift_label or "").strip() or None
        worker = worker.model_copy(update=update)
        self.store.upsert_worker(worker)
        return worker

    def remove_worker(self, worker_id: str) -> None:
        self._require_worker(worker_id)
        self.store.delete_worker(worker_id)
        logger.info("Removed worker %s and all related records", worker_id)

    # Attendance

    def mark_day(
        self,
        worker_id: str,
        date_iso: str,
        status: ShiftStatus | str,
        *,
        hours: Any = _UNSET,
        note: Any = _UNSET,
    ) -> ShiftEntry:
        """Set a day's status, creating the entry if the day has none."""
        self._require_worker(worker_id)
        day = _require_day(date_iso)
        date_iso = to_iso_date(day)
        if day > self.today():
            raise LedgerValidationError(f"Cannot mark future date {date_iso}")

        parsed = parse_status(status)
        if parsed is None:
            raise LedgerValidationError(f"Unknown status {status!r}")
        status = parsed
        now = self.store.clock()
        existing = self.store.find_entry(worker_id, date_iso)

        update: dict[str, Any] = {"status": status, "updated_at": now}
        if hours is not _UNSET:
            update["hours"] = hours
        if note is not _UNSET:
            update["note"] = note or None

        if existing is not None:
            entry = _build_entry({**existing.model_dump(), **update})
        else:
            entry = _build_entry(
                {
                    "id": make_id("entry"),
                    "worker_id": worker_id,
                    "date_iso": date_iso,
                    "hours": None,
                    "note": None,
                    "created_at": now,
                    **update,
                }
            )
        self.store.upsert_entry(entry)
        return entry

    def update_entry_details(
        self,
        worker_id: str,
        date_iso: str,
        *,
        hours: Any = _UNSET,
        note: Any = _UNSET,
    ) -> ShiftEntry:
        """Change hours or note on an existing day entry."""
        date_iso = to_iso_date(_require_day(date_iso))
        existing = self.store.find_entry(worker_id, date_iso)
        if existing is None:
            raise LedgerValidationError(f"No entry for {worker_id} on {date_iso}")

        update: dict[str, Any] = {"updated_at": self.store.clock()}
        if hours is not _UNSET:
            update["hours"] = hours
        if note is not _UNSET:
            update["note"] = note or None
        entry = _build_entry({**existing.model_dump(), **update})
        self.store.upsert_entry(entry)
        return entry

    # Salary settings

    def save_salary(
        self,
        worker_id: str,
        month_key: str,
        monthly_salary: Any,
        paid_off_allowance: Any,
    ) -> SalaryConfig:
        self._require_worker(worker_id)
        _require_month_key(month_key)
        now = self.store.clock()

        values = {
            "monthly_salary": clamp_int(monthly_salary, 0, MAX_MONTHLY_SALARY),
            "paid_off_allowance": clamp_int(paid_off_allowance, 0, MAX_PAID_OFF_ALLOWANCE),
            "updated_at": now,
        }
        existing = self.store.get_salary_config(worker_id, month_key)
        if existing is not None:
            config = existing.model_copy(update=values)
        else:
            config = SalaryConfig(
                id=make_id("salary"), worker_id=worker_id, month_key=month_key, **values
            )
        self.store.upsert_salary_config(config)
        return config

    # Deductions

    def add_deduction(
        self,
        worker_id: str,
        month_key: str,
        amount: Any,
        *,
        date_iso: str | None = None,
        note: str | None = None,
    ) -> Deduction:
        self._require_worker(worker_id)
        _require_month_key(month_key)
        value = clamp_int(amount, 0, MAX_MONTHLY_SALARY)
        if value <= 0:
            raise LedgerValidationError("Deduction amount must be a positive number")

        if date_iso is None:
            date_iso = to_iso_date(self.today())
        else:
            date_iso = to_iso_date(_require_day(date_iso))

        now = self.store.clock()
        deduction = Deduction(
            id=make_id("deduct"),
            worker_id=worker_id,
            month_key=month_key,
            date_iso=date_iso,
            amount=value,
            note=(note or "").strip() or None,
            created_at=now,
            updated_at=now,
        )
        self.store.upsert_deduction(deduction)
        return deduction

    def remove_deduction(self, deduction_id: str) -> None:
        self.store.delete_deduction(deduction_id)

    # Month lock

    def set_month_locked(
        self,
        worker_id: str,
        month_key: str,
        locked: bool,
        locked_by: str | None = None,
    ) -> MonthLock:
        self._require_worker(worker_id)
        _require_month_key(month_key)
        self.store.set_month_locked(worker_id, month_key, locked, locked_by)
        lock = self.store.get_month_lock(worker_id, month_key)
        if lock is None:
            raise LedgerValidationError(f"Lock for {worker_id} {month_key} was not stored")
        return lock

    # Reading

    def month_summary(self, worker_id: str, month_key: str | None = None) -> MonthSummary:
        """Totals, lock state and salary breakdown for a worker's month."""
        month_key = _require_month_key(month_key or month_key_of(self.today()))
        ledger = self.store.load()
        worker = next((w for w in ledger.workers if w.id == worker_id), None)
        if worker is None:
            raise WorkerNotFoundError(worker_id)

        entries = [e for e in ledger.entries if e.worker_id == worker_id]
        config = next(
            (
                s
                for s in ledger.salary_configs
                if s.worker_id == worker_id and s.month_key == month_key
            ),
            None,
        )
        deductions = [
            d for d in ledger.deductions if d.worker_id == worker_id and d.month_key == month_key
        ]
        totals = count_month_totals(entries, month_key)

        return MonthSummary(
            worker=worker,
            month_key=month_key,
            locked=self.store.lock_gate.is_locked(ledger, worker_id, month_key),
            totals=totals,
            salary_config=config,
            deductions=deductions,
            salary=calculate_salary(
                month_key,
                totals,
                config.monthly_salary if config else 0,
                config.paid_off_allowance if config else 0,
                deductions,
            ),
        )
