"""Ledger store: the in-process source of truth for one owner's ledger.

Every mutation is a read-modify-write of the whole document:

1) load the current ledger from the backend
2) consult the month lock gate for the affected worker and month
3) build the new collection (replace the matching record, else prepend)
4) save, which writes the document and, unless silent, notifies subscribers

Records are matched by id, and additionally by their natural key:
(worker, day) for shift entries and (worker, month) for month locks and
salary configs. A record written under a new id for an occupied natural key
takes over the existing record's id instead of creating a duplicate.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from house_help.ledger.backends import LedgerBackend
from house_help.ledger.events import ChangeNotifier, LedgerChanged
from house_help.ledger.ids import now_ms
from house_help.ledger.locks import MonthLockGate
from house_help.ledger.schema import (
    Deduction,
    Ledger,
    MonthLock,
    SalaryConfig,
    ShiftEntry,
    Worker,
    normalize_ledger,
    parse_ledger_json,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")


class LedgerValidationError(ValueError):
    """Raised when a record violates a ledger invariant."""


def _upsert(items: list[R], record: R, matches: Callable[[R], bool]) -> list[R]:
    """Replace the first matching item, or prepend the record."""
    for index, existing in enumerate(items):
        if matches(existing):
            return [*items[:index], record, *items[index + 1 :]]
    return [record, *items]


class LedgerStore:
    """Whole-document ledger persistence with lock-gated mutations."""

    def __init__(
        self,
        backend: LedgerBackend,
        *,
        notifier: ChangeNotifier | None = None,
        lock_gate: MonthLockGate | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.backend = backend
        self.notifier = notifier or ChangeNotifier()
        self.lock_gate = lock_gate or MonthLockGate()
        self.clock = clock

    # ------------------------------------------------------------------
    # Document I/O
    # ------------------------------------------------------------------

    def load(self) -> Ledger:
        """Read and normalize the persisted ledger.

        Malformed bytes degrade to an empty ledger. A document that needed
        normalizing is written back silently in its current shape.
        """
        raw = self.backend.read()
        ledger = parse_ledger_json(raw)
        if raw != ledger.serialize():
            logger.debug("Rewriting ledger %s in version %d shape", self.backend.key, ledger.version)
            self._write(ledger, silent=True)
        return ledger

    def save(self, ledger: Ledger, *, silent: bool = False) -> Ledger:
        """Normalize and persist the ledger; returns what was written."""
        normalized = normalize_ledger(ledger)
        self._write(normalized, silent=silent)
        return normalized

    def _write(self, ledger: Ledger, *, silent: bool) -> None:
        self.backend.write(ledger.serialize())
        if silent:
            return
        self.notifier.emit(LedgerChanged(storage_key=self.backend.key, ts=self.clock()))

    # ------------------------------------------------------------------
    # Workers
    # ------------------------------------------------------------------

    def upsert_worker(self, worker: Worker) -> Ledger:
        name = worker.name.strip()
        if not name:
            raise LedgerValidationError("Worker name must not be empty")
        if name != worker.name:
            worker = worker.model_copy(update={"name": name})

        ledger = self.load()
        workers = _upsert(ledger.workers, worker, lambda w: w.id == worker.id)
        return self.save(ledger.model_copy(update={"workers": workers}))

    def delete_worker(self, worker_id: str) -> Ledger:
        """Delete a worker and every record that references it."""
        ledger = self.load()
        return self.save(
            ledger.model_copy(
                update={
                    "workers": [w for w in ledger.workers if w.id != worker_id],
                    "entries": [e for e in ledger.entries if e.worker_id != worker_id],
                    "month_locks": [m for m in ledger.month_locks if m.worker_id != worker_id],
                    "salary_configs": [
                        s for s in ledger.salary_configs if s.worker_id != worker_id
                    ],
                    "deductions": [d for d in ledger.deductions if d.worker_id != worker_id],
                }
            )
        )

    # ------------------------------------------------------------------
    # Month locks
    # ------------------------------------------------------------------

    def upsert_month_lock(self, lock: MonthLock) -> Ledger:
        ledger = self.load()
        existing = self.lock_gate.find(ledger, lock.worker_id, lock.month_key)
        if existing is not None and existing.id != lock.id:
            lock = lock.model_copy(update={"id": existing.id})

        locks = _upsert(
            ledger.month_locks,
            lock,
            lambda m: m.id == lock.id
            or (m.worker_id == lock.worker_id and m.month_key == lock.month_key),
        )
        return self.save(ledger.model_copy(update={"month_locks": locks}))

    def set_month_locked(
        self,
        worker_id: str,
        month_key: str,
        locked: bool,
        locked_by: str | None = None,
    ) -> Ledger:
        """Lock or unlock a worker's month."""
        current = self.get_month_lock(worker_id, month_key)
        record = self.lock_gate.build_record(
            current, worker_id, month_key, locked, self.clock(), locked_by
        )
        logger.info(
            "%s month %s for worker %s", "Locking" if locked else "Unlocking", month_key, worker_id
        )
        return self.upsert_month_lock(record)

    # ------------------------------------------------------------------
    # Shift entries
    # ------------------------------------------------------------------

    def upsert_entry(self, entry: ShiftEntry) -> Ledger:
        ledger = self.load()
        self.lock_gate.ensure_unlocked(
            ledger, entry.worker_id, entry.month_key, "change attendance"
        )

        previous = next((e for e in ledger.entries if e.id == entry.id), None)
        if previous is not None and (
            previous.worker_id != entry.worker_id or previous.month_key != entry.month_key
        ):
            self.lock_gate.ensure_unlocked(
                ledger, previous.worker_id, previous.month_key, "change attendance"
            )

        entries = ledger.entries
        same_day = next(
            (
                e
                for e in entries
                if e.id != entry.id
                and e.worker_id == entry.worker_id
                and e.date_iso == entry.date_iso
            ),
            None,
        )
        if same_day is not None:
            if previous is None:
                entry = entry.model_copy(
                    update={"id": same_day.id, "created_at": same_day.created_at}
                )
            else:
                # The record moved onto a day that already had one.
                entries = [e for e in entries if e.id != same_day.id]

        entries = _upsert(entries, entry, lambda e: e.id == entry.id)
        return self.save(ledger.model_copy(update={"entries": entries}))

    # ------------------------------------------------------------------
    # Salary configs
    # ------------------------------------------------------------------

    def upsert_salary_config(self, config: SalaryConfig) -> Ledger:
        ledger = self.load()
        self.lock_gate.ensure_unlocked(
            ledger, config.worker_id, config.month_key, "change salary settings"
        )

        existing = next(
            (
                s
                for s in ledger.salary_configs
                if s.worker_id == config.worker_id and s.month_key == config.month_key
            ),
            None,
        )
        if existing is not None and existing.id != config.id:
            config = config.model_copy(update={"id": existing.id})

        configs = _upsert(
            ledger.salary_configs,
            config,
            lambda s: s.id == config.id
            or (s.worker_id == config.worker_id and s.month_key == config.month_key),
        )
        return self.save(ledger.model_copy(update={"salary_configs": configs}))

    # ------------------------------------------------------------------
    # Deductions
    # ------------------------------------------------------------------

    def upsert_deduction(self, deduction: Deduction) -> Ledger:
        ledger = self.load()
        self.lock_gate.ensure_unlocked(
            ledger, deduction.worker_id, deduction.month_key, "add deductions"
        )

        previous = next((d for d in ledger.deductions if d.id == deduction.id), None)
        if previous is not None and (
            previous.worker_id != deduction.worker_id or previous.month_key != deduction.month_key
        ):
            self.lock_gate.ensure_unlocked(
                ledger, previous.worker_id, previous.month_key, "move deductions"
            )

        deductions = _upsert(ledger.deductions, deduction, lambda d: d.id == deduction.id)
        return self.save(ledger.model_copy(update={"deductions": deductions}))

    def delete_deduction(self, deduction_id: str) -> Ledger:
        ledger = self.load()
        target = next((d for d in ledger.deductions if d.id == deduction_id), None)
        if target is None:
            return ledger

        self.lock_gate.ensure_unlocked(
            ledger, target.worker_id, target.month_key, "remove deductions"
        )
        return self.save(
            ledger.model_copy(
                update={"deductions": [d for d in ledger.deductions if d.id != deduction_id]}
            )
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_worker(self, worker_id: str) -> Worker | None:
        return next((w for w in self.load().workers if w.id == worker_id), None)

    def find_entry(self, worker_id: str, date_iso: str) -> ShiftEntry | None:
        return next(
            (
                e
                for e in self.load().entries
                if e.worker_id == worker_id and e.date_iso == date_iso
            ),
            None,
        )

    def get_worker_entries(self, worker_id: str, month_key: str | None = None) -> list[ShiftEntry]:
        return [
            e
            for e in self.load().entries
            if e.worker_id == worker_id and (month_key is None or e.month_key == month_key)
        ]

    def get_salary_config(self, worker_id: str, month_key: str) -> SalaryConfig | None:
        return next(
            (
                s
                for s in self.load().salary_configs
                if s.worker_id == worker_id and s.month_key == month_key
            ),
            None,
        )

    def get_month_lock(self, worker_id: str, month_key: str) -> MonthLock | None:
        return self.lock_gate.find(self.load(), worker_id, month_key)

    def is_month_locked(self, worker_id: str, month_key: str) -> bool:
        return self.lock_gate.is_locked(self.load(), worker_id, month_key)

    def get_month_deductions(self, worker_id: str, month_key: str) -> list[Deduction]:
        return [
            d
            for d in self.load().deductions
            if d.worker_id == worker_id and d.month_key == month_key
        ]
