"""Month lock state machine.

Each (worker, month) pair is either unlocked or locked. A missing lock
record, or a record with ``locked=False``, means unlocked. Both transitions
are unconditional user actions.

While a month is locked the store refuses to create or change that
worker's shift entries, salary config and deductions for the month.
Reading and salary computation are unaffected.
"""

from __future__ import annotations

from enum import Enum

from house_help.ledger.ids import make_id
from house_help.ledger.schema import Ledger, MonthLock


class MonthLockState(str, Enum):
    """Month lock status values."""

    UNLOCKED = "unlocked"
    LOCKED = "locked"


class MonthLockedError(Exception):
    """Raised when a write targets a locked month."""

    def __init__(self, worker_id: str, month_key: str, action: str | None = None):
        self.worker_id = worker_id
        self.month_key = month_key
        self.action = action
        msg = f"Month {month_key} is locked for worker {worker_id}"
        if action:
            msg += f": cannot {action}"
        super().__init__(msg)


class MonthLockGate:
    """Decides whether writes for a worker and month are allowed.

    Locking or unlocking is accepted from either state. Locking an already
    locked month restamps ``locked_at``.
    """

    @staticmethod
    def find(ledger: Ledger, worker_id: str, month_key: str) -> MonthLock | None:
        for lock in ledger.month_locks:
            if lock.worker_id == worker_id and lock.month_key == month_key:
                return lock
        return None

    @staticmethod
    def state_of(lock: MonthLock | None) -> MonthLockState:
        if lock is not None and lock.locked:
            return MonthLockState.LOCKED
        return MonthLockState.UNLOCKED

    def state(self, ledger: Ledger, worker_id: str, month_key: str) -> MonthLockState:
        return self.state_of(self.find(ledger, worker_id, month_key))

    def is_locked(self, ledger: Ledger, worker_id: str, month_key: str) -> bool:
        return self.state(ledger, worker_id, month_key) == MonthLockState.LOCKED

    def ensure_unlocked(
        self,
        ledger: Ledger,
        worker_id: str,
        month_key: str,
        action: str | None = None,
    ) -> None:
        """Raise MonthLockedError if the month is locked."""
        if self.is_locked(ledger, worker_id, month_key):
            raise MonthLockedError(worker_id, month_key, action)

    def build_record(
        self,
        current: MonthLock | None,
        worker_id: str,
        month_key: str,
        locked: bool,
        now: int,
        locked_by: str | None = None,
    ) -> MonthLock:
        """Return the lock record to store for the requested state.

        Locking stamps ``locked_at``; unlocking keeps the previous stamp.
        """
        if current is not None:
            return current.model_copy(
                update={
                    "locked": locked,
                    "locked_at": now if locked else current.locked_at,
                    "locked_by": locked_by if locked else current.locked_by,
                }
            )
        return MonthLock(
            id=make_id("lock"),
            worker_id=worker_id,
            month_key=month_key,
            locked=locked,
            locked_at=now if locked else None,
            locked_by=locked_by if locked else None,
        )
