"""Ledger document, local store and month locks."""

from house_help.ledger.backends import InMemoryBackend, JsonFileBackend, LedgerBackend
from house_help.ledger.events import ChangeNotifier, LedgerChanged
from house_help.ledger.locks import MonthLockedError, MonthLockGate, MonthLockState
from house_help.ledger.schema import (
    CURRENT_VERSION,
    Deduction,
    Ledger,
    MonthLock,
    SalaryConfig,
    ShiftEntry,
    ShiftStatus,
    Worker,
    normalize_ledger,
)
from house_help.ledger.store import LedgerStore, LedgerValidationError

__all__ = [
    "CURRENT_VERSION",
    "ChangeNotifier",
    "Deduction",
    "InMemoryBackend",
    "JsonFileBackend",
    "Ledger",
    "LedgerBackend",
    "LedgerChanged",
    "LedgerStore",
    "LedgerValidationError",
    "MonthLock",
    "MonthLockGate",
    "MonthLockState",
    "MonthLockedError",
    "SalaryConfig",
    "ShiftEntry",
    "ShiftStatus",
    "Worker",
    "normalize_ledger",
]
