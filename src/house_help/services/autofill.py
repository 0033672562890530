"""Backfill of unmarked days in the current month."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from house_help.ledger.dates import month_days, month_key_of, to_iso_date
from house_help.ledger.ids import make_id
from house_help.ledger.schema import ShiftEntry, ShiftStatus
from house_help.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


class AutoFiller:
    """Marks unmarked past days of the current month as WORKED.

    Runs at most once per worker and month for the lifetime of this object
    (one session). Only days before today are filled. A locked month is
    skipped without being recorded as attempted, so it is filled once after
    it gets unlocked.
    """

    def __init__(self, store: LedgerStore, *, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today
        self._attempted: set[tuple[str, str]] = set()

    def has_run(self, worker_id: str, month_key: str) -> bool:
        return (worker_id, month_key) in self._attempted

    def run(self, worker_id: str) -> list[ShiftEntry]:
        """Fill the current month for a worker; returns the created entries."""
        today = self.today()
        month_key = month_key_of(today)

        if self.has_run(worker_id, month_key):
            return []
        if self.store.get_worker(worker_id) is None:
            return []
        if self.store.is_month_locked(worker_id, month_key):
            logger.debug("Month %s locked for %s; auto-fill skipped", month_key, worker_id)
            return []

        marked = {e.date_iso for e in self.store.get_worker_entries(worker_id, month_key)}
        missing = [
            to_iso_date(day)
            for day in month_days(today)
            if day < today and to_iso_date(day) not in marked
        ]

        created: list[ShiftEntry] = []
        now = self.store.clock()
        for date_iso in missing:
            entry = ShiftEntry(
                id=make_id("entry"),
                worker_id=worker_id,
                date_iso=date_iso,
                status=ShiftStatus.WORKED,
                created_at=now,
                updated_at=now,
            )
            self.store.upsert_entry(entry)
            created.append(entry)

        self._attempted.add((worker_id, month_key))
        if created:
            logger.info("Auto-filled %d days of %s for %s", len(created), month_key, worker_id)
        return created
