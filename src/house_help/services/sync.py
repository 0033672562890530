"""Debounced reconciliation of the local ledger with the remote blob.

The reconciler subscribes to the store's change notifications. Each
notification (re)starts a single debounce timer; when it fires, the whole
ledger is pushed unless a push is already in flight or nothing changed
since the last successful push. A skipped attempt is not queued: the next
change event schedules the next one.

The remote copy is overwritten on every push (last write wins). No merge
is attempted between sessions of the same owner.

Bootstrap, once per session:
- remote has a ledger → it replaces the local one silently
- remote is empty → the local ledger is pushed as the initial value
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from house_help.ledger.events import LedgerChanged
from house_help.ledger.schema import Ledger
from house_help.ledger.store import LedgerStore
from house_help.services.remote import LedgerRemote, RemoteStoreError, UnauthorizedError

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 1000


class SyncStatus(str, Enum):
    """Sync state shown to the user."""

    IDLE = "idle"
    SYNCING = "syncing"
    SYNCED = "synced"
    FAILED = "failed"


class SyncOutcome(str, Enum):
    """Result of one push attempt."""

    PUSHED = "pushed"
    SKIPPED_IN_FLIGHT = "skipped_in_flight"
    SKIPPED_UNCHANGED = "skipped_unchanged"
    FAILED = "failed"
    UNAUTHORIZED = "unauthorized"


StatusListener = Callable[[SyncStatus, "str | None"], None]


class SyncReconciler:
    """Pushes ledger changes to a remote after a quiet period."""

    def __init__(
        self,
        store: LedgerStore,
        remote: LedgerRemote,
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ):
        self.store = store
        self.remote = remote
        self.debounce_ms = debounce_ms

        self.status = SyncStatus.IDLE
        self.last_error: str | None = None
        self.last_synced_at: datetime | None = None
        self.bootstrapped = False

        self._loop: asyncio.AbstractEventLoop | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._in_flight = False
        self._last_payload = ""
        self._unsubscribe: Callable[[], None] | None = None
        self._tasks: set[asyncio.Task[SyncOutcome]] = set()
        self._listeners: list[StatusListener] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Subscribe to ledger changes. Must run inside the event loop."""
        if self._unsubscribe is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._unsubscribe = self.store.notifier.subscribe(self._on_change)

    def stop(self) -> None:
        """Unsubscribe and cancel a pending timer. A running push finishes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._cancel_timer()

    async def drain(self) -> None:
        """Wait for pushes started by the timer to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def pending(self) -> bool:
        """True while a debounce timer is waiting to fire."""
        return self._timer is not None

    def add_status_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Debounce
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_change(self, event: LedgerChanged) -> None:
        if self._loop is None:
            return
        self._cancel_timer()
        self._timer = self._loop.call_later(self.debounce_ms / 1000, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        if self._loop is None:
            return
        task = self._loop.create_task(self.flush())
        self._tasks.add(task)
        task.add_done_callback(self._on_flush_done)

    def _on_flush_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background sync failed", exc_info=exc)
            self._set_status(SyncStatus.FAILED, str(exc))

    # ------------------------------------------------------------------
    # Push / bootstrap
    # ------------------------------------------------------------------

    def _set_status(self, status: SyncStatus, error: str | None = None) -> None:
        self.status = status
        self.last_error = error
        for listener in list(self._listeners):
            try:
                listener(status, error)
            except Exception:
                logger.exception("Sync status listener %s failed", listener)

    async def flush(self) -> SyncOutcome:
        """Push the current ledger now, subject to the in-flight and
        unchanged-payload guards."""
        if self._in_flight:
            logger.debug("Sync already in flight; skipping")
            return SyncOutcome.SKIPPED_IN_FLIGHT

        ledger = self.store.load()
        payload = ledger.serialize()
        if payload == self._last_payload:
            return SyncOutcome.SKIPPED_UNCHANGED

        self._in_flight = True
        self._set_status(SyncStatus.SYNCING)
        try:
            await self.remote.push(ledger)
        except UnauthorizedError as e:
            logger.warning("Sync rejected: %s", e)
            self._set_status(SyncStatus.FAILED, str(e))
            return SyncOutcome.UNAUTHORIZED
        except RemoteStoreError as e:
            # Local data stays as is; the next change retries.
            logger.warning("Sync failed: %s", e)
            self._set_status(SyncStatus.FAILED, str(e))
            return SyncOutcome.FAILED
        finally:
            self._in_flight = False

        self._last_payload = payload
        self.last_synced_at = datetime.now(timezone.utc)
        self._set_status(SyncStatus.SYNCED)
        logger.debug("Pushed ledger (%d bytes)", len(payload))
        return SyncOutcome.PUSHED

    async def bootstrap(self) -> Ledger:
        """Make remote authoritative once it exists; returns the active ledger."""
        try:
            snapshot = await self.remote.fetch()
        except RemoteStoreError as e:
            logger.warning("Initial fetch failed, keeping local ledger: %s", e)
            self._set_status(SyncStatus.FAILED, str(e))
            return self.store.load()

        self.bootstrapped = True
        if snapshot is not None:
            ledger = self.store.save(snapshot.ledger, silent=True)
            self._last_payload = ledger.serialize()
            self.last_synced_at = snapshot.updated_at
            self._set_status(SyncStatus.SYNCED)
            logger.info("Loaded remote ledger with %d workers", len(ledger.workers))
            return ledger

        logger.info("Remote is empty; pushing local ledger as initial value")
        await self.flush()
        return self.store.load()
