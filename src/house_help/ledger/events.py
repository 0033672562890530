"""Change notification for ledger writes.

The store owns a ChangeNotifier and publishes a LedgerChanged event after
every non-silent save. Events carry no delta: subscribers re-read the
ledger. Subscribers are isolated, so a failing one never blocks the others
or the write that triggered it.

Usage:
    notifier = ChangeNotifier()
    notifier.subscribe(on_change)
    notifier.emit(LedgerChanged(storage_key="...", ts=now_ms()))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerChanged:
    """Emitted after a ledger write."""

    storage_key: str
    ts: int  # epoch milliseconds


@runtime_checkable
class ChangeHandler(Protocol):
    def __call__(self, event: LedgerChanged) -> None:
        ...


class ChangeNotifier:
    """Synchronous observer list for LedgerChanged events."""

    def __init__(self) -> None:
        self._handlers: list[ChangeHandler] = []

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        """Register a handler; returns a callable that unsubscribes it."""
        self._handlers.append(handler)
        return lambda: self.unsubscribe(handler)

    def unsubscribe(self, handler: ChangeHandler) -> None:
        self._handlers = [h for h in self._handlers if h is not handler]

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def emit(self, event: LedgerChanged) -> list[Exception]:
        """Deliver the event to every handler.

        Returns the exceptions raised by handlers (already logged).
        """
        errors: list[Exception] = []
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                logger.exception("Ledger change handler %s failed", handler)
                errors.append(e)
        return errors
