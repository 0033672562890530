"""Pytest fixtures for house help tracker tests."""

from __future__ import annotations

import itertools
from datetime import date

import pytest

from house_help.ledger import InMemoryBackend, LedgerStore
from house_help.services.tracker import WorkerTracker

# June 2024 has 30 days.
TODAY = date(2024, 6, 15)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock():
    """Monotonic epoch-ms clock, one second per call."""
    counter = itertools.count(1_717_200_000_000, 1000)
    return lambda: next(counter)


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def store(backend, clock) -> LedgerStore:
    return LedgerStore(backend, clock=clock)


@pytest.fixture
def tracker(store, today) -> WorkerTracker:
    return WorkerTracker(store, today=lambda: today)


@pytest.fixture
def worker(tracker):
    return tracker.add_worker("Asha", "Morning")
