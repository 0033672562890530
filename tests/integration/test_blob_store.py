"""Blob store and remote adapter tests against a real database."""

from __future__ import annotations

import pytest
from httpx import ASGITransport

from house_help.ledger import InMemoryBackend, Ledger, LedgerStore, Worker
from house_help.services.blob_store import SqlBlobStore
from house_help.services.remote import BlobStoreRemote, HttpLedgerRemote, UnauthorizedError
from house_help.services.sync import SyncOutcome, SyncReconciler, SyncStatus

from .conftest import identity

pytestmark = pytest.mark.asyncio


def ledger_with(*names: str) -> Ledger:
    return Ledger(workers=[Worker(id=f"w_{name}", name=name) for name in names])


class TestSqlBlobStore:
    """Test whole-document get/put."""

    async def test_get_missing(self, db_session):
        assert await SqlBlobStore(db_session).get("nobody") is None

    async def test_put_then_get(self, db_session):
        store = SqlBlobStore(db_session)
        await store.put("owner", ledger_with("Asha"))
        await db_session.commit()

        record = await store.get("owner")
        assert record.key == "owner"
        assert record.data["version"] == 3
        assert [w.name for w in record.ledger.workers] == ["Asha"]
        assert record.updated_at is not None

    async def test_last_write_wins(self, db_session):
        store = SqlBlobStore(db_session)
        await store.put("owner", ledger_with("Asha"))
        await store.put("owner", ledger_with("Binu"))

        record = await store.get("owner")
        assert [w.name for w in record.ledger.workers] == ["Binu"]

    async def test_put_normalizes_documents(self, db_session):
        store = SqlBlobStore(db_session)
        record = await store.put("owner", {"workers": [{"id": "w1", "name": "Asha"}], "junk": 1})

        assert record.data["monthLocks"] == []
        assert record.data["salaryConfigs"] == []
        assert "junk" not in record.data


class TestBlobStoreRemote:
    """Test the in-process remote."""

    async def test_fetch_and_push(self, session_factory):
        remote = BlobStoreRemote(session_factory, "owner")
        assert await remote.fetch() is None

        await remote.push(ledger_with("Asha"))

        snapshot = await remote.fetch()
        assert [w.name for w in snapshot.ledger.workers] == ["Asha"]

    async def test_requires_owner(self, session_factory):
        remote = BlobStoreRemote(session_factory, None)
        with pytest.raises(UnauthorizedError):
            await remote.fetch()
        with pytest.raises(UnauthorizedError):
            await remote.push(Ledger())


class TestHttpLedgerRemote:
    """Test the HTTP remote against the API."""

    async def test_round_trip(self, app):
        remote = HttpLedgerRemote(
            "http://test", headers=identity(), transport=ASGITransport(app=app)
        )
        assert await remote.fetch() is None

        assert await remote.push(ledger_with("Asha")) is not None

        snapshot = await remote.fetch()
        assert [w.name for w in snapshot.ledger.workers] == ["Asha"]
        assert snapshot.updated_at is not None

    async def test_unauthorized(self, app):
        remote = HttpLedgerRemote("http://test", transport=ASGITransport(app=app))
        with pytest.raises(UnauthorizedError):
            await remote.push(Ledger())
        with pytest.raises(UnauthorizedError):
            await remote.fetch()

    async def test_reconciler_over_http(self, app):
        transport = ASGITransport(app=app)
        first = LedgerStore(InMemoryBackend())
        first.save(ledger_with("Asha"))

        # First session uploads its ledger to the empty remote.
        uploader = SyncReconciler(
            first, HttpLedgerRemote("http://test", headers=identity(), transport=transport)
        )
        await uploader.bootstrap()
        assert uploader.status == SyncStatus.SYNCED

        # A second admin session adopts the stored ledger.
        second = LedgerStore(InMemoryBackend())
        downloader = SyncReconciler(
            second,
            HttpLedgerRemote(
                "http://test", headers=identity("partner@example.com"), transport=transport
            ),
        )
        ledger = await downloader.bootstrap()

        assert [w.name for w in ledger.workers] == ["Asha"]
        assert await downloader.flush() == SyncOutcome.SKIPPED_UNCHANGED
