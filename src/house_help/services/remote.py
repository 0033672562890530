"""Remote ledger adapters used by the sync reconciler.

A remote is already bound to one owner. Two implementations:

- HttpLedgerRemote talks to the ``/api/v1/ledger`` endpoints; the server
  resolves the owner from the authenticated request.
- BlobStoreRemote writes straight to the SQL blob store for an owner key
  resolved in-process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from house_help.ledger.schema import Ledger, normalize_ledger
from house_help.services.blob_store import SqlBlobStore

logger = logging.getLogger(__name__)


class RemoteStoreError(Exception):
    """Raised when the remote store cannot be read or written."""


class UnauthorizedError(RemoteStoreError):
    """Raised when no owner identity could be resolved."""


@dataclass(frozen=True)
class RemoteSnapshot:
    ledger: Ledger
    updated_at: datetime | None


@runtime_checkable
class LedgerRemote(Protocol):
    async def fetch(self) -> RemoteSnapshot | None:
        """Return the owner's stored ledger, or None if there is none yet."""
        ...

    async def push(self, ledger: Ledger) -> datetime | None:
        """Overwrite the owner's stored ledger; returns the server timestamp."""
        ...


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class HttpLedgerRemote:
    """Ledger remote over the HTTP API."""

    def __init__(
        self,
        base_url: str,
        *,
        authorization: str | None = None,
        headers: dict[str, str] | None = None,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._headers = dict(headers or {})
        auth = str(authorization or "").strip()
        if auth:
            self._headers["Authorization"] = auth
        self._timeout_s = timeout_s
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout_s,
            transport=self._transport,
        )

    @staticmethod
    def _check(response: httpx.Response) -> None:
        if response.status_code == 401:
            raise UnauthorizedError("Unauthorized: please sign in")
        if not response.is_success:
            raise RemoteStoreError(
                f"Remote store returned {response.status_code}: {response.text[:200]}"
            )

    @staticmethod
    def _json_body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise RemoteStoreError(
                f"Remote store returned a non-JSON body ({response.status_code})"
            ) from e
        if not isinstance(body, dict):
            raise RemoteStoreError("Remote store returned an unexpected body")
        return body

    async def fetch(self) -> RemoteSnapshot | None:
        try:
            async with self._client() as client:
                response = await client.get("/api/v1/ledger")
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"Fetch failed: {e}") from e

        if response.status_code == 404:
            return None
        self._check(response)

        body = self._json_body(response)
        if body.get("data") is None:
            return None
        return RemoteSnapshot(
            ledger=normalize_ledger(body["data"]),
            updated_at=_parse_timestamp(body.get("updated_at")),
        )

    async def push(self, ledger: Ledger) -> datetime | None:
        try:
            async with self._client() as client:
                response = await client.put("/api/v1/ledger", json=ledger.to_document())
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"Push failed: {e}") from e

        self._check(response)
        return _parse_timestamp(self._json_body(response).get("updated_at"))


class BlobStoreRemote:
    """Ledger remote writing directly to the SQL blob store."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        owner_key: str | None,
    ):
        self._session_factory = session_factory
        self._owner_key = owner_key

    def _require_owner(self) -> str:
        if not self._owner_key:
            raise UnauthorizedError("Unauthorized: no owner identity")
        return self._owner_key

    async def fetch(self) -> RemoteSnapshot | None:
        owner_key = self._require_owner()
        try:
            async with self._session_factory() as session:
                record = await SqlBlobStore(session).get(owner_key)
        except SQLAlchemyError as e:
            raise RemoteStoreError(f"Fetch failed: {e}") from e

        if record is None:
            return None
        return RemoteSnapshot(ledger=record.ledger, updated_at=record.updated_at)

    async def push(self, ledger: Ledger) -> datetime | None:
        owner_key = self._require_owner()
        try:
            async with self._session_factory() as session:
                record = await SqlBlobStore(session).put(owner_key, ledger)
                await session.commit()
        except SQLAlchemyError as e:
            raise RemoteStoreError(f"Push failed: {e}") from e
        return record.updated_at
