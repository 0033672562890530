"""Remote ledger blob store backed by the ``app_blobs`` table."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from house_help.ledger.schema import Ledger, normalize_ledger
from house_help.models import AppBlob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlobRecord:
    """One owner's stored ledger."""

    key: str
    data: dict[str, Any]
    updated_at: datetime

    @property
    def ledger(self) -> Ledger:
        return normalize_ledger(self.data)


class SqlBlobStore:
    """Whole-document get/put keyed by owner key.

    ``put`` overwrites unconditionally: the latest write wins.
    The caller owns the transaction and commits.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, owner_key: str) -> BlobRecord | None:
        row = await self.session.get(AppBlob, owner_key)
        if row is None:
            return None
        return BlobRecord(key=row.key, data=row.data, updated_at=row.updated_at)

    async def put(self, owner_key: str, ledger: Ledger | dict[str, Any]) -> BlobRecord:
        document = normalize_ledger(ledger).to_document()
        updated_at = datetime.now(timezone.utc)

        row = await self.session.get(AppBlob, owner_key)
        if row is None:
            row = AppBlob(key=owner_key, data=document, updated_at=updated_at)
            self.session.add(row)
        else:
            row.data = document
            row.updated_at = updated_at
        await self.session.flush()

        logger.debug("Stored ledger blob for %s", owner_key)
        return BlobRecord(key=owner_key, data=document, updated_at=updated_at)
