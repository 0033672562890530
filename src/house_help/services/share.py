"""Share links and the read-only salary slip behind them.

A share link is an unguessable token bound to (owner key, worker id). It
resolves only while it is not revoked and not expired. Resolving it loads
the owner's stored ledger and projects one worker's month. Nothing here
writes to the ledger, and month locks do not affect the projection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable
from uuid import uuid4

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from house_help.calculators.salary import calculate_salary, count_month_totals, month_status_dates
from house_help.calculators.types import AttendanceTotals, SalaryResult
from house_help.ledger.dates import days_in_month_from_key, is_month_key, month_key_of, yesterday_iso
from house_help.ledger.schema import Deduction, Ledger, ShiftStatus
from house_help.models import WorkerShareLink
from house_help.services.blob_store import SqlBlobStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_token() -> str:
    """32 hex characters from a random UUID."""
    return uuid4().hex


class ShareLinkError(Exception):
    """Raised when a share link cannot be created."""


@dataclass(frozen=True)
class ShareLinkInfo:
    token: str
    url: str
    expires_at: datetime | None


@dataclass(frozen=True)
class ShareTarget:
    owner_key: str
    worker_id: str


@dataclass(frozen=True)
class SalarySlip:
    """Read-only view of one worker's month."""

    worker_id: str
    worker_name: str
    month_key: str
    days_in_month: int
    totals: AttendanceTotals
    dates: dict[ShiftStatus, list[str]]
    deductions: list[Deduction]
    salary: SalaryResult
    details_until: str  # day key, yesterday


class ShareLinkRegistry:
    """Token registry backed by the ``worker_share_links`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_token(self, token: str) -> WorkerShareLink | None:
        if not token:
            return None
        return await self.session.get(WorkerShareLink, token)

    async def list_for_worker(
        self, owner_key: str, worker_id: str, limit: int = 5
    ) -> list[WorkerShareLink]:
        """Most recent links first."""
        result = await self.session.execute(
            select(WorkerShareLink)
            .where(
                WorkerShareLink.owner_key == owner_key,
                WorkerShareLink.worker_id == worker_id,
            )
            .order_by(WorkerShareLink.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create(
        self, owner_key: str, worker_id: str, expires_at: datetime | None
    ) -> WorkerShareLink:
        link = WorkerShareLink(
            token=make_token(),
            owner_key=owner_key,
            worker_id=worker_id,
            expires_at=expires_at,
            revoked=False,
            created_at=utcnow(),
        )
        self.session.add(link)
        await self.session.flush()
        return link

    async def revoke(self, token: str, owner_key: str) -> bool:
        """Revoke one of the owner's tokens; False if it is not theirs."""
        result = await self.session.execute(
            update(WorkerShareLink)
            .where(WorkerShareLink.token == token, WorkerShareLink.owner_key == owner_key)
            .values(revoked=True)
        )
        return bool(result.rowcount)


class ShareLinkService:
    """Creates and revokes share links for an owner."""

    def __init__(
        self,
        registry: ShareLinkRegistry,
        *,
        app_url: str | None,
        now: Callable[[], datetime] = utcnow,
    ):
        self.registry = registry
        self.app_url = app_url.rstrip("/") if app_url else None
        self.now = now

    def _url(self, token: str) -> str:
        return f"{self.app_url}/share/{token}"

    async def create_link(
        self, owner_key: str, worker_id: str, days_valid: int = 30
    ) -> ShareLinkInfo:
        """Return the worker's active link, minting one if there is none."""
        if not self.app_url:
            raise ShareLinkError("APP_URL is not configured (e.g. https://yourdomain.com)")

        now = self.now()
        for link in await self.registry.list_for_worker(owner_key, worker_id):
            if link.is_usable(now):
                return ShareLinkInfo(
                    token=link.token, url=self._url(link.token), expires_at=link.expires_at
                )

        expires_at = now + timedelta(days=days_valid) if days_valid > 0 else None
        link = await self.registry.create(owner_key, worker_id, expires_at)
        logger.info("Created share link for worker %s", worker_id)
        return ShareLinkInfo(token=link.token, url=self._url(link.token), expires_at=expires_at)

    async def revoke_link(self, token: str, owner_key: str) -> bool:
        revoked = await self.registry.revoke(token, owner_key)
        if revoked:
            logger.info("Revoked share link for owner %s", owner_key)
        return revoked


def build_salary_slip(
    ledger: Ledger, worker_id: str, month_key: str, today: date
) -> SalarySlip | None:
    """Project one worker's month out of a full ledger."""
    worker = next((w for w in ledger.workers if w.id == worker_id), None)
    if worker is None:
        return None

    entries = [e for e in ledger.entries if e.worker_id == worker_id]
    config = next(
        (s for s in ledger.salary_configs if s.worker_id == worker_id and s.month_key == month_key),
        None,
    )
    deductions = [
        d for d in ledger.deductions if d.worker_id == worker_id and d.month_key == month_key
    ]
    totals = count_month_totals(entries, month_key)

    return SalarySlip(
        worker_id=worker.id,
        worker_name=worker.name,
        month_key=month_key,
        days_in_month=days_in_month_from_key(month_key),
        totals=totals,
        dates=month_status_dates(entries, month_key),
        deductions=sorted(deductions, key=lambda d: d.date_iso),
        salary=calculate_salary(
            month_key,
            totals,
            config.monthly_salary if config else 0,
            config.paid_off_allowance if config else 0,
            deductions,
        ),
        details_until=yesterday_iso(today),
    )


class ShareProjector:
    """Resolves share tokens to read-only salary slips."""

    def __init__(
        self,
        registry: ShareLinkRegistry,
        blob_store: SqlBlobStore,
        *,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = utcnow,
    ):
        self.registry = registry
        self.blob_store = blob_store
        self.today = today
        self.now = now

    async def resolve(self, token: str) -> ShareTarget | None:
        link = await self.registry.find_by_token(token)
        if link is None or not link.is_usable(self.now()):
            return None
        return ShareTarget(owner_key=link.owner_key, worker_id=link.worker_id)

    async def project(self, token: str, month_key: str | None = None) -> SalarySlip | None:
        """Salary slip for the token's worker; None for any unusable token."""
        target = await self.resolve(token)
        if target is None:
            return None

        record = await self.blob_store.get(target.owner_key)
        if record is None:
            return None

        today = self.today()
        if not is_month_key(month_key):
            month_key = month_key_of(today)
        return build_salary_slip(record.ledger, target.worker_id, month_key, today)
