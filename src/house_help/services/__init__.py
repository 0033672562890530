"""House help tracker services."""

from house_help.services.autofill import AutoFiller
from house_help.services.blob_store import BlobRecord, SqlBlobStore
from house_help.services.identity import OwnerResolver
from house_help.services.remote import (
    BlobStoreRemote,
    HttpLedgerRemote,
    LedgerRemote,
    RemoteSnapshot,
    RemoteStoreError,
    UnauthorizedError,
)
from house_help.services.share import (
    SalarySlip,
    ShareLinkError,
    ShareLinkInfo,
    ShareLinkRegistry,
    ShareLinkService,
    ShareProjector,
    ShareTarget,
)
from house_help.services.sync import SyncOutcome, SyncReconciler, SyncStatus
from house_help.services.tracker import MonthSummary, WorkerNotFoundError, WorkerTracker

__all__ = [
    "AutoFiller",
    "BlobRecord",
    "BlobStoreRemote",
    "HttpLedgerRemote",
    "LedgerRemote",
    "MonthSummary",
    "OwnerResolver",
    "RemoteSnapshot",
    "RemoteStoreError",
    "SalarySlip",
    "ShareLinkError",
    "ShareLinkInfo",
    "ShareLinkRegistry",
    "ShareLinkService",
    "ShareProjector",
    "ShareTarget",
    "SqlBlobStore",
    "SyncOutcome",
    "SyncReconciler",
    "SyncStatus",
    "UnauthorizedError",
    "WorkerNotFoundError",
    "WorkerTracker",
]
