"""Ledger blob endpoints used by the sync client."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, HTTPException, status

from house_help.api.dependencies import DbSession, OwnerKey
from house_help.api.schemas import ErrorResponse, LedgerBlobResponse
from house_help.services.blob_store import SqlBlobStore

router = APIRouter(prefix="/ledger", tags=["ledger"])


@router.get(
    "",
    response_model=LedgerBlobResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_ledger(db: DbSession, owner_key: OwnerKey) -> LedgerBlobResponse:
    """Fetch the signed-in owner's ledger."""
    record = await SqlBlobStore(db).get(owner_key)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No ledger stored yet",
        )
    return LedgerBlobResponse.model_validate(record)


@router.put(
    "",
    response_model=LedgerBlobResponse,
    responses={401: {"model": ErrorResponse}},
)
async def put_ledger(
    db: DbSession,
    owner_key: OwnerKey,
    payload: Annotated[dict[str, Any], Body()],
) -> LedgerBlobResponse:
    """Overwrite the signed-in owner's ledger with the given document."""
    record = await SqlBlobStore(db).put(owner_key, payload)
    await db.commit()
    return LedgerBlobResponse.model_validate(record)
