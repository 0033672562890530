"""Share-link management and the public salary slip."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, status

from house_help.api.dependencies import AppSettings, DbSession, OwnerKey
from house_help.api.schemas import (
    ErrorResponse,
    RevokeResponse,
    SalarySlipResponse,
    ShareLinkResponse,
)
from house_help.services.blob_store import SqlBlobStore
from house_help.services.share import (
    ShareLinkError,
    ShareLinkRegistry,
    ShareLinkService,
    ShareProjector,
)

router = APIRouter(tags=["share-links"])
public_router = APIRouter(tags=["share"])


@router.post(
    "/workers/{worker_id}/share-link",
    response_model=ShareLinkResponse,
    responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def create_share_link(
    db: DbSession,
    owner_key: OwnerKey,
    settings: AppSettings,
    worker_id: Annotated[str, Path(min_length=1)],
    days_valid: Annotated[int | None, Query(ge=0, le=3650)] = None,
) -> ShareLinkResponse:
    """Return the worker's active share link, creating one if needed."""
    service = ShareLinkService(ShareLinkRegistry(db), app_url=settings.app_url)
    try:
        info = await service.create_link(
            owner_key,
            worker_id,
            settings.share_link_days if days_valid is None else days_valid,
        )
    except ShareLinkError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    await db.commit()
    return ShareLinkResponse(token=info.token, url=info.url, expires_at=info.expires_at)


@router.post(
    "/share-links/{token}/revoke",
    response_model=RevokeResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def revoke_share_link(
    db: DbSession,
    owner_key: OwnerKey,
    token: Annotated[str, Path(min_length=1)],
) -> RevokeResponse:
    """Revoke one of the signed-in owner's share links."""
    service = ShareLinkService(ShareLinkRegistry(db), app_url=None)
    if not await service.revoke_link(token, owner_key):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Share link not found",
        )
    await db.commit()
    return RevokeResponse(revoked=True)


@public_router.get(
    "/share/{token}",
    response_model=SalarySlipResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_salary_slip(
    db: DbSession,
    token: Annotated[str, Path()],
    month: Annotated[str | None, Query()] = None,
) -> SalarySlipResponse:
    """Read-only salary slip for a share token. No sign-in required."""
    projector = ShareProjector(ShareLinkRegistry(db), SqlBlobStore(db))
    slip = await projector.project(token, month)
    if slip is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not found",
        )
    return SalarySlipResponse.from_slip(slip)
