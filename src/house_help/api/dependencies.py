"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from house_help.config import Settings, get_settings
from house_help.database import init_db
from house_help.services.identity import OwnerResolver


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


AppSettings = Annotated[Settings, Depends(get_settings)]


def get_owner_resolver(settings: AppSettings) -> OwnerResolver:
    return OwnerResolver.from_settings(settings)


async def get_owner_key(
    request: Request,
    settings: AppSettings,
    resolver: Annotated[OwnerResolver, Depends(get_owner_resolver)],
) -> str:
    """Resolve the owner key from the identity header set by the auth proxy."""
    email = request.headers.get(settings.identity_header)
    owner_key = resolver.resolve(email)
    if not owner_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: please sign in",
        )
    return owner_key


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
OwnerKey = Annotated[str, Depends(get_owner_key)]
