"""FastAPI dependency injection providers."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session from the app's session factory."""
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield session


def get_custody_client(request: Request):
    """Return the custodial provider client from app state."""
    return request.app.state.custody_client


def get_push_sender(request: Request):
    """Return the push sender from app state (None disables push)."""
    return getattr(request.app.state, "push_sender", None)


def get_catalog_cache(request: Request):
    return getattr(request.app.state, "catalog_cache", None)


# Type aliases for dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]
CustodyClientDep = Annotated[object, Depends(get_custody_client)]
PushSenderDep = Annotated[object, Depends(get_push_sender)]
CatalogCacheDep = Annotated[object, Depends(get_catalog_cache)]
