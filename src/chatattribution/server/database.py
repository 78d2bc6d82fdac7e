"""Database connection pool management."""

from collections.abc import AsyncIterator
from typing import Annotated, Any

from fastapi import Depends, Request
from psycopg_pool import AsyncConnectionPool

from chatattribution.server.stores import StoreBundle


def get_pool(request: Request) -> AsyncConnectionPool[Any]:
    """Get the connection pool from app state."""
    return request.app.state.pool


Pool = Annotated[AsyncConnectionPool[Any], Depends(get_pool)]


async def get_stores(pool: Pool) -> AsyncIterator[StoreBundle]:
    """Bind the engine's stores to one pooled connection for the request."""
    async with pool.connection() as conn:
        yield StoreBundle.for_connection(conn)


Stores = Annotated[StoreBundle, Depends(get_stores)]
