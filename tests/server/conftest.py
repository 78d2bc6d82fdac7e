"""Pytest fixtures for Chat Attribution Server tests."""

import os
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Require TEST_DATABASE_URL for integration tests
_test_db_url = os.environ.get("TEST_DATABASE_URL")
if _test_db_url:
    os.environ["DATABASE_URL"] = _test_db_url

from chatattribution.server.database import get_stores  # noqa: E402
from chatattribution.server.main import app  # noqa: E402
from chatattribution.server.stores import StoreBundle  # noqa: E402

SCHEMA_SQL = Path(__file__).resolve().parents[2] / "sql" / "schema.sql"


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip database-backed tests when no test database is configured."""
    if _test_db_url:
        return
    skip = pytest.mark.skip(reason="TEST_DATABASE_URL not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def stores(leads, conversations, conversions) -> StoreBundle:
    """In-memory stores bundled the way the server binds them per request."""
    return StoreBundle(leads=leads, conversations=conversations, conversions=conversions)


@pytest_asyncio.fixture
async def client(stores: StoreBundle) -> AsyncIterator[AsyncClient]:
    """Create an async HTTP client backed by in-memory stores."""
    app.dependency_overrides[get_stores] = lambda: stores

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def pool() -> AsyncIterator[Any]:
    """Create a connection pool for tests."""
    from psycopg_pool import AsyncConnectionPool

    from chatattribution.server.config import settings

    pool = AsyncConnectionPool(settings.database_url, open=False, min_size=1, max_size=5)
    await pool.open(wait=True, timeout=10)

    yield pool

    await pool.close()


@pytest_asyncio.fixture
async def conn(pool: Any) -> AsyncIterator[Any]:
    """Get a connection with the schema applied and test data cleaned up."""
    async with pool.connection() as conn:
        await conn.execute(SCHEMA_SQL.read_text())
        await conn.execute("DELETE FROM agent_conversions")
        await conn.execute("DELETE FROM leads")
        await conn.execute("DELETE FROM messages")
        await conn.execute("DELETE FROM conversations")

        yield conn
