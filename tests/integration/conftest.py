"""Integration-test fixtures.

These tests talk to the PostgreSQL configured in settings (DATABASE_URL or
DATABASE_HOST/...). All tests share a single event loop so the engine pool
built by init_app_state() stays valid for the whole session. When the
database is unreachable the whole directory is skipped.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError

from src.main import app, close_app_state, init_app_state


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client wired to the real database."""
    try:
        await init_app_state(app)
    except (OSError, SQLAlchemyError) as exc:
        pytest.skip(f"database not reachable: {exc.__class__.__name__}")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await close_app_state(app)
