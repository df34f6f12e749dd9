"""Shared test fixtures.

Unit-level stores run against a throw-away SQLite file (aiosqlite) so the
unique-email constraint, RETURNING and transactions are real.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.ua_common.database import build_engine, build_session_factory, init_schema
from src.ua_gateway.auth.password import PasswordHasher
from src.ua_user.api.dependencies import get_account_service
from src.ua_user.application.service import AccountService
from src.ua_user.infrastructure.persistence import UserRepository


@pytest.fixture
async def engine(tmp_path):
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")
    await init_schema(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def repo(engine) -> UserRepository:
    return UserRepository(build_session_factory(engine))


@pytest.fixture
def hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def service(repo: UserRepository, hasher: PasswordHasher) -> AccountService:
    return AccountService(repo, hasher)


@pytest.fixture
async def client(service: AccountService) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints against the SQLite-backed service."""
    app.dependency_overrides[get_account_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
