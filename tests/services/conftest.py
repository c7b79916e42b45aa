"""Service test fixtures — a real session manager on in-memory SQLite, plus seed helpers.

Invariants:
    - Each test gets its own empty database; schema from Base.metadata
    - The module-level db_manager is swapped for the test one, so routes go through
      the production get_db (rollback and error mapping included)
    - Tokens are signed with a fixed test secret; auth_headers(user) signs for any seeded user

Design Decisions:
    - StaticPool: every session in a test shares the single in-memory connection
    - Users and books are seeded through the stores, never raw SQL
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

import shelfshare.infrastructure.database as db_module
import shelfshare.models  # noqa: F401
from shelfshare.api.dependencies import get_token_service
from shelfshare.core.token_service import TokenService
from shelfshare.db.base import Base
from shelfshare.infrastructure.book_store import SqlBookStore
from shelfshare.infrastructure.database import DatabaseSessionManager
from shelfshare.infrastructure.user_store import SqlUserStore
from shelfshare.main import app

TEST_SECRET = "fixture-secret-0123456789abcdef0123456789"


@pytest.fixture
async def manager(monkeypatch):
    test_manager = DatabaseSessionManager(
        "sqlite+aiosqlite://", poolclass=StaticPool,
    )
    async with test_manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    monkeypatch.setattr(db_module, "db_manager", test_manager)
    yield test_manager
    await test_manager.dispose()


@pytest.fixture
async def test_db(manager):
    async with manager.session() as session:
        yield session


@pytest.fixture
def tokens():
    return TokenService(TEST_SECRET)


@pytest.fixture
async def client(manager, tokens):
    app.dependency_overrides[get_token_service] = lambda: tokens
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(test_db):
    async def _make(username: str):
        return await SqlUserStore(test_db).create(
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
        )
    return _make


@pytest.fixture
def make_book(test_db):
    async def _make(owner, title: str = "Dune"):
        return await SqlBookStore(test_db).create(owner_id=owner.id, title=title)
    return _make


@pytest.fixture
def auth_headers(tokens):
    def _headers(user) -> dict:
        token = tokens.issue(user.id, user.email, user.username)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
async def owner(make_user):
    return await make_user("owner")


@pytest.fixture
async def borrower(make_user):
    return await make_user("borrower")


@pytest.fixture
async def book(make_book, owner):
    return await make_book(owner)
