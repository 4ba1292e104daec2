"""
Test infrastructure for the Newsdesk API.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- The app's get_db dependency is overridden so every test-time request uses
  the test session factory rather than the production one.
- All tables are created fresh before each test and dropped after.
- Caching stays on: the shared cache singleton gets a fresh in-process
  MemoryCacheBackend for every test, so cache hits and invalidation are
  exercised without Redis.
- Service-level tests use store subclasses that count calls, which is how
  tests observe whether a read was served from the cache.
"""
from collections import Counter

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from newsdesk.cache import CacheManager, MemoryCacheBackend, cache
from newsdesk.database import Base, commit, get_db, rollback
from newsdesk.main import app
from newsdesk.repositories import SqlCommentStore, SqlNewsStore
from newsdesk.services.comment_service import CommentService
from newsdesk.services.news_service import NewsService

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override: replace production get_db with the test session factory
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await commit(session)
        except Exception:
            await rollback(session)
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Call-counting stores
# ---------------------------------------------------------------------------

class CountingNewsStore(SqlNewsStore):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db)
        self.calls: Counter = Counter()

    async def find_by_id(self, news_id):
        self.calls["find_by_id"] += 1
        return await super().find_by_id(news_id)

    async def find_page(self, page, limit):
        self.calls["find_page"] += 1
        return await super().find_page(page, limit)

    async def search_by_term(self, term, page, limit):
        self.calls["search_by_term"] += 1
        return await super().search_by_term(term, page, limit)

    async def save(self, news):
        self.calls["save"] += 1
        return await super().save(news)

    async def delete_by_id(self, news_id):
        self.calls["delete_by_id"] += 1
        return await super().delete_by_id(news_id)


class CountingCommentStore(SqlCommentStore):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db)
        self.calls: Counter = Counter()

    async def find_page_by_news_id(self, news_id, page, limit):
        self.calls["find_page_by_news_id"] += 1
        return await super().find_page_by_news_id(news_id, page, limit)

    async def save_all(self, comments):
        self.calls["save_all"] += 1
        return await super().save_all(comments)

    async def delete_all_by_news_id(self, news_id):
        self.calls["delete_all_by_news_id"] += 1
        return await super().delete_all_by_news_id(news_id)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def fresh_cache():
    """Give the shared cache singleton an empty in-process backend."""
    cache._backend = MemoryCacheBackend()
    cache._hits = 0
    cache._misses = 0
    yield cache
    cache._backend = None


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """
    Yield a live AsyncSession for tests that call services or stores
    directly.  Writes are flushed, never committed.
    """
    async with async_session_test() as session:
        yield session


@pytest.fixture
def news_store(db_session: AsyncSession) -> CountingNewsStore:
    return CountingNewsStore(db_session)


@pytest.fixture
def comment_store(db_session: AsyncSession) -> CountingCommentStore:
    return CountingCommentStore(db_session)


@pytest.fixture
def cache_manager() -> CacheManager:
    return CacheManager(MemoryCacheBackend())


@pytest.fixture
def news_service(news_store, comment_store, cache_manager) -> NewsService:
    return NewsService(news_store, comment_store, cache_manager)


@pytest.fixture
def comment_service(comment_store, cache_manager) -> CommentService:
    return CommentService(comment_store, cache_manager)


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """Yield an httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
