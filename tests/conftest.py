"""Pytest configuration and fixtures for helpdesk.

Every test gets a fresh in-memory SQLite database (aiosqlite) with the full
schema. HTTP tests run helpdesk.main.create_app() over ASGITransport with the
database dependencies pointed at that database.
"""

import os

# Settings are read lazily; these must be in place before the first get_settings().
TEST_SYSTEM_KEY = "test-system-key"
os.environ["SYSTEM_API_KEY"] = TEST_SYSTEM_KEY
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DATABASE_AUTO_CREATE"] = "false"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import helpdesk.infrastructure.persistence.models  # noqa: E402,F401
from helpdesk.core import tenant_context  # noqa: E402
from helpdesk.core.config import get_settings  # noqa: E402
from helpdesk.infrastructure.persistence.database import (  # noqa: E402
    Base,
    build_session_factory,
    get_db,
    get_db_transactional,
)
from helpdesk.shared.context import clear_current_actor  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_context():
    """Start and end every test with no tenant, no system flag and no actor."""
    get_settings.cache_clear()
    tenant_context.clear()
    clear_current_actor()
    yield
    tenant_context.clear()
    clear_current_actor()


@pytest.fixture
async def engine() -> AsyncEngine:
    """In-memory SQLite engine with all tables created. One connection, shared."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
async def db_session(session_factory) -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(session_factory) -> AsyncClient:
    """Async HTTP client against a fresh FastAPI app bound to the test database."""
    from helpdesk.main import create_app

    app = create_app()

    async def _get_db():
        async with session_factory() as session:
            yield session

    async def _get_db_transactional():
        async with session_factory() as session:
            async with session.begin():
                yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_db_transactional] = _get_db_transactional
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def system_headers() -> dict[str, str]:
    """Headers that put a request in system-admin mode."""
    return {"X-System-Key": TEST_SYSTEM_KEY}
