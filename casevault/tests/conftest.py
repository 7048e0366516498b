"""Shared test fixtures for the case vault test suite.

Uses an in-memory SQLite database with StaticPool so all sessions share the
same connection (committed data is visible across sessions), and a local
versioned blob store rooted in each test's tmp_path.
"""

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from casevault.database import Base, get_db
from casevault.main import app
from casevault.models import *  # noqa: ensure all models are loaded for create_all
from casevault.services.storage_service import get_blob_store
from casevault.storage.localfs import LocalBlobStore


# ---------------------------------------------------------------------------
# In-memory SQLite test engine (shared via StaticPool)
# ---------------------------------------------------------------------------

test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False,
)
TestSession = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@event.listens_for(test_engine.sync_engine, "connect")
def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


# ---------------------------------------------------------------------------
# Auto-use: create/drop tables for every test
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def db():
    """Yield a fresh AsyncSession for direct service-layer tests."""
    async with TestSession() as session:
        yield session


@pytest.fixture
def session_factory():
    """Session factory bound to the test engine, for tests needing several sessions."""
    return TestSession


@pytest.fixture
def store(tmp_path):
    """Local versioned store with its container already created."""
    return LocalBlobStore(str(tmp_path / "store"), container_name="case-content")


@pytest.fixture
async def client(store):
    """httpx AsyncClient wired to the FastAPI app with test DB and store overrides."""
    import httpx

    async def _override_get_db():
        async with TestSession() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_blob_store] = lambda: store

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Identity helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def ids():
    """The deployment's id obfuscator."""
    from casevault.core.ids import get_id_obfuscator
    return get_id_obfuscator()


@pytest.fixture
def auth_header():
    """Return a callable that builds an Authorization header for a user."""
    from casevault.core.auth import create_access_token

    def _build(user_id: int = 1, email: str = "analyst@example.org", org: str = "org-1") -> dict:
        token = create_access_token(user_id, email, org)
        return {"Authorization": f"Bearer {token}"}
    return _build


class RecordingAuditSink:
    """Audit sink that keeps events in memory."""

    def __init__(self):
        self.events: list[tuple[str, str, str]] = []

    async def record(self, action: str, actor_id: str, scope_id: str) -> None:
        self.events.append((action, actor_id, scope_id))


@pytest.fixture
def audit():
    return RecordingAuditSink()
