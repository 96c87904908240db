"""Shared test fixtures with in-memory SQLite and fake adapters."""
import os
import tempfile
import uuid

# Settings are read at import time; point side effects somewhere harmless first.
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="portfolio-uploads-"))
os.environ.setdefault("REDIS_URL", "redis://127.0.0.1:1/0")
os.environ["ADMIN_EMAIL"] = "owner@test.com"
os.environ["ADMIN_PASSWORD"] = ""
os.environ["APP_ENV"] = "test"
os.environ["MEDIA_BACKEND"] = "local"
os.environ["GITHUB_USERNAME"] = "octocat"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.ext.compiler import compiles

from portfolio_api.api.websocket import manager as ws_manager
from portfolio_api.database import build_engine, log_slow_queries
from portfolio_api.dependencies import get_db, get_github_client, get_mailer, get_media_store
from portfolio_api.integrations.media.base import MediaStoreError, StoredAsset
from portfolio_api.main import app
from portfolio_api.middleware import rate_limiter
from portfolio_api.middleware.error_handler import UpstreamUnavailable
from portfolio_api.models.base import Base
from portfolio_api.models.user import User, UserRole
from portfolio_api.services.auth_service import create_access_token, hash_password
from portfolio_api.services.mail_service import MailConfig

# --- SQLite compatibility: compile PostgreSQL types for SQLite ---

@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"


@compiles(UUID, "sqlite")
def _compile_uuid_sqlite(type_, compiler, **kw):
    return "VARCHAR(36)"


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = build_engine(TEST_DATABASE_URL)
log_slow_queries(test_engine)
test_session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@event.listens_for(test_engine.sync_engine, "connect")
def _set_sqlite_pragma(dbapi_connection, _connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture(autouse=True)
async def setup_db():
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db():
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture(autouse=True)
def _reset_shared_state():
    rate_limiter._memory_store.clear()
    ws_manager.active_connections.clear()
    yield


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session():
    async with test_session_factory() as session:
        yield session


# --- Fake adapters ---

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


class FakeMediaStore:
    """Records every save/delete; deletes can be made to fail."""

    def __init__(self):
        self.saved: list[StoredAsset] = []
        self.deleted: list[tuple[str, str | None]] = []
        self.fail_delete = False

    async def save(self, data: bytes, filename: str, content_type: str, folder: str) -> StoredAsset:
        asset = StoredAsset(url=f"Uploads/{folder}/{filename}", public_id=f"{folder}/{filename}")
        self.saved.append(asset)
        return asset

    async def delete(self, url: str, public_id: str | None = None) -> None:
        if self.fail_delete:
            raise MediaStoreError(f"cannot delete {url}")
        self.deleted.append((url, public_id))

    async def close(self) -> None:
        return None


class FakeMailer:
    def __init__(self):
        self.config = MailConfig(host="localhost", port=25, owner_email="owner@test.com")
        self.sent: list[tuple[str, str]] = []
        self.fail_for: set[str] = set()

    async def send(self, to: str, subject: str, html_body: str) -> None:
        if to in self.fail_for:
            raise OSError(f"SMTP refused {to}")
        self.sent.append((to, subject))


class FakeGitHubClient:
    """Canned GitHub responses; ``fail`` makes the mandatory calls raise."""

    def __init__(self):
        self.calls = 0
        self.fail: Exception | None = None
        self.fail_events = False
        self.user = {"login": "octocat", "public_repos": 3, "followers": 10, "following": 2}
        self.repos = [
            {"name": "alpha", "stargazers_count": 5, "forks_count": 1, "fork": False, "language": "Python"},
            {"name": "beta", "stargazers_count": 9, "forks_count": 0, "fork": False, "language": "Go"},
            {"name": "gamma", "stargazers_count": 50, "forks_count": 3, "fork": True, "language": "C"},
        ]
        self.languages = {
            "alpha": {"Python": 600, "Shell": 100},
            "beta": {"Go": 300},
            "gamma": {},
        }
        self.events = [
            {"type": "PushEvent", "repo": {"name": "octocat/alpha"}, "created_at": "2026-01-02T00:00:00Z",
             "payload": {"ref": "refs/heads/main", "commits": [{}, {}]}},
            {"type": "WatchEvent", "repo": {"name": "octocat/beta"}, "created_at": "2026-01-03T00:00:00Z",
             "payload": {"action": "started"}},
        ]

    async def get_user(self, username):
        self.calls += 1
        if self.fail:
            raise self.fail
        return self.user

    async def list_repos(self, username):
        self.calls += 1
        if self.fail:
            raise self.fail
        return self.repos

    async def get_repo_languages(self, username, repo):
        self.calls += 1
        return self.languages.get(repo, {})

    async def list_events(self, username):
        self.calls += 1
        if self.fail_events:
            raise UpstreamUnavailable("events down")
        return self.events

    async def close(self):
        return None


@pytest.fixture(autouse=True)
def media_store():
    store = FakeMediaStore()
    app.dependency_overrides[get_media_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_media_store, None)


@pytest.fixture(autouse=True)
def mailer():
    fake = FakeMailer()
    app.dependency_overrides[get_mailer] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_mailer, None)


@pytest.fixture(autouse=True)
def github():
    fake = FakeGitHubClient()
    app.dependency_overrides[get_github_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_github_client, None)


# --- Users ---

async def _create_test_user(
    db: AsyncSession,
    role: UserRole = UserRole.ADMIN,
    email: str | None = None,
    password: str = "testpass123",
) -> tuple[User, str]:
    """Create a test user and return (user, access_token)."""
    user = User(
        id=uuid.uuid4(),
        email=email or f"{role.value}_{uuid.uuid4().hex[:8]}@test.com",
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    token = create_access_token(str(user.id), user.email, role.value)
    return user, token


@pytest.fixture
async def admin_auth(db_session: AsyncSession) -> tuple[User, dict]:
    """Return (admin_user, auth_headers)."""
    user, token = await _create_test_user(db_session, UserRole.ADMIN)
    return user, {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def user_auth(db_session: AsyncSession) -> tuple[User, dict]:
    user, token = await _create_test_user(db_session, UserRole.USER)
    return user, {"Authorization": f"Bearer {token}"}
