"""
Snippetbox - Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_snippets / mock_users: Model doubles with canned data
    ├── application: Application wired to the doubles and a MemoryStore
    ├── test_client: HTTPX AsyncClient (https, so Secure cookies round-trip)
    └── session_factory: Real SQLite schema for model tests (aiosqlite)

Canned data:
    VALID_SNIPPET_ID  → the only snippet the mock knows
    MOCK_EMAIL / MOCK_PASSWORD → the only credentials that authenticate
    DUPLICATE_EMAIL   → signup with this address hits the unique constraint
"""

import os
import re
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Keep .env and the developer's environment out of the tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

from snippetbox.application import Application  # noqa: E402
from snippetbox.config import Settings  # noqa: E402
from snippetbox.database import Base, create_session_factory  # noqa: E402
from snippetbox.exceptions import (  # noqa: E402
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
)
from snippetbox.main import create_app  # noqa: E402
from snippetbox.sessions import MemoryStore, SessionManager  # noqa: E402
from snippetbox.templates import new_template_cache  # noqa: E402

VALID_SNIPPET_ID = UUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8")
MOCK_USER_ID = UUID("c9bf9e57-1685-4c89-bafb-ff5af830be8a")

MOCK_NAME = "Falso"
MOCK_EMAIL = "falso@example.com"
MOCK_PASSWORD = "pa$$w0rd8923"
DUPLICATE_EMAIL = "kopi@example.com"

CSRF_RX = re.compile(r'<input type="hidden" name="csrf_token" value="(.+?)">')


def extract_csrf_token(html: str) -> str:
    """Pull the CSRF token out of a rendered form."""
    match = CSRF_RX.search(html)
    if match is None:
        raise AssertionError("no csrf token found in body")
    return match.group(1)


# ══════════════════════════════════════════════════════════════════════════
# Model Doubles
# ══════════════════════════════════════════════════════════════════════════

def _mock_snippet():
    now = datetime.now(timezone.utc)
    return SimpleNamespace(
        id=VALID_SNIPPET_ID,
        title="An old silent pond",
        content="An old silent pond...",
        created_on=now,
        expires_on=now + timedelta(days=365),
    )


@pytest.fixture
def mock_snippets():
    """
    SnippetService double.

    get() only knows VALID_SNIPPET_ID; insert() always returns it.
    """
    snippet = _mock_snippet()

    async def get(snippet_id: UUID):
        if snippet_id == VALID_SNIPPET_ID:
            return snippet
        raise NotFoundError(resource="snippet", resource_id=str(snippet_id))

    service = MagicMock()
    service.get = AsyncMock(side_effect=get)
    service.latest = AsyncMock(return_value=[snippet])
    service.insert = AsyncMock(return_value=VALID_SNIPPET_ID)
    return service


@pytest.fixture
def mock_users():
    """UserService double with a single account (MOCK_EMAIL / MOCK_PASSWORD)."""
    user = SimpleNamespace(
        id=MOCK_USER_ID,
        name=MOCK_NAME,
        email=MOCK_EMAIL,
        created_on=datetime(2022, 3, 17, 10, 15, tzinfo=timezone.utc),
    )

    async def insert(name: str, email: str, password: str) -> UUID:
        if email == DUPLICATE_EMAIL:
            raise DuplicateEmailError(email)
        return MOCK_USER_ID

    async def authenticate(email: str, password: str) -> UUID:
        if email == MOCK_EMAIL and password == MOCK_PASSWORD:
            return MOCK_USER_ID
        raise InvalidCredentialsError()

    async def exists(user_id: UUID) -> bool:
        return user_id == MOCK_USER_ID

    async def get(user_id: UUID):
        if user_id == MOCK_USER_ID:
            return user
        raise NotFoundError(resource="user", resource_id=str(user_id))

    async def password_update(user_id: UUID, current: str, new: str) -> None:
        if current != MOCK_PASSWORD:
            raise InvalidCredentialsError()

    service = MagicMock()
    service.insert = AsyncMock(side_effect=insert)
    service.authenticate = AsyncMock(side_effect=authenticate)
    service.exists = AsyncMock(side_effect=exists)
    service.get = AsyncMock(side_effect=get)
    service.password_update = AsyncMock(side_effect=password_update)
    return service


# ══════════════════════════════════════════════════════════════════════════
# Application + HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings():
    return Settings(database_url="sqlite+aiosqlite://", debug=False, bcrypt_cost=4)


@pytest.fixture
def application(settings, mock_snippets, mock_users):
    """Application wired to the model doubles and an in-memory session store."""
    return Application(
        settings=settings,
        snippets=mock_snippets,
        users=mock_users,
        templates=new_template_cache(),
        sessions=SessionManager(MemoryStore(), secure=True),
    )


@pytest.fixture
def app(application):
    return create_app(application=application)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    The https base URL lets the client store and resend the Secure session
    cookie; redirects are not followed so tests can assert on them.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://test") as client:
        yield client


async def login(client: AsyncClient, email: str = MOCK_EMAIL, password: str = MOCK_PASSWORD):
    """Log `client` in through the real login form; returns the POST response."""
    page = await client.get("/user/login")
    token = extract_csrf_token(page.text)
    return await client.post(
        "/user/login",
        data={"email": email, "password": password, "csrf_token": token},
    )


@pytest_asyncio.fixture
async def auth_client(test_client):
    """A test_client that is already logged in as the mock user."""
    response = await login(test_client)
    assert response.status_code == 303
    return test_client


# ══════════════════════════════════════════════════════════════════════════
# Real Database (model tests)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def session_factory():
    """
    Fresh in-memory SQLite schema per test.

    StaticPool keeps the single in-memory database alive across the
    connections the models open.
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    import snippetbox.models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield create_session_factory(engine)

    await engine.dispose()


def find_cookie(response, name: str = "session") -> Optional[str]:
    """Raw Set-Cookie header for `name`, if the response sent one."""
    for header in response.headers.get_list("set-cookie"):
        if header.startswith(f"{name}="):
            return header
    return None
