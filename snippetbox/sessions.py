"""
Snippetbox - Server-Side Sessions
=================================

What:  Per-browser key/value sessions keyed by an opaque token in a cookie.
How:   `SessionManager.load()` turns the cookie token into a `Session`;
       handlers read and write it; `commit()` persists it to a store and
       `write_cookie()` sends the (possibly renewed) token back.
Who:   The `load_and_save_session` interceptor owns the load/commit cycle;
       handlers only touch the `Session` object from the request context.

Lifetime:
    Absolute, counted from creation (default 12 hours). Renewing the token
    after a privilege change issues a fresh token and deadline and deletes
    the old token from the store, so a stolen pre-login token is useless.

Stores:
    MemoryStore      In-process dict (tests, single-process development)
    SQLAlchemyStore  `sessions` table through the shared session factory

Values must be JSON-serializable (the SQL store keeps them in a JSON column).
"""

import copy
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.responses import Response

from snippetbox.exceptions import DatabaseError
from snippetbox.models.session import SessionRecord
from snippetbox.timeutil import as_utc, utcnow

logger = logging.getLogger(__name__)

_MISSING = object()


def generate_token() -> str:
    return secrets.token_urlsafe(32)


@dataclass
class Session:
    """
    The session bag for one request.

    `token` is None until a brand-new session is first committed.
    """

    token: Optional[str]
    deadline: datetime
    data: Dict[str, Any] = field(default_factory=dict)
    modified: bool = False
    # Token to delete from the store on commit (set by renew_token)
    stale_token: Optional[str] = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def put(self, key: str, value: Any) -> None:
        self.data[key] = value
        self.modified = True

    def pop(self, key: str, default: Any = None) -> Any:
        """Read a one-time value (e.g. a flash message) and remove it."""
        value = self.data.pop(key, _MISSING)
        if value is _MISSING:
            return default
        self.modified = True
        return value

    def remove(self, key: str) -> None:
        if key in self.data:
            del self.data[key]
            self.modified = True

    def renew_token(self, lifetime: timedelta) -> None:
        """Issue a new token (and deadline), keeping the data."""
        if self.token is not None and self.stale_token is None:
            self.stale_token = self.token
        self.token = generate_token()
        self.deadline = utcnow() + lifetime
        self.modified = True


class MemoryStore:
    """In-process session store. Not shared between worker processes."""

    def __init__(self) -> None:
        self._items: Dict[str, Tuple[Dict[str, Any], datetime]] = {}

    async def find(self, token: str) -> Optional[Tuple[Dict[str, Any], datetime]]:
        item = self._items.get(token)
        if item is None:
            return None
        data, expiry = item
        if expiry <= utcnow():
            del self._items[token]
            return None
        return copy.deepcopy(data), expiry

    async def commit(self, token: str, data: Dict[str, Any], expiry: datetime) -> None:
        self._items[token] = (copy.deepcopy(data), expiry)

    async def delete(self, token: str) -> None:
        self._items.pop(token, None)

    async def delete_expired(self) -> int:
        now = utcnow()
        expired = [token for token, (_, expiry) in self._items.items() if expiry <= now]
        for token in expired:
            del self._items[token]
        return len(expired)


class SQLAlchemyStore:
    """
    Session store on the `sessions` table.

    Expired rows are never returned by find(); delete_expired() removes them
    and is run once at startup.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find(self, token: str) -> Optional[Tuple[Dict[str, Any], datetime]]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(SessionRecord).where(
                        SessionRecord.token == token,
                        SessionRecord.expiry > utcnow(),
                    )
                )
                record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error loading session: %s", str(e))
            raise DatabaseError(message="Could not load the session.") from e

        if record is None:
            return None
        return dict(record.data), as_utc(record.expiry)

    async def commit(self, token: str, data: Dict[str, Any], expiry: datetime) -> None:
        try:
            async with self._session_factory() as db:
                await db.merge(SessionRecord(token=token, data=data, expiry=expiry))
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error saving session: %s", str(e))
            raise DatabaseError(message="Could not save the session.") from e

    async def delete(self, token: str) -> None:
        try:
            async with self._session_factory() as db:
                await db.execute(delete(SessionRecord).where(SessionRecord.token == token))
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting session: %s", str(e))
            raise DatabaseError(message="Could not delete the session.") from e

    async def delete_expired(self) -> int:
        async with self._session_factory() as db:
            result = await db.execute(
                delete(SessionRecord).where(SessionRecord.expiry <= utcnow())
            )
            await db.commit()
            return result.rowcount or 0


class SessionManager:
    """
    Loads, commits and sends sessions.

    Args:
        store:       MemoryStore or SQLAlchemyStore
        lifetime:    Absolute session lifetime
        cookie_name: Name of the token cookie
        secure:      Send the cookie over HTTPS only
    """

    def __init__(
        self,
        store,
        lifetime: timedelta = timedelta(hours=12),
        cookie_name: str = "session",
        secure: bool = True,
    ):
        self.store = store
        self.lifetime = lifetime
        self.cookie_name = cookie_name
        self.secure = secure

    async def load(self, token: Optional[str]) -> Session:
        """Return the stored session for `token`, or a fresh empty one."""
        if token:
            found = await self.store.find(token)
            if found is not None:
                data, deadline = found
                return Session(token=token, deadline=deadline, data=data)
        return Session(token=None, deadline=utcnow() + self.lifetime)

    def renew_token(self, session: Session) -> None:
        session.renew_token(self.lifetime)

    async def commit(self, session: Session) -> None:
        """Persist changes; deletes the renewed-away token."""
        if session.stale_token is not None:
            await self.store.delete(session.stale_token)
            session.stale_token = None

        if not session.modified:
            return

        if session.token is None:
            session.token = generate_token()
        await self.store.commit(session.token, session.data, session.deadline)

    def write_cookie(self, response: Response, session: Session) -> None:
        if not session.modified or session.token is None:
            return
        response.set_cookie(
            self.cookie_name,
            session.token,
            expires=session.deadline,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )
