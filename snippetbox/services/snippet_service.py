"""
Snippetbox - Snippet Service
============================

What:  Insert, fetch and list snippets, hiding expired ones.
How:   Wraps the shared `async_sessionmaker`; every call opens its own
       session (and transaction) and closes it before returning.
Who:   Called by the snippet route handlers through the Application object.

Error Handling:
    - Missing or expired snippet → NotFoundError (404 at the handler boundary)
    - Any SQLAlchemy failure     → DatabaseError (500, details logged only)
"""

import logging
from datetime import timedelta
from typing import List
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from snippetbox.exceptions import DatabaseError, NotFoundError
from snippetbox.models.snippet import Snippet
from snippetbox.timeutil import utcnow

logger = logging.getLogger(__name__)

# Home page shows at most this many snippets
LATEST_LIMIT = 10


class SnippetService:
    """
    Data access for the `snippets` table.

    Responsibilities:
        - insert(): store a new snippet, returning its id
        - get():    single unexpired snippet by id
        - latest(): newest unexpired snippets for the home page
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def insert(self, title: str, content: str, expires: int) -> UUID:
        """
        Persist a new snippet that expires `expires` days from now.

        Args:
            title:   Validated title (at most 100 characters)
            content: Validated body text
            expires: Lifetime in days (the create form allows 1, 7 or 365)

        Returns:
            The generated snippet id.

        Raises:
            DatabaseError: The insert failed.
        """
        now = utcnow()
        snippet = Snippet(
            title=title,
            content=content,
            created_on=now,
            expires_on=now + timedelta(days=expires),
        )
        try:
            async with self._session_factory() as db:
                db.add(snippet)
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error inserting snippet: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not store the snippet.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Snippet %s created (expires in %d days)", snippet.id, expires)
        return snippet.id

    async def get(self, snippet_id: UUID) -> Snippet:
        """
        Fetch one snippet, provided it has not expired.

        Query plan:
            SELECT ... FROM snippets WHERE expires_on > :now AND id = :id

        Raises:
            NotFoundError: No such snippet, or it has expired.
            DatabaseError: Query execution failed.
        """
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(Snippet).where(
                        Snippet.expires_on > utcnow(),
                        Snippet.id == snippet_id,
                    )
                )
                snippet = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching snippet %s: %s", snippet_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the snippet.",
                context={"snippet_id": str(snippet_id)},
            ) from e

        if snippet is None:
            raise NotFoundError(resource="snippet", resource_id=str(snippet_id))
        return snippet

    async def latest(self) -> List[Snippet]:
        """
        Return up to LATEST_LIMIT unexpired snippets, newest first.

        Ids are random UUIDs, so creation time (then id, for ties) provides
        the ordering an incrementing id would.
        """
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(Snippet)
                    .where(Snippet.expires_on > utcnow())
                    .order_by(desc(Snippet.created_on), desc(Snippet.id))
                    .limit(LATEST_LIMIT)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing snippets: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve snippets.",
                context={"error_type": type(e).__name__},
            ) from e
