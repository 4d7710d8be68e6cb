"""
Snippetbox - User Service
=========================

What:  Account storage: signup, credential checks, profile reads, password change.
How:   Wraps the shared `async_sessionmaker`; passwords are hashed with bcrypt
       in a worker thread so hashing never blocks the event loop.
Who:   Route handlers (signup, login, account) and the authenticate interceptor.

Error Handling:
    - Unique violation on email           → DuplicateEmailError
    - Unknown email / wrong password      → InvalidCredentialsError
    - Missing user on get()               → NotFoundError
    - Any other SQLAlchemy failure        → DatabaseError
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

import bcrypt
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from snippetbox.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
)
from snippetbox.models.user import User
from snippetbox.timeutil import utcnow

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str, cost: int = 12) -> str:
    """Hash a plain-text password using bcrypt."""
    pw_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=cost))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    pw_bytes = plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    return bcrypt.checkpw(pw_bytes, hashed_password.encode("utf-8"))


def _is_email_violation(exc: IntegrityError) -> bool:
    # PostgreSQL names the constraint; SQLite names the column
    detail = str(exc.orig)
    return "users_uc_email" in detail or "users.email" in detail


class UserService:
    """
    Data access for the `users` table.

    Args:
        session_factory: Shared async session factory
        bcrypt_cost:     Work factor for new hashes (12 in production)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        bcrypt_cost: int = 12,
    ):
        self._session_factory = session_factory
        self._bcrypt_cost = bcrypt_cost

    async def insert(self, name: str, email: str, password: str) -> UUID:
        """
        Create an account with a freshly hashed password.

        Raises:
            DuplicateEmailError: The email is already registered.
            DatabaseError:       Any other storage failure.
        """
        hashed = await asyncio.to_thread(hash_password, password, self._bcrypt_cost)
        user = User(name=name, email=email, hashed_password=hashed, created_on=utcnow())

        try:
            async with self._session_factory() as db:
                db.add(user)
                await db.commit()
        except IntegrityError as e:
            if _is_email_violation(e):
                raise DuplicateEmailError(email) from e
            logger.error("Integrity error inserting user: %s", str(e))
            raise DatabaseError(message="Could not create the account.") from e
        except SQLAlchemyError as e:
            logger.error("Database error inserting user: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not create the account.") from e

        logger.info("User %s signed up", user.id)
        return user.id

    async def authenticate(self, email: str, password: str) -> UUID:
        """
        Return the id of the account matching `email` and `password`.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password.
            DatabaseError:           Query execution failed.
        """
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(User.id, User.hashed_password).where(User.email == email)
                )
                row = result.one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error authenticating user: %s", str(e))
            raise DatabaseError(message="Could not verify credentials.") from e

        if row is None:
            raise InvalidCredentialsError()

        user_id, hashed = row
        if not await asyncio.to_thread(verify_password, password, hashed):
            raise InvalidCredentialsError()
        return user_id

    async def exists(self, user_id: UUID) -> bool:
        """Check whether an account with `user_id` exists."""
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(User.id).where(User.id == user_id).limit(1)
                )
                return result.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            logger.error("Database error checking user %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not look up the account.") from e

    async def get(self, user_id: UUID) -> User:
        """
        Read an account for the profile page.

        Raises:
            NotFoundError: No account with `user_id`.
        """
        user: Optional[User]
        try:
            async with self._session_factory() as db:
                result = await db.execute(select(User).where(User.id == user_id))
                user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not look up the account.") from e

        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def password_update(
        self, user_id: UUID, current_password: str, new_password: str
    ) -> None:
        """
        Replace the password hash after verifying the current password.

        Raises:
            InvalidCredentialsError: `current_password` does not verify.
            NotFoundError:           The account no longer exists.
            DatabaseError:           Storage failure.
        """
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(User.hashed_password).where(User.id == user_id)
                )
                current_hash = result.scalar_one_or_none()
                if current_hash is None:
                    raise NotFoundError(resource="user", resource_id=str(user_id))

                if not await asyncio.to_thread(verify_password, current_password, current_hash):
                    raise InvalidCredentialsError()

                new_hash = await asyncio.to_thread(
                    hash_password, new_password, self._bcrypt_cost
                )
                await db.execute(
                    update(User).where(User.id == user_id).values(hashed_password=new_hash)
                )
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error updating password for %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not update the password.") from e

        logger.info("Password updated for user %s", user_id)
