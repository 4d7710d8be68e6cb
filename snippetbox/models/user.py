"""
Snippetbox - User SQLAlchemy Model
==================================

What:  ORM model representing the `users` table.
Who:   Used by UserService (signup, login, account, password update).

Invariants:
    - email is unique, enforced by the `users_uc_email` constraint
    - hashed_password holds a bcrypt hash; raw passwords are never stored
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from snippetbox.database import Base


class User(Base):
    """A registered account."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    # bcrypt output is 60 ASCII characters
    hashed_password: Mapped[str] = mapped_column(String(60), nullable=False)

    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("email", name="users_uc_email"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"
