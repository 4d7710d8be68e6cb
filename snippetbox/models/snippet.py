"""
Snippetbox - Snippet SQLAlchemy Model
=====================================

What:  ORM model representing the `snippets` table.
Who:   Used by SnippetService for inserts and lookups, and by Alembic.

Table Design:
    - UUID primary key, generated in Python so the same code runs on
      PostgreSQL and SQLite
    - created_on / expires_on: UTC, set by the service at insert time
    - Rows are never updated or deleted; expiry is enforced by filtering
      on expires_on in every query

    Index on expires_on:
        Every read filters `expires_on > now()`.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from snippetbox.database import Base


class Snippet(Base):
    """
    A stored text item with a title, content and an expiration time.

    Lifecycle:
        1. Created by an authenticated user's create action
        2. Readable while now < expires_on
        3. Invisible afterwards (the row stays in storage)
    """

    __tablename__ = "snippets"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Bounded by the form validator to 100 characters
    title: Mapped[str] = mapped_column(String(100), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    expires_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_snippets_expires_on", expires_on),
    )

    def __repr__(self) -> str:
        return f"<Snippet(id={self.id}, title={self.title!r}, expires_on='{self.expires_on}')>"
