"""
Snippetbox - Session SQLAlchemy Model
=====================================

What:  Server-side session rows backing `SQLAlchemyStore` (see sessions.py).
How:   One row per session token; `data` holds the JSON-encoded key/value
       bag, `expiry` the absolute deadline.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from snippetbox.database import Base


class SessionRecord(Base):
    """A persisted session, keyed by its opaque cookie token."""

    __tablename__ = "sessions"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)

    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    expiry: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # delete_expired() scans by expiry
    __table_args__ = (
        Index("idx_sessions_expiry", expiry),
    )

    def __repr__(self) -> str:
        return f"<SessionRecord(token={self.token[:6]}..., expiry='{self.expiry}')>"
