"""
Snippetbox - ORM Models
=======================

Importing this package registers every table with `Base.metadata`
(Alembic's env.py relies on that for --autogenerate).
"""

from snippetbox.models.session import SessionRecord
from snippetbox.models.snippet import Snippet
from snippetbox.models.user import User

__all__ = ["SessionRecord", "Snippet", "User"]
