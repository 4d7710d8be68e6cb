"""
Snippetbox - Application Package
================================

What: Server-rendered snippet sharing site (sign up, log in, paste text that expires).
Who:  Imported by uvicorn (`snippetbox.main:create_app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │     Middleware chains + Routes      │  ← HTTP concerns, sessions, CSRF
    ├─────────────────────────────────────┤
    │   Forms + Validator + Templates     │  ← input checks, HTML rendering
    ├─────────────────────────────────────┤
    │        Models (Snippet, User)       │  ← SQL queries, password hashing
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Every handler and middleware reaches its collaborators through the
    `Application` object built once by `create_app()`; nothing is stored in
    module-level globals.
"""

__version__ = "1.0.0"
