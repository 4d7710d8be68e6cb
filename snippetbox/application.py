"""
Snippetbox - Application Dependencies
=====================================

What:  The `Application` object holding every app-wide collaborator, and the
       per-request `RequestContext`.
How:   `create_app()` builds one Application and stores it on
       `app.state.application`; interceptors and handlers fetch it with
       `get_application()`. The route chain creates one RequestContext per
       request and handlers receive it through `Depends(get_context)`.
Who:   Everything under middleware/ and routes/.
"""

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from snippetbox.config import Settings
from snippetbox.sessions import Session, SessionManager
from snippetbox.templates import TemplateCache


@dataclass
class Application:
    """
    App-wide dependencies, constructed once at startup.

    `snippets` and `users` are SnippetService / UserService in production;
    tests substitute objects with the same methods.
    """

    settings: Settings
    snippets: Any
    users: Any
    templates: TemplateCache
    sessions: SessionManager
    engine: Optional[AsyncEngine] = None


@dataclass
class RequestContext:
    """
    Typed per-request state filled in by the dynamic route chain.

    Attributes:
        session:               Loaded by load_and_save_session
        csrf_token:            Expected token for this session
        authenticated_user_id: Set by authenticate when the session's user exists
    """

    session: Optional[Session] = None
    csrf_token: str = ""
    authenticated_user_id: Optional[UUID] = None

    @property
    def is_authenticated(self) -> bool:
        return self.authenticated_user_id is not None


def get_application(request: Request) -> Application:
    return request.app.state.application


def get_context(request: Request) -> RequestContext:
    """FastAPI dependency: the RequestContext of a chained route."""
    return request.state.context
