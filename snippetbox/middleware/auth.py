"""
Snippetbox - Authentication Interceptors
========================================

authenticate
    Reads the user id stored in the session at login. If that user still
    exists the request is marked authenticated on the RequestContext. A
    stale id (deleted account) or a malformed one simply leaves the request
    anonymous; storage failures propagate and become a 500.

require_authentication
    Login gate for protected routes. Anonymous requests are redirected to
    the login page with `303 See Other` and the handler does not run. The
    requested path of a GET is remembered so login can send the user back.
    Pages served to logged-in users are marked `Cache-Control: no-store`.
"""

import logging
from uuid import UUID

from fastapi import Request
from starlette.responses import RedirectResponse, Response

from snippetbox.application import RequestContext, get_application

logger = logging.getLogger(__name__)

AUTH_SESSION_KEY = "authenticated_user_id"
REDIRECT_AFTER_LOGIN_KEY = "redirect_path_after_login"
LOGIN_PATH = "/user/login"


async def authenticate(request: Request, ctx: RequestContext, call_next) -> Response:
    raw_id = ctx.session.get(AUTH_SESSION_KEY)
    if raw_id:
        try:
            user_id = UUID(str(raw_id))
        except ValueError:
            logger.warning("Ignoring malformed user id in session")
            user_id = None

        if user_id is not None and await get_application(request).users.exists(user_id):
            ctx.authenticated_user_id = user_id

    return await call_next()


async def require_authentication(request: Request, ctx: RequestContext, call_next) -> Response:
    if not ctx.is_authenticated:
        if request.method == "GET":
            ctx.session.put(REDIRECT_AFTER_LOGIN_KEY, request.url.path)
        return RedirectResponse(LOGIN_PATH, status_code=303)

    response = await call_next()
    response.headers["Cache-Control"] = "no-store"
    return response
