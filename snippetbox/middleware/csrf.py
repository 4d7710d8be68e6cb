"""
Snippetbox - CSRF Interceptor
=============================

What:  Blocks cross-site form posts.
How:   Each session carries a random token (created on first use). Pages
       embed it in a hidden `csrf_token` field; every state-changing request
       must send it back (form field, or `X-CSRF-Token` header for scripts).
       A missing or different token answers `400 Bad Request` before the
       handler runs.
"""

import logging
import secrets

from fastapi import Request
from starlette.responses import Response

from snippetbox.application import RequestContext
from snippetbox.responses import client_error

logger = logging.getLogger(__name__)

CSRF_SESSION_KEY = "csrf_token"
CSRF_FORM_FIELD = "csrf_token"
CSRF_HEADER = "X-CSRF-Token"

SAFE_METHODS = {"GET", "HEAD", "OPTIONS", "TRACE"}


def _tokens_match(submitted, expected: str) -> bool:
    if not isinstance(submitted, str) or not submitted:
        return False
    return secrets.compare_digest(submitted.encode("utf-8"), expected.encode("utf-8"))


async def verify_csrf_token(request: Request, ctx: RequestContext, call_next) -> Response:
    token = ctx.session.get(CSRF_SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        ctx.session.put(CSRF_SESSION_KEY, token)
    ctx.csrf_token = token

    if request.method not in SAFE_METHODS:
        submitted = request.headers.get(CSRF_HEADER)
        if submitted is None:
            form = await request.form()
            submitted = form.get(CSRF_FORM_FIELD)
        if not _tokens_match(submitted, token):
            logger.warning("CSRF token mismatch: %s %s", request.method, request.url.path)
            return client_error(400)

    return await call_next()
