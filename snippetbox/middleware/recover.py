"""
Snippetbox - Panic Recovery Middleware
======================================

What:  Outermost middleware: turns any exception escaping the app into a 500.
How:   Catches the exception raised through `call_next`, marks the
       connection for closing, logs the traceback and answers with a generic
       body carrying the same hardening headers as every other response.
       The exception never reaches the server.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snippetbox.application import get_application
from snippetbox.middleware.secure_headers import SECURE_HEADERS
from snippetbox.responses import server_error


class RecoverPanicMiddleware(BaseHTTPMiddleware):
    """Converts unhandled exceptions into `500 Internal Server Error`."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            response = server_error(exc, debug=get_application(request).settings.debug)
            response.headers["Connection"] = "close"
            # The secure headers stage is inside this one and never saw the reply
            response.headers.update(SECURE_HEADERS)
            return response
