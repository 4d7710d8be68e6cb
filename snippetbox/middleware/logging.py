"""
Snippetbox - Request Logging Middleware
=======================================

What:  One access-log line per HTTP request.
How:   Logs client address, protocol, method and URI together with the
       response status and duration once the rest of the chain has finished.
       A request whose handler raises is still logged (as status 500) before
       the exception continues to panic recovery.
Who:   Second stage of the standard chain.

Log line:
    127.0.0.1 - HTTP/1.1 GET /snippet/view/6ba7... 200 3.4ms

What we log vs what we DON'T log (privacy):
    ✅ Log: method, URI, status, duration, IP, protocol
    ❌ Don't log: form bodies (passwords), cookies (session tokens)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("snippetbox.access")

# Liveness probes run constantly and would drown real traffic
QUIET_PATHS = {"/ping"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs `<ip> - <proto> <method> <uri>` with status and duration."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()

        # request.client may be None in testing
        client_ip = request.client.host if request.client else "unknown"
        proto = f"HTTP/{request.scope.get('http_version', '1.1')}"
        method = request.method
        uri = request.url.path
        if request.url.query:
            uri = f"{uri}?{request.url.query}"

        # Reported when the handler raises; panic recovery answers 500
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000

            if status >= 500:
                log_level = logging.ERROR
            elif status >= 400:
                log_level = logging.WARNING
            else:
                log_level = logging.INFO

            logger.log(
                log_level,
                "%s - %s %s %s %d %.1fms",
                client_ip,
                proto,
                method,
                uri,
                status,
                duration_ms,
                extra={
                    "method": method,
                    "path": request.url.path,
                    "status": status,
                    "duration_ms": round(duration_ms, 2),
                    "client_ip": client_ip,
                },
            )
