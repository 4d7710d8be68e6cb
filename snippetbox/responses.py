"""
Snippetbox - Error Responses
============================

What:  The three error replies every part of the app shares.
How:   Client errors send the standard status text; server errors log the
       full traceback and send a generic body (the traceback itself only in
       debug mode).
"""

import logging
import traceback
from http import HTTPStatus
from typing import Mapping, Optional

from starlette.responses import PlainTextResponse

logger = logging.getLogger("snippetbox.error")


def client_error(status: int, headers: Optional[Mapping[str, str]] = None) -> PlainTextResponse:
    return PlainTextResponse(HTTPStatus(status).phrase, status_code=status, headers=headers)


def not_found() -> PlainTextResponse:
    return client_error(404)


def server_error(exc: BaseException, debug: bool = False) -> PlainTextResponse:
    """Log `exc` with its traceback and answer 500 Internal Server Error."""
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error("%s\n%s", exc, trace)

    body = trace if debug else HTTPStatus.INTERNAL_SERVER_ERROR.phrase
    return PlainTextResponse(body, status_code=500)
