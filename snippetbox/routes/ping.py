"""
Snippetbox - Liveness Route
===========================

GET /ping answers `200 OK` with body `OK`. It runs outside the dynamic chain:
no session is loaded and no cookie is sent, so probes stay cheap.
"""

from fastapi import APIRouter
from starlette.responses import PlainTextResponse

router = APIRouter(tags=["Health"])


@router.get("/ping", response_class=PlainTextResponse)
async def ping() -> PlainTextResponse:
    return PlainTextResponse("OK")
