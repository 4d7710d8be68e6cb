"""
Snippetbox - Session Interceptor
================================

What:  Loads the session before the handler and saves it afterwards.
How:   Reads the token cookie, asks the SessionManager for the session,
       places it on the RequestContext, runs the rest of the chain, then
       commits any change and (re)sends the cookie.
"""

from fastapi import Request
from starlette.responses import Response

from snippetbox.application import RequestContext, get_application


async def load_and_save_session(request: Request, ctx: RequestContext, call_next) -> Response:
    manager = get_application(request).sessions
    ctx.session = await manager.load(request.cookies.get(manager.cookie_name))

    response = await call_next()

    await manager.commit(ctx.session)
    manager.write_cookie(response, ctx.session)
    response.headers.add_vary_header("Cookie")
    return response
