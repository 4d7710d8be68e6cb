"""
Snippetbox - Middleware Chains
==============================

What:  Declares the three request chains as data and builds them.
How:
    STANDARD_CHAIN   Starlette middleware classes wrapped around the whole
                     app by `install_standard_chain()`, outermost first.
    DYNAMIC_CHAIN    Interceptors run around the handler of every route of
    PROTECTED_CHAIN  a router whose `route_class` is `chain_route(chain)`.

Interceptor signature:
    async def interceptor(request, ctx, call_next) -> Response

    `ctx` is the RequestContext shared by the whole chain and the handler;
    `call_next()` runs the next interceptor (or the handler). Returning a
    response without calling `call_next()` stops the chain.
"""

from typing import Awaitable, Callable, Sequence, Type

from fastapi import FastAPI, Request
from fastapi.routing import APIRoute
from starlette.responses import Response

from snippetbox.application import RequestContext
from snippetbox.middleware.auth import authenticate, require_authentication
from snippetbox.middleware.csrf import verify_csrf_token
from snippetbox.middleware.logging import RequestLoggingMiddleware
from snippetbox.middleware.recover import RecoverPanicMiddleware
from snippetbox.middleware.secure_headers import SecureHeadersMiddleware
from snippetbox.middleware.session import load_and_save_session

CallNext = Callable[[], Awaitable[Response]]
Interceptor = Callable[[Request, RequestContext, CallNext], Awaitable[Response]]

STANDARD_CHAIN = (
    RecoverPanicMiddleware,
    RequestLoggingMiddleware,
    SecureHeadersMiddleware,
)

DYNAMIC_CHAIN = (
    load_and_save_session,
    verify_csrf_token,
    authenticate,
)

PROTECTED_CHAIN = DYNAMIC_CHAIN + (require_authentication,)


def install_standard_chain(app: FastAPI, chain: Sequence[type] = STANDARD_CHAIN) -> None:
    """Wrap `app` in `chain`, first entry outermost."""
    # add_middleware puts the newest entry outside the others
    for middleware_class in reversed(chain):
        app.add_middleware(middleware_class)


async def run_chain(
    interceptors: Sequence[Interceptor],
    request: Request,
    ctx: RequestContext,
    endpoint: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Run `interceptors` in order around `endpoint`."""

    async def call(index: int) -> Response:
        if index == len(interceptors):
            return await endpoint(request)
        return await interceptors[index](request, ctx, lambda: call(index + 1))

    return await call(0)


def chain_route(interceptors: Sequence[Interceptor]) -> Type[APIRoute]:
    """
    Build an APIRoute class that runs `interceptors` around each handler.

    Usage:
        router = APIRouter(route_class=chain_route(PROTECTED_CHAIN))
    """
    chain = tuple(interceptors)

    class ChainedRoute(APIRoute):
        def get_route_handler(self) -> Callable[[Request], Awaitable[Response]]:
            endpoint = super().get_route_handler()

            async def chained_handler(request: Request) -> Response:
                ctx = RequestContext()
                request.state.context = ctx
                return await run_chain(chain, request, ctx, endpoint)

            return chained_handler

    return ChainedRoute
