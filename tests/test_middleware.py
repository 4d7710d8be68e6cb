"""
Snippetbox - Middleware Tests
=============================

What we test:
    ✅ Secure headers on every response
    ✅ Panic recovery: 500, Connection: close, secure headers, trace only in debug mode
    ✅ Requests that raise still get an access-log line
    ✅ CSRF check rejects missing or wrong tokens with 400
    ✅ authenticate ignores malformed and stale user ids
    ✅ The login gate halts the chain: the handler does not run
    ✅ Interceptors run in declaration order
"""

import logging
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.responses import PlainTextResponse

from snippetbox.application import RequestContext
from snippetbox.exceptions import DatabaseError
from snippetbox.main import create_app
from snippetbox.middleware.auth import (
    AUTH_SESSION_KEY,
    REDIRECT_AFTER_LOGIN_KEY,
    authenticate,
    require_authentication,
)
from snippetbox.middleware.chain import DYNAMIC_CHAIN, PROTECTED_CHAIN, STANDARD_CHAIN, run_chain
from snippetbox.middleware.recover import RecoverPanicMiddleware
from snippetbox.middleware.secure_headers import SECURE_HEADERS
from snippetbox.sessions import Session
from conftest import MOCK_USER_ID, extract_csrf_token


def _request(application, method="GET", path="/snippet/create"):
    """Just enough of a Request for the interceptors."""
    return SimpleNamespace(
        method=method,
        url=SimpleNamespace(path=path),
        app=SimpleNamespace(state=SimpleNamespace(application=application)),
    )


def _context(**data):
    return RequestContext(session=Session(token="t", deadline=datetime.now(timezone.utc), data=dict(data)))


class TestSecureHeaders:

    @pytest.mark.asyncio
    async def test_headers_on_every_response(self, test_client):
        for path in ("/ping", "/", "/no-such-page"):
            response = await test_client.get(path)
            for name, value in SECURE_HEADERS.items():
                assert response.headers[name] == value

    def test_header_values(self):
        assert SECURE_HEADERS["Content-Security-Policy"] == (
            "default-src 'self'; style-src 'self' fonts.googleapis.com; font-src fonts.gstatic.com"
        )
        assert SECURE_HEADERS["Referrer-Policy"] == "origin-when-cross-origin"
        assert SECURE_HEADERS["X-Content-Type-Options"] == "nosniff"
        assert SECURE_HEADERS["X-Frame-Options"] == "deny"
        assert SECURE_HEADERS["X-XSS-Protection"] == "0"

    def test_standard_chain_order(self):
        assert STANDARD_CHAIN[0] is RecoverPanicMiddleware


class TestRecoverPanic:

    @pytest.mark.asyncio
    async def test_unhandled_exception_becomes_500(self, application, mock_snippets):
        mock_snippets.latest.side_effect = RuntimeError("boom")
        transport = ASGITransport(app=create_app(application=application))
        async with AsyncClient(transport=transport, base_url="https://test") as client:
            response = await client.get("/")

        assert response.status_code == 500
        assert response.text == "Internal Server Error"
        assert response.headers["connection"] == "close"
        for name, value in SECURE_HEADERS.items():
            assert response.headers[name] == value

    @pytest.mark.asyncio
    async def test_debug_mode_sends_trace(self, application, mock_snippets):
        mock_snippets.latest.side_effect = RuntimeError("boom")
        application.settings.debug = True
        transport = ASGITransport(app=create_app(application=application))
        async with AsyncClient(transport=transport, base_url="https://test") as client:
            response = await client.get("/")

        assert response.status_code == 500
        assert "RuntimeError: boom" in response.text

    @pytest.mark.asyncio
    async def test_failed_request_still_logged(self, application, mock_snippets, caplog):
        mock_snippets.latest.side_effect = RuntimeError("boom")
        caplog.set_level(logging.INFO, logger="snippetbox.access")
        transport = ASGITransport(app=create_app(application=application))
        async with AsyncClient(transport=transport, base_url="https://test") as client:
            await client.get("/")

        access = [r for r in caplog.records if r.name == "snippetbox.access"]
        assert len(access) == 1
        assert access[0].status == 500
        assert access[0].levelno == logging.ERROR
        assert " GET / 500 " in access[0].getMessage()

    @pytest.mark.asyncio
    async def test_database_error_is_500(self, test_client, mock_snippets):
        mock_snippets.latest.side_effect = DatabaseError("query failed")
        response = await test_client.get("/")
        assert response.status_code == 500
        assert response.text == "Internal Server Error"


class TestCSRF:

    @pytest.mark.asyncio
    async def test_missing_token_rejected(self, test_client, mock_users):
        await test_client.get("/user/login")
        response = await test_client.post(
            "/user/login", data={"email": "falso@example.com", "password": "pa$$w0rd8923"}
        )
        assert response.status_code == 400
        mock_users.authenticate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wrong_token_rejected(self, test_client):
        await test_client.get("/user/login")
        response = await test_client.post(
            "/user/login",
            data={"email": "falso@example.com", "password": "pa$$w0rd8923", "csrf_token": "wrongToken"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_header_token_accepted(self, test_client):
        page = await test_client.get("/user/login")
        token = extract_csrf_token(page.text)
        response = await test_client.post(
            "/user/login",
            data={"email": "falso@example.com", "password": "pa$$w0rd8923"},
            headers={"X-CSRF-Token": token},
        )
        assert response.status_code == 303

    @pytest.mark.asyncio
    async def test_token_stable_across_pages(self, test_client):
        first = extract_csrf_token((await test_client.get("/user/login")).text)
        second = extract_csrf_token((await test_client.get("/user/signup")).text)
        assert first == second


class TestAuthenticate:

    @pytest.mark.asyncio
    async def test_existing_user_is_authenticated(self, application):
        ctx = _context(**{AUTH_SESSION_KEY: str(MOCK_USER_ID)})
        call_next = AsyncMock(return_value=PlainTextResponse("ok"))

        await authenticate(_request(application), ctx, call_next)

        assert ctx.is_authenticated
        assert ctx.authenticated_user_id == MOCK_USER_ID
        call_next.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stale_user_is_anonymous(self, application):
        ctx = _context(**{AUTH_SESSION_KEY: str(uuid4())})
        await authenticate(_request(application), ctx, AsyncMock(return_value=PlainTextResponse("ok")))
        assert not ctx.is_authenticated

    @pytest.mark.asyncio
    async def test_malformed_user_id_is_anonymous(self, application, mock_users):
        ctx = _context(**{AUTH_SESSION_KEY: "not-a-uuid"})
        await authenticate(_request(application), ctx, AsyncMock(return_value=PlainTextResponse("ok")))
        assert not ctx.is_authenticated
        mock_users.exists.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_failure_propagates(self, application, mock_users):
        mock_users.exists.side_effect = DatabaseError("db down")
        ctx = _context(**{AUTH_SESSION_KEY: str(MOCK_USER_ID)})
        with pytest.raises(DatabaseError):
            await authenticate(_request(application), ctx, AsyncMock())


class TestRequireAuthentication:

    @pytest.mark.asyncio
    async def test_anonymous_request_halts_with_redirect(self, application):
        ctx = _context()
        handler = AsyncMock(return_value=PlainTextResponse("secret"))

        response = await require_authentication(_request(application), ctx, handler)

        assert response.status_code == 303
        assert response.headers["location"] == "/user/login"
        handler.assert_not_awaited()
        assert ctx.session.get(REDIRECT_AFTER_LOGIN_KEY) == "/snippet/create"

    @pytest.mark.asyncio
    async def test_anonymous_post_not_remembered(self, application):
        ctx = _context()
        await require_authentication(_request(application, method="POST"), ctx, AsyncMock())
        assert ctx.session.get(REDIRECT_AFTER_LOGIN_KEY) is None

    @pytest.mark.asyncio
    async def test_authenticated_response_not_cached(self, application):
        ctx = _context()
        ctx.authenticated_user_id = MOCK_USER_ID
        handler = AsyncMock(return_value=PlainTextResponse("secret"))

        response = await require_authentication(_request(application), ctx, handler)

        handler.assert_awaited_once()
        assert response.headers["cache-control"] == "no-store"

    @pytest.mark.asyncio
    async def test_unauthenticated_create_post_does_not_insert(self, test_client, mock_snippets):
        page = await test_client.get("/user/login")
        token = extract_csrf_token(page.text)

        response = await test_client.post(
            "/snippet/create",
            data={"title": "t", "content": "c", "expires": "7", "csrf_token": token},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/user/login"
        mock_snippets.insert.assert_not_awaited()


class TestChain:

    def test_protected_chain_extends_dynamic(self):
        assert PROTECTED_CHAIN[: len(DYNAMIC_CHAIN)] == DYNAMIC_CHAIN
        assert PROTECTED_CHAIN[-1] is require_authentication

    @pytest.mark.asyncio
    async def test_run_chain_order(self):
        calls = []

        def interceptor(name):
            async def intercept(request, ctx, call_next):
                calls.append(f"{name} in")
                response = await call_next()
                calls.append(f"{name} out")
                return response
            return intercept

        async def endpoint(request):
            calls.append("handler")
            return PlainTextResponse("ok")

        response = await run_chain(
            [interceptor("a"), interceptor("b")], MagicMock(), RequestContext(), endpoint
        )

        assert response.body == b"ok"
        assert calls == ["a in", "b in", "handler", "b out", "a out"]

    @pytest.mark.asyncio
    async def test_chain_route_wraps_handler(self):
        from fastapi import APIRouter, Depends, FastAPI

        from snippetbox.application import get_context
        from snippetbox.middleware.chain import chain_route

        async def mark_user(request, ctx, call_next):
            ctx.authenticated_user_id = MOCK_USER_ID
            response = await call_next()
            response.headers["X-Intercepted"] = "yes"
            return response

        router = APIRouter(route_class=chain_route([mark_user]))

        @router.get("/whoami")
        async def whoami(ctx: RequestContext = Depends(get_context)) -> PlainTextResponse:
            return PlainTextResponse(str(ctx.authenticated_user_id))

        app = FastAPI()
        app.include_router(router)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="https://test") as client:
            response = await client.get("/whoami")

        assert response.text == str(MOCK_USER_ID)
        assert response.headers["x-intercepted"] == "yes"
