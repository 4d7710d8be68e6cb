"""
Snippetbox - FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
How:   `create_app()` builds the Application (settings, models, template cache,
       session manager), installs the standard middleware chain, registers the
       exception handlers and mounts the routers. `run()` is the `snippetbox`
       console script: it parses the command line and starts uvicorn.
Who:   uvicorn calls `create_app` as a factory (there is no module-level app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Standard chain:                                         │
    │  ┌───────────────┐ ┌──────────┐ ┌────────────────┐       │
    │  │ Recover panic │→│ Logging  │→│ Secure headers │       │
    │  └───────────────┘ └──────────┘ └────────────────┘       │
    │                                                          │
    │  Routes:                                                 │
    │  /ping, /static/*          (standard only)               │
    │  /, /about, /snippet/view  (dynamic chain)               │
    │  /snippet/create, /account (protected chain)             │
    │                                                          │
    │  Exception Handlers:                                     │
    │  NotFound→404 │ BadRequest→400 │ Database/Template→500   │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Purge expired sessions from the store
    3. Log startup complete

    Shutdown:
    1. Dispose database engine (close all connections)
    2. Log shutdown complete
"""

import argparse
import logging
import os
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncGenerator, Optional, Sequence

import uvicorn
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from snippetbox import __version__
from snippetbox.application import Application, get_application
from snippetbox.config import Settings
from snippetbox.database import create_engine_from_settings, create_session_factory, dispose_engine
from snippetbox.exceptions import (
    BadRequestError,
    DatabaseError,
    NotFoundError,
    TemplateNotFoundError,
)
from snippetbox.middleware.chain import install_standard_chain
from snippetbox.responses import client_error, not_found, server_error
from snippetbox.routes import account, pages, ping, snippets, users
from snippetbox.services.snippet_service import SnippetService
from snippetbox.services.user_service import UserService
from snippetbox.sessions import SessionManager, SQLAlchemyStore
from snippetbox.templates import STATIC_DIR, new_template_cache

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T10:30:00 [INFO] snippetbox.access: 127.0.0.1 - HTTP/1.1 GET / 200 2.1ms

    Everything goes to stdout; the process supervisor decides where it lands.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # snippetbox.access replaces uvicorn's own access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: configure logging and drop sessions that expired while the
    server was down. Shutdown: close the connection pool.
    """
    application: Application = app.state.application

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(application.settings)
    logger.info("Snippetbox %s starting up...", __version__)

    purged = await application.sessions.store.delete_expired()
    if purged:
        logger.info("Purged %d expired session(s)", purged)

    logger.info("Templates loaded: %s", ", ".join(application.templates.pages()))
    logger.info("Serving on %s", application.settings.listen_address)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Snippetbox shutting down...")
    if application.engine is not None:
        await dispose_engine(application.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to plain-text error replies.

    Handler hierarchy:
        NotFoundError            → 404 Not Found
        BadRequestError          → 400 Bad Request
        DatabaseError            → 500 Internal Server Error (logged)
        TemplateNotFoundError    → 500 Internal Server Error (logged)
        HTTPException (routing)  → its own status, headers kept (e.g. Allow on 405)

    Anything else propagates to RecoverPanicMiddleware.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        logger.debug("Not found: %s", exc.message)
        return not_found()

    @app.exception_handler(BadRequestError)
    async def handle_bad_request(request: Request, exc: BadRequestError):
        logger.warning("Bad request: %s | Context: %s", exc.message, exc.context)
        return client_error(400)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return server_error(exc, debug=get_application(request).settings.debug)

    @app.exception_handler(TemplateNotFoundError)
    async def handle_template_not_found(request: Request, exc: TemplateNotFoundError):
        return server_error(exc, debug=get_application(request).settings.debug)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return client_error(exc.status_code, headers=getattr(exc, "headers", None))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def build_application(settings: Settings) -> Application:
    """Wire the production dependencies: PostgreSQL models and SQL sessions."""
    engine = create_engine_from_settings(settings)
    session_factory = create_session_factory(engine)

    return Application(
        settings=settings,
        snippets=SnippetService(session_factory),
        users=UserService(session_factory, bcrypt_cost=settings.bcrypt_cost),
        templates=new_template_cache(),
        sessions=SessionManager(
            SQLAlchemyStore(session_factory),
            lifetime=timedelta(hours=settings.session_lifetime_hours),
            cookie_name=settings.session_cookie_name,
            secure=settings.session_cookie_secure,
        ),
        engine=engine,
    )


def create_app(
    settings: Optional[Settings] = None,
    application: Optional[Application] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:    Defaults to `Settings()` (environment / .env)
        application: Pre-built dependencies; tests pass one with mock models

    Returns:
        Fully configured FastAPI instance ready to receive requests.
    """
    if application is None:
        application = build_application(settings or Settings())

    app = FastAPI(
        title="Snippetbox",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.application = application

    install_standard_chain(app)
    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(ping.router)
    app.include_router(pages.router)
    app.include_router(snippets.router)
    app.include_router(snippets.protected)
    app.include_router(users.router)
    app.include_router(users.protected)
    app.include_router(account.router)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    return app


# ══════════════════════════════════════════════════════════════════════════
# Command Line
# ══════════════════════════════════════════════════════════════════════════

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="snippetbox", description="Run the Snippetbox web server.")
    parser.add_argument("--addr", help="HTTP network address, e.g. :4000 or 127.0.0.1:4000")
    parser.add_argument("--dsn", help="SQLAlchemy database URL")
    parser.add_argument("--debug", action="store_true", default=None, help="Send stack traces in 500 responses")
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Environment settings with command-line flags applied on top."""
    overrides = {}
    if args.addr:
        host, _, port = args.addr.rpartition(":")
        overrides["backend_host"] = host or "0.0.0.0"
        overrides["backend_port"] = int(port)
    if args.dsn:
        overrides["database_url"] = args.dsn
    if args.debug:
        overrides["debug"] = True
    return Settings(**overrides)


def run(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point of the `snippetbox` console script."""
    settings = settings_from_args(parse_args(argv))
    setup_logging(settings)

    # Propagated to the worker through the environment, since uvicorn
    # calls the factory without arguments
    os.environ["DATABASE_URL"] = settings.database_url
    os.environ["BACKEND_HOST"] = settings.backend_host
    os.environ["BACKEND_PORT"] = str(settings.backend_port)
    os.environ["DEBUG"] = "true" if settings.debug else "false"

    ssl_options = {}
    if (
        settings.tls_cert_file
        and settings.tls_key_file
        and os.path.exists(settings.tls_cert_file)
        and os.path.exists(settings.tls_key_file)
    ):
        ssl_options = {"ssl_certfile": settings.tls_cert_file, "ssl_keyfile": settings.tls_key_file}
    else:
        logger.warning("TLS certificate not found, serving plain HTTP")

    uvicorn.run(
        "snippetbox.main:create_app",
        factory=True,
        host=settings.backend_host,
        port=settings.backend_port,
        timeout_keep_alive=60,
        log_config=None,
        **ssl_options,
    )


if __name__ == "__main__":
    run()
