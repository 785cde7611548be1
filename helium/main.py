"""
Helium — FastAPI Application Factory
======================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error mapping and
       lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn helium.main:app), by the `helium` console
       script (run()), and by tests with a pre-built ServiceContainer.
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────────┐ ┌────────────┐  │
    │  │  Request ID  │→│   Logging    │→│    CORS    │  │
    │  └──────────────┘ └──────────────┘ └────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────┐ ┌────────────┐ ┌────────────┐      │
    │  │ /api/actors│ │ /api/movies│ │ /api/genres│      │
    │  └────────────┘ └────────────┘ └────────────┘      │
    │  ┌──────────────────────┐                           │
    │  │ /healthz  /metrics   │                           │
    │  └──────────────────────┘                           │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐  │
    │  │ Validation→400 │ NotFound→404 │ Store→500    │  │
    │  └──────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Resolve secrets (Key Vault → environment); missing required values abort
    3. Build the ServiceContainer (store client, telemetry, services)

    Shutdown:
    1. Close the document store client (and its HTTP session)
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from helium import __version__
from helium.config import ResolvedConfig, Settings, resolve_config, settings
from helium.exceptions import (
    HeliumError,
    NotFoundError,
    StartupConfigError,
    StoreError,
    ValidationError,
)
from helium.middleware.logging import RequestLoggingMiddleware
from helium.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from helium.models.base import format_validation_errors
from helium.routes import actors, genres, movies, system
from helium.services.container import ServiceContainer

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Request IDs are part of each access log message (see middleware/logging.py).
    """
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Container runtimes capture stdout
        ],
        force=True,
    )

    # The Azure SDK logs every HTTP exchange at INFO
    logging.getLogger("azure").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: build clients on startup, close them on shutdown.

    A container handed to create_app() is used as is and left open (its owner
    closes it). Otherwise configuration is resolved here, and a
    StartupConfigError propagates so the server refuses to start.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    owns_services = getattr(app.state, "services", None) is None

    if owns_services:
        setup_logging()
        logger.info("=" * 60)
        logger.info("Helium %s starting up...", __version__)

        config: Optional[ResolvedConfig] = getattr(app.state, "config", None)
        if config is None:
            try:
                config = await resolve_config(settings)
            except StartupConfigError as e:
                logger.critical("Configuration error: %s", e.message)
                logger.critical("Fix the configuration and restart the server.")
                raise

        app.state.services = ServiceContainer.build(config)
        logger.info(
            "Using database '%s', collection '%s'", config.db_name, config.db_collection
        )
        logger.info("API docs: http://%s:%d/docs", settings.host, settings.port)
        logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    if owns_services:
        logger.info("Helium shutting down...")
        await app.state.services.close()
        app.state.services = None
        logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, message, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "message": message,
            "status": status_code,
            "request_id": request_id_var.get(""),
        },
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError         → 400 (message is a list, one entry per constraint)
        RequestValidationError  → 400 (body is not JSON, path/query type errors)
        NotFoundError           → 404
        StoreError              → 500 (store message passed through)
        HeliumError (base)      → 500
        Exception (fallback)    → 500 (generic message, stack trace logged)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, exc.messages)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        messages = format_validation_errors(exc.errors())
        logger.warning("[%s] Invalid request: %s", request_id_var.get(""), messages)
        return _error_response(400, messages)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, exc.message)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error(
            "[%s] Document store error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, exc.message)

    @app.exception_handler(HeliumError)
    async def handle_helium_error(request: Request, exc: HeliumError):
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace is logged server-side only, never returned."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        # Starlette answers this one from outside the middleware chain
        return _error_response(
            500,
            "An unexpected error occurred. Please try again or contact support.",
            headers={REQUEST_ID_HEADER: rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    services: Optional[ServiceContainer] = None,
    config: Optional[ResolvedConfig] = None,
    app_settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        services: Pre-built container (tests). When omitted the lifespan builds one.
        config: Already-resolved configuration; skips secret resolution at startup.
        app_settings: Settings used for CORS; defaults to the module singleton.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Helium API",
        description=(
            "CRUD REST API over a document database of actors, movies and genres."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.services = services
    app.state.config = config

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → routes

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(actors.router)
    app.include_router(movies.router)
    app.include_router(genres.router)
    app.include_router(system.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `helium.main:app` to be importable
app = create_app()


def run() -> None:
    """
    Console entry point: resolve configuration, then serve on HOST:PORT.

    Exits with status 1 when required configuration is missing.
    """
    setup_logging()
    try:
        config = asyncio.run(resolve_config(settings))
    except StartupConfigError as e:
        logger.critical("Configuration error: %s", e.message)
        sys.exit(1)

    logger.info("Listening on http://%s:%d", settings.host, settings.port)
    uvicorn.run(
        create_app(config=config),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
