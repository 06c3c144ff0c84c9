"""
Scout Query Service — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn scout.main:app) and by the API tests.
When:  Once at server startup.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌─────────────────┐ ┌──────────┐  │
    │  │  Req ID      │→│  Logging        │→│  CORS    │  │
    │  └──────────────┘ └─────────────────┘ └──────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────┐ ┌──────────────────────┐  │
    │  │ /api/mcp/* (query)   │ │ GET /health          │  │
    │  └──────────────────────┘ └──────────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ Malformed body→400        │ Unexpected→500    │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, build the QueryClient (app.state.query_client)
    Shutdown: close the client (SQLite engine + HTTP connection pool)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from scout import __version__
from scout.config import settings
from scout.middleware.logging import RequestLoggingMiddleware
from scout.middleware.request_id import RequestIDMiddleware, request_id_var
from scout.responses import error_response
from scout.routes import health, query
from scout.services.query_client import QueryClient, create_query_client

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Third-party loggers that log every connection or statement are raised
    to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

def build_lifespan(client: Optional[QueryClient] = None):
    """
    Lifespan factory.

    Args:
        client: Pre-built QueryClient to serve (tests). When omitted, one is
                created from settings at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging()
        logger.info("=" * 60)
        logger.info("Scout Query Service %s starting up...", __version__)

        owned = client is None
        app.state.query_client = client or create_query_client()

        logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
        logger.info("=" * 60)

        yield

        logger.info("Scout Query Service shutting down...")
        if owned:
            await app.state.query_client.aclose()
        logger.info("Shutdown complete.")

    return lifespan


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions that escape a route to error bodies.

    Handler hierarchy:
        RequestValidationError → 400 (body is not a JSON object)
        Exception (fallback)   → 500, traceback logged only

    Query failures never get here: QueryClient returns them as failed
    QueryResults, which the routes send with status 200.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Malformed request body: %s", request_id_var.get(""), exc.errors())
        return error_response(
            400,
            "validation_error",
            "Request body must be a JSON object with a 'query' field",
            {"errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(client: Optional[QueryClient] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        client: Optional QueryClient to serve instead of one built from settings.
    """
    app = FastAPI(
        title="Scout Query API",
        description=(
            "Analytics query service. Runs SQL against the embedded SQLite store "
            "or forwards it to the remote query service, returning a uniform result."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=build_lifespan(client),
    )

    # Last added runs first: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(query.router)
    app.include_router(health.router)

    return app


# uvicorn scout.main:app
app = create_app()
