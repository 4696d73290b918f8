"""
VocabList Backend - FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn vocablist.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │  Middleware:  Request ID → Access Log → GZip → CORS      │
    │                                                          │
    │  Routes:      /api/lists   /api/items   /api/shared      │
    │               /api/assets  /health                       │
    │                                                          │
    │  Exception handlers:                                     │
    │    InvalidArgument→400  Unauthenticated→401              │
    │    NotFound→404  AlreadyExists→409  External→502         │
    │    Database→500  anything else→500                       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   logging, configuration check, storage directory
    Shutdown:  dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from vocablist import __version__
from vocablist.config import settings
from vocablist.database import dispose_engine
from vocablist.exceptions import (
    AlreadyExistsError,
    DatabaseError,
    ExternalServiceError,
    InvalidArgumentError,
    NotFoundError,
    UnauthenticatedError,
    VocabListError,
)
from vocablist.middleware.logging import RequestLoggingMiddleware
from vocablist.middleware.request_id import RequestIDMiddleware, request_id_var
from vocablist.routes import assets, health, items, lists, shared

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2026-10-19T12:00:00 [INFO] vocablist.services.list_store: List created: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("VocabList backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # keep serving so /health can report the problem
        logger.error("Configuration error: %s", str(e))

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Asset storage: %s", storage.resolve())
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("VocabList backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy to HTTP responses.

    Client errors (4xx) return the exception context as `details`.
    Server and upstream errors (5xx) return a generic message; the context
    is logged server-side only.
    """

    @app.exception_handler(InvalidArgumentError)
    async def handle_invalid_argument(request: Request, exc: InvalidArgumentError):
        logger.warning("[%s] Invalid argument: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "invalid_argument", exc.message, exc.context)

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        return _error_response(401, "unauthenticated", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message, exc.context)

    @app.exception_handler(AlreadyExistsError)
    async def handle_already_exists(request: Request, exc: AlreadyExistsError):
        return _error_response(409, "already_exists", exc.message, exc.context)

    @app.exception_handler(ExternalServiceError)
    async def handle_external_service(request: Request, exc: ExternalServiceError):
        logger.error(
            "[%s] External service error (%s): %s | Context: %s",
            request_id_var.get(""),
            exc.service,
            exc.message,
            exc.context,
        )
        return _error_response(
            502,
            "external_service_error",
            exc.message,
            {"service": exc.service} if exc.service else None,
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(VocabListError)
    async def handle_application_error(request: Request, exc: VocabListError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="VocabList API",
        description=(
            "Word lists, per-language aggregation lists, share codes and list import "
            "for the vocabulary capture app."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Middleware ────────────────────────────────────────────────────────
    # Executed in reverse order of addition: RequestID runs first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(lists.router)
    app.include_router(items.router)
    app.include_router(shared.router)
    app.include_router(assets.router)
    app.include_router(health.router)

    return app


app = create_app()
