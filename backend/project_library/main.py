"""
Project Library Backend - FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers and
       returns the app; `app` at module level is what uvicorn serves
       (uvicorn project_library.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware (outermost first):                           │
    │    Request ID → Rate Limit → Logging → GZip → CORS       │
    │                                                          │
    │  Routers (/api):                                         │
    │    auth · session · me · users · owners · follows ·      │
    │    messages · orgs · images · topics · projects · events │
    │  Router: GET /health                                     │
    │                                                          │
    │  Exception Handlers → {"data": null, "error": {...}}     │
    │    Validation 400 · Unauthorized 401 · Forbidden 403 ·   │
    │    NotFound 404 · RateLimit 429 · Database/other 500     │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, check configuration, log readiness
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from project_library import __version__
from project_library.config import settings
from project_library.database import dispose_engine
from project_library.exceptions import (
    DatabaseError,
    ProjectLibraryError,
    RateLimitExceededError,
)
from project_library.middleware.logging import RequestLoggingMiddleware
from project_library.middleware.rate_limit import (
    InMemoryRateLimiter,
    RateLimiter,
    RateLimitMiddleware,
)
from project_library.middleware.request_id import RequestIDMiddleware, request_id_var
from project_library.routes import (
    auth,
    events,
    follows,
    health,
    images,
    me,
    messages,
    orgs,
    owners,
    posts,
    projects,
    session,
    topics,
    users,
)
from project_library.schemas.common import error_content

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] project_library.access: GET /api/me 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Project Library Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: local development runs with the default secret
        logger.warning("Configuration warning: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Project Library Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(exc: ProjectLibraryError, details=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_content(
            code=exc.code,
            message=exc.message,
            request_id=request_id_var.get(""),
            details=exc.context if details is None else details,
        ),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the error envelope.

    Handler hierarchy:
        RequestValidationError  → 400 BAD_REQUEST (body/query failed schema)
        RateLimitExceededError  → 429 RATE_LIMITED (+ Retry-After)
        DatabaseError           → 500 SERVER_ERROR (generic message)
        ProjectLibraryError     → its own status/code (400/401/403/404)
        Exception (fallback)    → 500 SERVER_ERROR

    Internal details (SQL, stack traces) are logged, never returned.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        rid = request_id_var.get("")
        logger.info("[%s] Request validation failed: %s", rid, errors)
        first = errors[0]["message"] if errors else "Invalid request"
        return JSONResponse(
            status_code=400,
            content=error_content(
                code="BAD_REQUEST",
                message=first,
                request_id=rid,
                details={"errors": errors},
            ),
        )

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _error_response(exc, headers={"Retry-After": str(exc.retry_after)})

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(exc, details={})

    @app.exception_handler(ProjectLibraryError)
    async def handle_application_error(request: Request, exc: ProjectLibraryError):
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s", request_id_var.get(""), exc.code, exc.message)
            return _error_response(exc, details={})
        logger.info("[%s] %s: %s", request_id_var.get(""), exc.code, exc.message)
        return _error_response(exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_content(
                code="SERVER_ERROR",
                message="An unexpected error occurred. Please try again later.",
                request_id=rid,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(rate_limiter: Optional[RateLimiter] = None) -> FastAPI:
    """
    Assemble the application.

    Args:
        rate_limiter: Limiter applied per client IP. Defaults to a fresh
            InMemoryRateLimiter built from settings, so each app instance
            owns its own counters.
    """
    app = FastAPI(
        title="Project Library API",
        description=(
            "Owners (users and organizations) share projects and events, "
            "follow each other and exchange messages."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    if rate_limiter is None:
        rate_limiter = InMemoryRateLimiter(
            limit=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window,
            sweep_interval=settings.rate_limit_sweep_interval,
        )

    # ── Middleware ────────────────────────────────────────────────────────
    # Executes in reverse order of addition (last added = outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # session cookie
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware, limiter=rate_limiter)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    for module in (
        auth,
        session,
        me,
        users,
        owners,
        follows,
        messages,
        orgs,
        images,
        topics,
        projects,
        events,
        posts,
        health,
    ):
        app.include_router(module.router)

    return app


app = create_app()
