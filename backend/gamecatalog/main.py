"""
Game Catalog API — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       ``app`` is the module-level instance uvicorn serves
       (``uvicorn gamecatalog.main:app``).

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware:  RateLimit → RequestID → Logging        │
    │               → GZip → CORS                          │
    │                                                      │
    │  Routes:      /api/games/...   /health   /           │
    │                                                      │
    │  Exception Handlers:                                 │
    │    ValidationError / BadRequestError     → 400       │
    │    NotFoundError                         → 404       │
    │    StorageError                          → 500       │
    │    Exception                             → 500       │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, optional sample-data seeding
    Shutdown: dispose the database engine (PostgreSQL backend only)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from gamecatalog import __version__
from gamecatalog.config import settings
from gamecatalog.dependencies import repository_scope
from gamecatalog.exceptions import (
    BadRequestError,
    GameCatalogError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from gamecatalog.middleware.logging import RequestLoggingMiddleware
from gamecatalog.middleware.rate_limit import RateLimitMiddleware
from gamecatalog.middleware.request_id import RequestIDMiddleware, request_id_var
from gamecatalog.routes import games, health
from gamecatalog.seed import seed_games

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole process.

    Format: ``%(asctime)s [%(levelname)s] %(name)s: %(message)s`` on stdout.
    Chatty third-party loggers are raised to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Video Game API starting up (storage: %s)", settings.storage_backend)

    if settings.seed_sample_data:
        async with repository_scope() as repo:
            inserted = await seed_games(repo)
        logger.info("Sample data: %d games inserted", inserted)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Video Game API shutting down...")
    if settings.uses_database:
        from gamecatalog.database import dispose_engine

        await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(error: str, message: str, details=None) -> dict:
    body = {"message": message, "error": error, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes; every error body carries
    ``message``, ``error`` and ``request_id``.

        ValidationError          → 400 (details = field errors)
        RequestValidationError   → 400 (malformed JSON body)
        BadRequestError         → 400
        NotFoundError           → 404
        StorageError            → 500 (message = underlying error text)
        GameCatalogError        → 500
        Exception               → 500 (generic message, stack trace logged)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Malformed request: %s", request_id_var.get(""), exc.errors())
        return JSONResponse(
            status_code=400,
            content=error_body(
                "validation_error",
                "Invalid request body",
                {"errors": jsonable_encoder(exc.errors())},
            ),
        )

    @app.exception_handler(BadRequestError)
    async def handle_bad_request(request: Request, exc: BadRequestError):
        return JSONResponse(status_code=400, content=error_body("bad_request", exc.message))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=error_body("not_found", exc.message))

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Storage error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(status_code=500, content=error_body("storage_error", exc.message))

    @app.exception_handler(GameCatalogError)
    async def handle_app_error(request: Request, exc: GameCatalogError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=500, content=error_body("server_error", exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True
        )
        return JSONResponse(
            status_code=500,
            content=error_body("internal_server_error", "An unexpected error occurred"),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Video Game API",
        description=(
            "Catalog of video games: paginated listing, multi-criteria search, "
            "CRUD and per-field accessors."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_origins_list != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(games.router)
    app.include_router(health.router)

    return app


app = create_app()
