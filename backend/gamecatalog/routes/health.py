"""
Game Catalog API — Health and Banner Routes
=============================================

What:  ``GET /`` liveness banner and ``GET /health`` dependency check.
How:   /health runs ``SELECT 1`` when the PostgreSQL backend is configured;
       the in-memory backend has no dependency to probe.

Status levels:
    healthy    database reachable (or not used)   → HTTP 200
    unhealthy  database unreachable               → HTTP 503
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from gamecatalog import __version__
from gamecatalog.config import settings
from gamecatalog.schemas.game import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/",
    response_class=PlainTextResponse,
    summary="Liveness banner",
)
async def banner() -> str:
    return "Video Game API is running"


async def check_database() -> str:
    if not settings.uses_database:
        return "not_used"

    from gamecatalog.database import engine

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return "disconnected"
    return "connected"


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "Database unreachable"}},
    summary="Service health check",
)
async def health_check():
    database = await check_database()
    health = HealthResponse(
        status="unhealthy" if database == "disconnected" else "healthy",
        version=__version__,
        storage_backend=settings.storage_backend,
        database=database,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if health.status == "unhealthy":
        return JSONResponse(status_code=503, content=health.model_dump())
    return health
