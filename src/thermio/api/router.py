"""Root API router: health checks at the top level, feature modules under /api/v1."""

from typing import Any

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from thermio.api.dependencies import DBSession
from thermio.config import settings
from thermio.core.jobs.registry import QueuePool
from thermio.modules import discover_modules


logger = structlog.get_logger()


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    status: str
    checks: dict[str, str]


health_router = APIRouter(tags=["health"])


@health_router.get(
    "/health/live",
    response_model=HealthResponse,
    summary="Liveness check",
)
async def liveness() -> HealthResponse:
    return HealthResponse(status="alive")


@health_router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description=(
        "Fails only when the database is unreachable. A missing job queue is "
        "reported but tolerated, since scheduled work runs in the worker."
    ),
)
async def readiness(db: DBSession) -> JSONResponse:
    checks = {"database": "ok", "jobs": "ok"}

    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("readiness_database_failed", error=str(e))
        checks["database"] = "unavailable"

    if QueuePool.pool is None:
        checks["jobs"] = "not_connected"

    ready = checks["database"] == "ok"
    return JSONResponse(
        status_code=(
            status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE
        ),
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )


@health_router.get("/info", summary="Application info")
async def info() -> dict[str, Any]:
    """Metadata plus the compliance defaults new workspaces start from."""
    return {
        "app": settings.app_name,
        "environment": settings.environment,
        "debug": settings.debug,
        "defaults": {
            "timezone": settings.default_timezone,
            "sign_off_weekday": settings.default_sign_off_weekday,
            "overdue_minutes": settings.default_overdue_minutes,
        },
    }


v1_router = APIRouter(prefix="/api/v1")
for module_router in discover_modules():
    v1_router.include_router(module_router)

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(v1_router)
