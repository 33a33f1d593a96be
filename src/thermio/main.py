"""FastAPI application factory.

Run with ``uvicorn thermio.main:create_app --factory``; the hourly jobs run
separately in the arq worker (``thermio.core.jobs.worker``).
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError

from thermio.api.router import api_router
from thermio.config import settings
from thermio.core.auth.middleware import RequestIdMiddleware, WorkspaceContextMiddleware
from thermio.core.errors import register_exception_handlers
from thermio.core.jobs.registry import close_queue, open_queue
from thermio.core.logging import RequestLoggingMiddleware, configure_logging


configure_logging(
    log_level=settings.log_level,
    json_output=settings.is_production,
)

logger = structlog.get_logger()

DEV_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
        default_timezone=settings.default_timezone,
    )

    # Without Redis the API still serves; only manual job triggers fail
    try:
        await open_queue()
    except (RedisError, OSError) as e:
        logger.warning("job_queue_unavailable", error=str(e))

    yield

    await close_queue()
    logger.info("application_shutdown")


def create_app() -> FastAPI:
    docs_enabled = not settings.is_production
    app = FastAPI(
        title=settings.app_name,
        description=(
            "Fleet temperature compliance: daily vehicle logs, weekly admin "
            "sign-off and live monitoring"
        ),
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins
        or (DEV_ORIGINS if settings.is_development else []),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    # Added last runs first: request id, workspace context, then logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(WorkspaceContextMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router)
    return app
