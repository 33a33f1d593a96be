"""Request logging middleware.

One ``request_completed`` line per request, carrying the workspace and user
bound by the workspace context middleware so a tenant's traffic can be
followed through the logs.
"""

import time
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


logger = structlog.get_logger()

QUIET_PATHS = ("/health/live", "/health/ready", "/docs", "/redoc", "/openapi.json")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request; health checks and API docs are skipped."""

    def __init__(self, app: Any, exclude_paths: tuple[str, ...] = QUIET_PATHS) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        path = request.url.path
        if path.startswith(self.exclude_paths):
            return await call_next(request)

        started = time.perf_counter()
        logger.debug(
            "request_started",
            method=request.method,
            path=path,
            query=request.url.query or None,
            client_ip=get_client_ip(request),
        )

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed",
                method=request.method,
                path=path,
                duration_ms=_elapsed_ms(started),
            )
            raise

        fields: dict[str, Any] = {
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": _elapsed_ms(started),
        }
        for key in ("workspace_id", "user_id"):
            value = getattr(request.state, key, None)
            if value:
                fields[key] = str(value)

        if response.status_code >= 500:
            logger.error("request_completed", **fields)
        elif response.status_code >= 400:
            logger.warning("request_completed", **fields)
        else:
            logger.info("request_completed", **fields)
        return response


def get_client_ip(request: Request) -> str | None:
    """Originating client address, as recorded on admin sign-offs.

    Behind the load balancer the first ``X-Forwarded-For`` hop is the client.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or (
        request.client.host if request.client else None
    )
