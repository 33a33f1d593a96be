"""Request tracing and workspace context middleware."""

import uuid

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from thermio.core.auth.backend import decode_token


PUBLIC_PATHS = ("/health", "/info", "/docs", "/redoc", "/openapi.json")


def _bearer_token(request: Request) -> str | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    return token if scheme == "Bearer" and token else None


class WorkspaceContextMiddleware(BaseHTTPMiddleware):
    """Binds the caller's workspace and user to the request and log context.

    Only the token claims are read here. Whether the user is still active and
    the workspace not suspended is decided by ``get_current_user``.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        token = None
        if not request.url.path.startswith(PUBLIC_PATHS):
            token = _bearer_token(request)

        claims = decode_token(token) if token else None
        if claims is not None:
            request.state.workspace_id = claims.workspace_id
            request.state.user_id = claims.user_id
            structlog.contextvars.bind_contextvars(
                workspace_id=str(claims.workspace_id) if claims.workspace_id else None,
                user_id=str(claims.user_id),
            )

        return await call_next(request)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Gives every request an id, echoed in ``X-Request-ID``.

    The id is the ``trace_id`` of problem responses and is bound to the log
    context for the duration of the request.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request.state.trace_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars(
                "request_id", "workspace_id", "user_id"
            )

        response.headers["X-Request-ID"] = request_id
        return response
