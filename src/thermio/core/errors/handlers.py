"""RFC 7807 Problem Details exception handlers.

Domain conditions (a checklist submitted twice, a sign-off before the shift
ended, ...) are expected outcomes of normal use, so they are rendered as
problem documents carrying a stable ``error_code`` that clients map to a
user-facing message.

See: https://tools.ietf.org/html/rfc7807
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from thermio.config import settings
from thermio.core.errors.exceptions import AppException


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()


class FieldError(BaseModel):
    """One invalid field of a request body, query or path."""

    field: str
    message: str
    type: str | None = None


class ProblemDetail(BaseModel):
    """RFC 7807 problem document.

    ``error_code`` is the stable, machine-readable part; ``trace_id`` is the
    request id also returned in ``X-Request-ID``. Details of the raised
    exception are merged in as extension members.
    """

    type: str
    title: str
    status: int
    detail: str
    error_code: str | None = None
    instance: str | None = None
    errors: list[FieldError] | None = None
    trace_id: str | None = None

    model_config = {"extra": "allow"}


def problem_response(
    request: Request,
    status_code: int,
    error_code: str,
    detail: str,
    *,
    errors: list[FieldError] | None = None,
    extensions: dict[str, Any] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = ProblemDetail(
        type=f"{settings.api_docs_base_url}/errors/{error_code}",
        title=error_code.replace("_", " ").title(),
        status=status_code,
        detail=detail,
        error_code=error_code,
        instance=request.url.path,
        errors=errors,
        trace_id=getattr(request.state, "trace_id", None),
    ).model_dump(exclude_none=True)

    # Extensions never overwrite the standard members
    for key, value in (extensions or {}).items():
        content.setdefault(key, value)

    return JSONResponse(status_code=status_code, content=content)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    log_method = logger.warning if exc.status_code >= 500 else logger.info
    log_method(
        "app_exception",
        error_code=exc.error_code,
        status_code=exc.status_code,
        path=request.url.path,
        details=exc.details,
    )
    return problem_response(
        request,
        exc.status_code,
        exc.error_code,
        exc.message,
        extensions=exc.details,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render pydantic errors as field errors, dropping the ``body`` prefix."""
    errors = []
    for error in exc.errors():
        parts = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append(
            FieldError(
                field=".".join(parts) or "unknown",
                message=error.get("msg", "Invalid value"),
                type=error.get("type"),
            )
        )

    logger.info(
        "request_validation_failed",
        path=request.url.path,
        fields=[e.field for e in errors],
    )
    return problem_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Request validation failed",
        errors=errors,
    )


async def integrity_error_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """A unique key lost a race with another request.

    Services check registrations, usernames and slugs before inserting, so
    this only fires when two requests insert the same key concurrently.
    """
    constraint = getattr(getattr(exc.orig, "__cause__", None), "constraint_name", None)
    logger.warning(
        "integrity_conflict",
        path=request.url.path,
        constraint=constraint,
    )
    return problem_response(
        request,
        status.HTTP_409_CONFLICT,
        "duplicate_record",
        "The record was created by another request",
        extensions={"constraint": constraint} if constraint else None,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all returning a generic 500; details are logged, not exposed."""
    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return problem_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    handlers: list[tuple[type[Exception], Any]] = [
        (AppException, app_exception_handler),
        (RequestValidationError, validation_exception_handler),
        (IntegrityError, integrity_error_handler),
        (Exception, generic_exception_handler),
    ]
    for exc_class, handler in handlers:
        app.add_exception_handler(exc_class, cast("ExceptionHandler", handler))
