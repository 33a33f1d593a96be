"""Error handling module with RFC 7807 Problem Details."""

from thermio.core.errors.exceptions import (
    AlreadyCompletedError,
    AlreadyEndedError,
    AlreadySignedError,
    AppException,
    CabinRequiredError,
    ConcurrentUpdateError,
    ConflictError,
    ForbiddenError,
    JobQueueUnavailableError,
    LimitExceededError,
    MissingZoneReadingError,
    NotFoundError,
    OdometerRequiredError,
    ReadingNotFoundError,
    ShiftAlreadyEndedError,
    ShiftNotCompletedError,
    SignatureRequiredError,
    UnauthorizedError,
    ValidationError,
    VehicleInactiveError,
)
from thermio.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    "AlreadyCompletedError",
    "AlreadyEndedError",
    "AlreadySignedError",
    "AppException",
    "CabinRequiredError",
    "ConcurrentUpdateError",
    "ConflictError",
    "FieldError",
    "ForbiddenError",
    "JobQueueUnavailableError",
    "LimitExceededError",
    "MissingZoneReadingError",
    "NotFoundError",
    "OdometerRequiredError",
    "ProblemDetail",
    "ReadingNotFoundError",
    "ShiftAlreadyEndedError",
    "ShiftNotCompletedError",
    "SignatureRequiredError",
    "UnauthorizedError",
    "ValidationError",
    "VehicleInactiveError",
    "register_exception_handlers",
]
