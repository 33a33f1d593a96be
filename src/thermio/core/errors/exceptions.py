"""Domain exceptions for the application.

These exceptions represent expected business conditions and are converted
to RFC 7807 Problem Details responses by the exception handlers. Raising
one before any write keeps every log transition all-or-nothing.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a referenced log, vehicle, user or workspace does not exist.

    Example:
        raise NotFoundError("Vehicle not found", resource="vehicle", resource_id=vid)
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when a request conflicts with the current state of a resource."""

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(AppException):
    """Raised when request data fails a business validation rule.

    Example:
        raise ValidationError(
            "Invalid checklist",
            errors=[{"field": "questions", "message": "At least one question"}]
        )
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)


class UnauthorizedError(AppException):
    """Raised when authentication is missing or invalid."""

    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when the caller's role or workspace status forbids the action.

    Example:
        raise ForbiddenError("Admin role required", details={"required_role": "admin"})
    """

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


class JobQueueUnavailableError(AppException):
    """The Redis job queue is not connected in this process."""

    message = "Job queue is not available"
    error_code = "queue_unavailable"
    status_code = 503


# ============================================================
# Log lifecycle conditions
# ============================================================


class AlreadyCompletedError(ConflictError):
    """Checklist was already submitted for this log."""

    message = "Checklist has already been completed"
    error_code = "checklist_already_done"


class ShiftAlreadyEndedError(ConflictError):
    """A reading was submitted after the shift was closed."""

    message = "Shift already ended; no further readings can be added"
    error_code = "shift_ended"


class AlreadyEndedError(ConflictError):
    """End-of-shift was submitted twice."""

    message = "Shift has already been ended"
    error_code = "shift_already_ended"


class AlreadySignedError(ConflictError):
    """Admin sign-off was already recorded for this log."""

    message = "Log has already been signed off"
    error_code = "already_signed"


class ShiftNotCompletedError(ConflictError):
    """Admin sign-off was attempted before the driver ended the shift."""

    message = "Shift must be completed before admin sign-off"
    error_code = "shift_not_completed"


class ConcurrentUpdateError(ConflictError):
    """The log kept changing underneath a transition."""

    message = "Log was modified concurrently, please retry"
    error_code = "concurrent_update"


class LimitExceededError(ConflictError):
    """A workspace resource limit would be exceeded."""

    message = "Workspace limit exceeded"
    error_code = "limit_exceeded"


class OdometerRequiredError(ValidationError):
    """Odometer reading is mandatory at end of shift on the sign-off day."""

    message = "Odometer reading is required on the sign-off day"
    error_code = "odometer_required"


class SignatureRequiredError(ValidationError):
    """A signature is mandatory for this step."""

    message = "Signature is required"
    error_code = "signature_required"


class CabinRequiredError(ValidationError):
    """Periodic readings must carry a cabin temperature."""

    message = "Cabin temperature is required"
    error_code = "cabin_required"


class MissingZoneReadingError(ValidationError):
    """The start reading lacks a zone the vehicle is configured for."""

    message = "Start reading is missing required zone temperatures"
    error_code = "zone_reading_required"


class ReadingNotFoundError(NotFoundError):
    """No reading with the given id exists on the log."""

    message = "Reading not found"
    error_code = "reading_not_found"


class VehicleInactiveError(NotFoundError):
    """Drivers cannot open or work a log on a deactivated vehicle."""

    message = "Vehicle is deactivated"
    error_code = "vehicle_inactive"
