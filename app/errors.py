"""Domain errors raised by the listing and transition services.

Each error carries the HTTP status and machine-readable code used by the
exception handler in ``app.main`` to build the error envelope.
"""


class AppError(Exception):
    """Base error for failures that map onto an HTTP response."""

    status_code = 500
    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class ValidationError(AppError):
    """Malformed request input (sort/order, slot index, booking payload)."""

    status_code = 400
    code = "VALIDATION_ERROR"


class InvalidSlotError(ValidationError):
    code = "INVALID_SLOT"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    """The entity is not in a status that allows the requested transition."""

    status_code = 409
    code = "CONFLICT"


class DatabaseError(AppError):
    """A store call failed or timed out."""

    status_code = 500
    code = "DATABASE_ERROR"


class NotificationError(AppError):
    """Email delivery failed. Logged by callers, never surfaced to clients."""

    status_code = 502
    code = "NOTIFICATION_ERROR"
