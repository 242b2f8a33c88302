"""Error taxonomy for the scheduling core."""


class SchedulingError(Exception):
    """Base class for all errors raised by the scheduling core."""

    pass


class NotFoundError(SchedulingError):
    """Raised when a referenced template, assignment or task does not exist."""

    pass


class ConflictError(SchedulingError):
    """Raised when a scheduled task overlaps another task of the same user and day."""

    def __init__(self, message: str, conflicts=None):
        super().__init__(message)
        self.conflicts = list(conflicts or [])


class PermissionDeniedError(ConflictError):
    """Raised when a non-admin (or non-owner) attempts a restricted mutation."""

    pass


class ValidationError(SchedulingError, ValueError):
    """Raised when input is missing required fields or has inconsistent times."""

    pass


class StoreError(SchedulingError):
    """Raised when the schedule store fails. The driver error is chained as __cause__."""

    pass


# Mapping of scheduling errors to HTTP status codes for the calling layer
ERROR_STATUS_CODES = {
    NotFoundError: 404,
    PermissionDeniedError: 403,
    ConflictError: 409,
    ValidationError: 400,
    StoreError: 503,
}


def status_code_for(error: Exception) -> int:
    """Return the HTTP status for an error, most specific class first."""
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500
