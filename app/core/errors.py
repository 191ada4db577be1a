"""
Typed errors raised by services.

Every error carries a user-displayable message; the API layer turns them
into ``{"detail": ..., "code": ...}`` responses with ``status_code``.
"""


class HotelHubError(Exception):
    """Base class for errors that are safe to show to the caller."""
    code = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HotelHubError):
    """Malformed or out-of-range input, or a violated business rule."""
    code = "validation_error"
    status_code = 422


class CapacityError(HotelHubError):
    """Partner employee cap reached, or cap shrunk below existing clients."""
    code = "capacity_error"
    status_code = 409


class NotFoundError(HotelHubError):
    code = "not_found"
    status_code = 404


class ConflictError(HotelHubError):
    """Concurrent writers kept conflicting, or a duplicate was submitted."""
    code = "conflict"
    status_code = 409


class PermissionDeniedError(HotelHubError):
    code = "permission_denied"
    status_code = 403


class SummaryError(HotelHubError):
    code = "summary_failed"
    status_code = 502
