class ServiceError(Exception):
    """Base exception for service layer failures."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def detail(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class UnauthorizedError(ServiceError):
    """Raised when the admin session token is missing or invalid."""

    kind = "unauthorized"
    status_code = 401


class NotFoundError(ServiceError):
    kind = "not_found"
    status_code = 404


class ValidationError(ServiceError):
    kind = "validation"
    status_code = 400


class ConflictError(ServiceError):
    """Raised when a state precondition of an operation does not hold."""

    kind = "conflict"
    status_code = 409


class AlreadyCheckedInError(ConflictError):
    kind = "already_checked_in"


class PastAppointmentError(ConflictError):
    kind = "past_appointment"


class DownstreamServiceError(ServiceError):
    """Raised when the document service returns an error response."""

    kind = "downstream"
    status_code = 502

    def __init__(self, message: str, status_code: int | None = None, *, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.upstream_status = status_code
