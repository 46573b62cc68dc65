"""
Service Errors

Exceptions raised by the service layer. Each carries the HTTP status the
request boundary answers with; the application factory registers a single
handler that turns them into JSON error responses.
"""


class ServiceError(Exception):
    """Base class for errors that end a request with a client-visible message."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(ServiceError):
    """Missing user, email or test history."""
    status_code = 404


class ConflictError(ServiceError):
    """Duplicate email/username, or a write that lost a concurrent race."""
    status_code = 400


class UnauthorizedError(ServiceError):
    """Bad credentials or an unusable bearer token."""
    status_code = 401


class AccountLockedError(ServiceError):
    """Too many failed logins; the account is locked for a while."""
    status_code = 423


class InvalidInputError(ServiceError):
    """Malformed or missing request fields."""
    status_code = 400


class InvalidOrExpiredTokenError(ServiceError):
    status_code = 400

    def __init__(self, message: str = 'Invalid or expired token'):
        super().__init__(message)


class PasswordMismatchError(InvalidInputError):

    def __init__(self, message: str = 'Passwords do not match'):
        super().__init__(message)


class InternalError(ServiceError):
    """Store or mail failure."""
    status_code = 500
