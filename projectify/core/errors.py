"""
Domain error taxonomy.

Services raise these; a single exception handler in main.py renders them
as the standard `{success: false, message, error}` envelope.
"""

from fastapi import status


class ProjectifyError(Exception):
    """Base class for every error that maps to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(ProjectifyError):
    """Missing project, application, or user."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InvalidState(ProjectifyError):
    """Action attempted against a record not in the required state."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_state"


class Conflict(ProjectifyError):
    """Duplicate application for the same (project, applicant)."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "conflict"


class InvalidArgument(ProjectifyError):
    """Malformed or out-of-range field, including disallowed status values."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_argument"


class DependencyFailure(ProjectifyError):
    """The store or an external provider failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "dependency_failure"


class RateLimited(ProjectifyError):
    """Client exceeded its request allowance for the current window."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "rate_limited"

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after
