"""Auth-specific errors."""

from fastapi import status

from projectify.core.errors import ProjectifyError


class AuthenticationError(ProjectifyError):
    """Raised when bearer token authentication fails.

    The error message is for internal logging only —
    the client always receives a generic 401.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"


class AuthorizationError(ProjectifyError):
    """Raised when an authenticated caller lacks the required role."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
