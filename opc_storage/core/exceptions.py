"""Storage client exceptions.

Every failure surfaced by the client derives from AppException so callers
can catch a single base type while still branching on the specific kind.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all storage client errors.

    Attributes:
        message: Human-readable error message.
        code: Machine-readable error code.
        details: Additional error details (e.g., URLs, response bodies).
    """

    message: str = "An error occurred"
    code: str = "APP_ERROR"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.__class__.message
        self.code = code or self.__class__.code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, code={self.code!r})"


class ClientInitError(AppException):
    """The client could not be built from the supplied configuration."""

    message = "Client initialization failed"
    code = "CLIENT_INIT_ERROR"


class AuthError(AppException):
    """Authentication or token refresh failed."""

    message = "Authentication failed"
    code = "AUTHENTICATION_ERROR"


class RequestBuildError(AppException):
    """The request could not be built (bad method, path, or body)."""

    message = "Request could not be built"
    code = "REQUEST_BUILD_ERROR"


class RequestExecError(AppException):
    """Transport failure or non-2xx response from the storage service.

    Attributes:
        api_status_code: Status code returned by the service, if any.
    """

    message = "Storage request failed"
    code = "REQUEST_EXEC_ERROR"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        api_status_code: int | None = None,
    ):
        super().__init__(message, code, details)
        self.api_status_code = api_status_code


class NotFoundError(RequestExecError):
    """The storage service returned 404."""

    message = "Resource not found"
    code = "NOT_FOUND"
