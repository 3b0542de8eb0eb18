"""
BunkerWeb SDK exceptions.

Errors fall into four groups:
- `ValidationError`: bad input caught before any network call
- `TransportError`: connection, timeout or other transport failures
- `DecodeError`: a successful HTTP response whose body breaks the API contract
- `APIError`: the control plane reported a failure (carries a status code)
"""

from __future__ import annotations

from typing import Any


class BunkerWebError(Exception):
    """Base class for every error raised by the SDK."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Local errors (never reach the network)
# =============================================================================


class ValidationError(BunkerWebError, ValueError):
    """Input rejected locally before any request was sent."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class WriteNotAllowedError(ValidationError):
    """A write was attempted while the client runs with `WritePolicy.DENY`."""

    def __init__(self, message: str, *, method: str, url: str) -> None:
        super().__init__(message)
        self.method = method
        self.url = url


# =============================================================================
# Transport / decode errors
# =============================================================================


class TransportError(BunkerWebError):
    """The request could not be completed (connection refused, DNS, TLS, ...)."""

    def __init__(self, message: str, *, method: str | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.url = url


class RequestTimeoutError(TransportError):
    """The request timed out."""


class DecodeError(BunkerWebError):
    """A 2xx response body was not a valid envelope, or its payload had the wrong shape."""

    def __init__(self, message: str, *, body: str | None = None) -> None:
        super().__init__(message)
        self.body = body


# =============================================================================
# API errors
# =============================================================================


class APIError(BunkerWebError):
    """
    Failure reported by the control plane.

    Attributes:
        status_code: HTTP status of the response
        response_body: Raw (decoded) response body, when available
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        response_body: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body

    def __str__(self) -> str:
        if self.message:
            return f"bunkerweb api error ({self.status_code}): {self.message}"
        return f"bunkerweb api error ({self.status_code})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class BadRequestError(APIError):
    """400/422: the control plane rejected the request payload."""


class AuthenticationError(APIError):
    """401: missing or invalid credentials."""


class AuthorizationError(APIError):
    """403: credentials are valid but lack permission."""


class NotFoundError(APIError):
    """404: the addressed resource does not exist."""


class ConflictError(APIError):
    """409: the request conflicts with existing state."""


class ServerError(APIError):
    """5xx: the control plane failed to handle the request."""


_STATUS_ERRORS: dict[int, type[APIError]] = {
    400: BadRequestError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    409: ConflictError,
    422: BadRequestError,
}


def error_from_response(
    status_code: int,
    message: str,
    *,
    response_body: Any | None = None,
) -> APIError:
    """Build the `APIError` subclass matching an HTTP status code."""
    error_cls = _STATUS_ERRORS.get(status_code)
    if error_cls is None:
        error_cls = ServerError if status_code >= 500 else APIError
    return error_cls(message, status_code=status_code, response_body=response_body)


def is_not_found(error: BaseException) -> bool:
    """True when `error` is the API's "resource does not exist" failure."""
    return isinstance(error, APIError) and error.status_code == 404
