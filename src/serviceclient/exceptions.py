"""
Custom exceptions for serviceclient.
"""

from .error_codes import ErrorCode


class ServiceClientError(Exception):
    """Base exception for all serviceclient errors."""

    pass


class HandledError(ServiceClientError):
    """
    An error carrying a stable error code for API consumers.

    Attributes:
        code: The error code (see ``ErrorCode``).
        message: The human-readable message.
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class ValidationError(HandledError):
    """Raised when an inbound request fails validation."""

    DEFAULT_MESSAGE = "Validation Failed."

    def __init__(self, code: str, message: str | None = None):
        super().__init__(code, message or self.DEFAULT_MESSAGE)

    @classmethod
    def from_error_code(cls, error_code: ErrorCode, *args: object) -> "ValidationError":
        """Build a validation error from a table entry and its template arguments."""
        return cls(error_code.code, error_code.format(*args))


class ConfigurationError(ServiceClientError):
    """Raised when a required configuration key is missing or empty."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Configuration key '{key}' is missing or empty")


class TransportError(ServiceClientError):
    """
    Network-level failure (connection refused, timeout, ...).

    Never retried by this package.
    """

    def __init__(self, message: str, method: str | None = None, url: str | None = None):
        self.method = method
        self.url = url
        super().__init__(message)


class HttpClientError(HandledError):
    """Non-2xx response from a downstream service."""

    def __init__(self, status_code: int, reason: str, body: str | None = None, uri: str | None = None):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        self.uri = uri
        super().__init__(
            ErrorCode.HTTP_CLIENT_ERROR.code,
            f"{ErrorCode.HTTP_CLIENT_ERROR.message_template} - {status_code} : {reason}",
        )


class DeserializationError(HandledError):
    """
    A successful response whose body could not be converted to the declared type.

    Attributes:
        cause: The underlying parse or conversion failure.
        body: The raw response text, if available.
    """

    def __init__(self, cause: Exception | str, body: str | None = None):
        self.cause = cause
        self.body = body
        super().__init__(
            ErrorCode.INVALID_REQUEST_CONTENT.code,
            f"Could not deserialize response body: {cause}",
        )
