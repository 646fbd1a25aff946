"""Domain exceptions mapped onto the HTTP error envelope."""

from __future__ import annotations


GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again!"


class ServiceError(RuntimeError):
    """Base error carrying a client-safe message and an HTTP status code."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialize a service error with a safe user-facing message."""

        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class RequestValidationError(ServiceError):
    """Raised when client input is malformed."""

    status_code = 400

    def __init__(self, message: str, *, reason: str = "InvalidBody") -> None:
        """Initialize a validation error for one failed rule."""

        super().__init__(message)
        self.reason = reason


class PayloadTooLargeError(ServiceError):
    """Raised when a request body exceeds the configured byte limit."""

    status_code = 413


class RateLimitedError(ServiceError):
    """Raised when a client exhausted its request window."""

    status_code = 429


class ExternalServiceError(ServiceError):
    """Raised when the generation provider fails, mapped to a safe message."""

    status_code = 500

    def __init__(
        self,
        message: str = GENERIC_FAILURE_MESSAGE,
        *,
        kind: str = "unknown",
        provider_status: int | None = None,
    ) -> None:
        """Initialize provider failure metadata for logs and responses."""

        super().__init__(message)
        self.kind = kind
        self.provider_status = provider_status
