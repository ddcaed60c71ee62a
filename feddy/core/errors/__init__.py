"""
Feddy error taxonomy.

FeddyAPIError is the only exception the transport client raises. Its `type`
is one of a closed set of kinds, and callers branch on that discriminator
rather than on message text.

Usage:
    from feddy.core.errors import FeddyAPIError, FeddyAPIErrorType
    try:
        await client.get_feedbacks()
    except FeddyAPIError as e:
        if e.type is FeddyAPIErrorType.RATE_LIMITED:
            ...
"""

from __future__ import annotations

from enum import Enum


class FeddyAPIErrorType(str, Enum):
    """Kinds of transport failure. Closed set."""
    INVALID_URL = "invalid-url"
    NO_DATA = "no-data"
    DECODING = "decoding"
    NETWORK = "network"
    SERVER = "server"
    INVALID_API_KEY = "invalid-api-key"
    RATE_LIMITED = "rate-limited"


class FeddyError(Exception):
    """Base class for every error raised by the SDK."""


class FeddyAPIError(FeddyError):
    """Structured transport error.

    Args:
        type: Discriminator from FeddyAPIErrorType.
        message: Human-readable message, safe to show to users.
        cause: Underlying exception, kept for diagnostics.
        status_code: HTTP status when a response was received.
    """

    def __init__(
        self,
        type: FeddyAPIErrorType,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        self.type = FeddyAPIErrorType(type)
        self.message = message
        self.cause = cause
        self.status_code = status_code
        super().__init__(message)

    def __repr__(self) -> str:
        return f"FeddyAPIError(type={self.type.value!r}, message={self.message!r})"

    @classmethod
    def invalid_url(cls, cause: BaseException | None = None) -> "FeddyAPIError":
        return cls(FeddyAPIErrorType.INVALID_URL, "Invalid URL", cause)

    @classmethod
    def no_data(cls, status_code: int | None = None) -> "FeddyAPIError":
        return cls(FeddyAPIErrorType.NO_DATA, "No data received", status_code=status_code)

    @classmethod
    def decoding(cls, message: str, cause: BaseException | None = None, status_code: int | None = None) -> "FeddyAPIError":
        return cls(FeddyAPIErrorType.DECODING, message, cause, status_code)

    @classmethod
    def network(cls, message: str, cause: BaseException | None = None) -> "FeddyAPIError":
        return cls(FeddyAPIErrorType.NETWORK, message, cause)

    @classmethod
    def server(cls, message: str, status_code: int | None = None) -> "FeddyAPIError":
        return cls(FeddyAPIErrorType.SERVER, message, status_code=status_code)

    @classmethod
    def invalid_api_key(cls) -> "FeddyAPIError":
        return cls(FeddyAPIErrorType.INVALID_API_KEY, "Invalid API key", status_code=401)

    @classmethod
    def rate_limited(cls) -> "FeddyAPIError":
        return cls(FeddyAPIErrorType.RATE_LIMITED, "Rate limit exceeded", status_code=429)


class FeddyConfigurationError(FeddyError):
    """Raised when configure() is given unusable settings (e.g. empty API key)."""


class FeddyNotConfiguredError(FeddyError):
    """Raised when an API call is attempted before configure()."""


class MissingIdentityError(FeddyError):
    """Raised before a vote or comment is sent when no user id can be resolved."""


def describe_error(error: BaseException) -> str:
    """Message shown alongside retained data after a failed load."""
    if isinstance(error, FeddyAPIError):
        return f"{error.type.value}: {error.message}"
    return str(error) or error.__class__.__name__
