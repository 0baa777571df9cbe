"""
Error types for the FreshBooks client.

Every failure raised by the library derives from FreshBooksError so callers
and the CLI can report them uniformly.
"""

from typing import Any


class FreshBooksError(Exception):
    """Base error class for FreshBooks client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(FreshBooksError):
    """Client is missing configuration needed before any request is made."""


class ValidationError(FreshBooksError):
    """Validation error for local input/data issues (not API errors)."""


class TransportError(FreshBooksError):
    """The request never produced an HTTP response (connection, timeout, IO)."""


class APIError(FreshBooksError):
    """
    API error with status code, raw response body and FreshBooks error code.

    Args:
        message: Human readable error message
        status: HTTP status code of the response
        raw_response: Response body exactly as received
        error_code: FreshBooks ``errno`` when the API supplied one
        details: The error object from the response, if any

    """

    def __init__(
        self,
        message: str,
        status: int = 0,
        raw_response: str | None = None,
        error_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.status = status
        self.raw_response = raw_response
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code is not None:
            return f"{self.message} (status {self.status}, errno {self.error_code})"
        if self.status:
            return f"{self.message} (status {self.status})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        if self.error_code is not None:
            result["errno"] = self.error_code
        return result


class MalformedResponseError(APIError):
    """Response body could not be decoded as JSON."""


class UnexpectedResponseShapeError(APIError):
    """Response body was JSON but had no top-level ``response`` key."""


class UnknownAPIError(APIError):
    """Error status without an ``errors`` object to explain it."""
