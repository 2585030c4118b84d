"""
Error Definitions

Defines custom exception classes used in the application for unified error handling.
"""

from typing import Any, Optional


class AppError(Exception):
    """
    Application Base Exception

    Base class for all custom exceptions, containing error message, type, and code.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "app_error",
        code: str = "internal_error",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Error type
            code: Error code
            details: Extra error details
            status_code: HTTP status code
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        """
        Convert to the OpenAI-style error envelope

        Args:
            include_details: Whether to attach the details mapping

        Returns:
            dict: Error information dictionary
        """
        result = {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code,
            }
        }
        if include_details and self.details:
            result["error"]["details"] = self.details
        return result

    def to_flat_dict(self, include_details: bool = True) -> dict[str, Any]:
        """
        Convert to the local-runner error body ({"error": "<message>"})
        """
        result: dict[str, Any] = {"error": self.message}
        if include_details and self.details:
            result["details"] = self.details
        return result


class ValidationError(AppError):
    """
    Parameter Validation Error

    Raised when request parameters do not meet requirements. Always raised
    before any upstream call is made.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        code: str = "invalid_request",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="invalid_request_error",
            code=code,
            details=details,
            status_code=400,
        )


class NotFoundError(AppError):
    """
    Resource Not Found Error

    Raised when the requested model or route does not exist.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        code: str = "not_found",
        error_type: str = "not_found_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type=error_type,
            code=code,
            details=details,
            status_code=404,
        )


class UpstreamError(AppError):
    """
    Upstream Service Error

    Raised when the upstream provider answers with a non-2xx status, cannot be
    reached, or keeps rate limiting past the retry bound. Surfaced to clients
    as a 500.
    """

    def __init__(
        self,
        message: str = "Failed to proxy request",
        code: str = "upstream_error",
        details: Optional[dict[str, Any]] = None,
        upstream_status: Optional[int] = None,
    ):
        super().__init__(
            message=message,
            error_type="server_error",
            code=code,
            details=details,
            status_code=500,
        )
        self.upstream_status = upstream_status


class UpstreamRateLimitedError(UpstreamError):
    """
    Upstream Rate Limit Error

    The upstream answered 429 on every attempt the retry policy allows.
    """

    def __init__(
        self,
        message: str = "Upstream rate limit exceeded",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="rate_limited",
            details=details,
            upstream_status=429,
        )


class MalformedChunkError(AppError):
    """
    Malformed Stream Chunk Error

    A complete line inside an active upstream stream could not be decoded.
    Never surfaced to clients: the stream translator logs and skips the line.
    """

    def __init__(self, message: str, line: str = ""):
        super().__init__(
            message=message,
            error_type="malformed_chunk",
            code="malformed_chunk",
            status_code=502,
        )
        self.line = line
