"""
Error Definitions

Exceptions raised by the request layer. The timing core itself never raises.
"""

from typing import Any, Optional


class HttpStatError(Exception):
    """
    Base Exception

    Carries an error message, a short machine-readable code and extra details.
    """

    def __init__(
        self,
        message: str,
        code: str = "httpstat_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary format (for JSON output)

        Returns:
            dict: Error information dictionary
        """
        result = {
            "error": {
                "message": self.message,
                "code": self.code,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class RequestFailedError(HttpStatError):
    """
    Request Failed Error

    Raised when the request could not be sent or the response body could not
    be read (invalid URL, connection refused, protocol error, ...).
    """

    def __init__(
        self,
        message: str,
        url: str,
        code: str = "request_failed",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code=code,
            details={"url": url, **(details or {})},
        )
        self.url = url


class RequestTimeoutError(RequestFailedError):
    """Raised when the request exceeds the configured timeout."""

    def __init__(
        self,
        message: str,
        url: str,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            url=url,
            code="timeout",
            details=details,
        )
