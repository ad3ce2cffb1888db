"""
Error types for the Earnings Insight API.

Every error a request handler can surface maps to one HTTP status and a small
JSON payload. Failures inside the aggregation pipeline are not raised past
their caller; they become absent data instead.
"""

from typing import Any, Dict, Optional


class InsightError(Exception):
    """Base class for errors that translate directly into an HTTP response"""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.error, "message": self.message}


class ConfigurationError(InsightError):
    status_code = 500
    error = "Configuration error"


class ValidationError(InsightError):
    status_code = 400
    error = "Bad request"


class UpstreamUnavailable(InsightError):
    """Provider returned a non-200 status, timed out or could not be reached"""

    status_code = 503
    error = "Service unavailable"


class ParseError(UpstreamUnavailable):
    """Provider answered but the payload could not be interpreted"""


class AllSourcesFailed(UpstreamUnavailable):
    """Every parallel source failed; carries the per-source results"""

    def __init__(self, message: str, data: Any = None, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.data = data

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["data"] = self.data
        return payload


class DataNotFound(InsightError):
    status_code = 404
    error = "Not found"

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message}
