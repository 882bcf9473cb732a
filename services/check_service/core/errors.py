"""
Check Service — Error taxonomy

Every failure a request can end in maps to one of these. The API layer
turns them into `{"error": ..., "details": ...}` JSON with a fixed status.
"""
from typing import Any


class CheckServiceError(Exception):
    status_code: int = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class NotFound(CheckServiceError):
    status_code = 404


class Conflict(CheckServiceError):
    status_code = 409


class InvalidRequest(CheckServiceError):
    status_code = 400


class BadGateway(CheckServiceError):
    """Upstream PMS rejected the posting; `details` carries its response body."""
    status_code = 502


class Internal(CheckServiceError):
    status_code = 500
