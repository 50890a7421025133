"""
Shared error handling for the FitCoach Access Layer.
"""

from typing import Dict, Any, Optional

import httpx
from pydantic import BaseModel

from shared.logging import request_id_var


BODY_EXCERPT_LIMIT = 1000


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class AccessLayerException(Exception):
    """Base exception for Access Layer services."""

    status_code: int = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            trace_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class UnauthenticatedError(AccessLayerException):
    """Caller identity missing or rejected."""

    status_code = 401

    def __init__(self, message: str = "Sign-in required.", details: Optional[Dict[str, Any]] = None):
        super().__init__("UNAUTHENTICATED", message, details)


class InvalidArgumentError(AccessLayerException):
    """Missing or malformed caller input."""

    status_code = 400

    def __init__(self, message: str = "Invalid argument", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_ARGUMENT", message, details)


class ConfigurationError(AccessLayerException):
    """A required secret or credential is not configured."""

    status_code = 500

    def __init__(self, message: str = "Service misconfigured", details: Optional[Dict[str, Any]] = None):
        super().__init__("FAILED_PRECONDITION", message, details)


class NotFoundError(AccessLayerException):
    """Lookup resolved to nothing."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class UpstreamError(AccessLayerException):
    """Non-success HTTP status from a third-party API."""

    status_code = 502

    def __init__(self, service: str, upstream_status: int, body: str = "",
                 details: Optional[Dict[str, Any]] = None):
        self.service = service
        self.upstream_status = upstream_status
        self.body = (body or "")[:BODY_EXCERPT_LIMIT]
        merged = {"service": service, "status_code": upstream_status, "body": self.body}
        merged.update(details or {})
        super().__init__("UPSTREAM_ERROR", f"{service} {upstream_status}: {self.body}", merged)

    @classmethod
    def from_response(cls, service: str, response: httpx.Response) -> "UpstreamError":
        """Build from an httpx response, keeping a bounded body excerpt."""
        return cls(service, response.status_code, response.text)
