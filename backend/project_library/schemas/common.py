"""
Project Library Backend - Shared Response Envelope
===================================================

What:  The `{"data": ..., "error": ...}` envelope every /api route returns,
       plus the health check payload.
How:   Success responses use `Envelope[T]` as the FastAPI response_model;
       failures are produced by the global exception handlers through
       `error_content()` so both halves share one shape.

Example (success):
    {"data": {"id": "..."}, "error": null}

Example (failure):
    {
        "data": null,
        "error": {
            "code": "FORBIDDEN",
            "message": "You cannot act as this owner",
            "details": {},
            "request_id": "a1b2c3d4"
        }
    }
"""

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorBody(BaseModel):
    code: str = Field(description="Machine-readable error code, e.g. BAD_REQUEST")
    message: str = Field(description="Human-readable explanation")
    details: Dict[str, Any] = Field(default_factory=dict, description="Extra context")
    request_id: str = Field(default="", description="Correlation ID (X-Request-ID)")


class Envelope(BaseModel, Generic[T]):
    data: Optional[T] = None
    error: Optional[ErrorBody] = None


class ErrorEnvelope(BaseModel):
    """Documented shape of every non-2xx response."""

    data: None = None
    error: ErrorBody


def ok(data: Any) -> Dict[str, Any]:
    """Wrap a payload in the success envelope."""
    return {"data": data, "error": None}


def error_content(
    code: str,
    message: str,
    request_id: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build the JSON body for an error response."""
    return {
        "data": None,
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "request_id": request_id,
        },
    }


# Responses shared by most routes, for the OpenAPI docs
ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"description": "Invalid input", "model": ErrorEnvelope},
    401: {"description": "No valid session", "model": ErrorEnvelope},
    403: {"description": "Not permitted", "model": ErrorEnvelope},
    404: {"description": "Not found", "model": ErrorEnvelope},
    500: {"description": "Server error", "model": ErrorEnvelope},
}


class HealthResponse(BaseModel):
    """
    What:  Health check response for monitoring and load balancer checks.
    Who:   Returned by GET /health.

    Status values:
        - "healthy":   Database reachable
        - "unhealthy": Database unreachable (HTTP 503)
    """

    status: str = Field(description="Overall health: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database status: connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since server start")
