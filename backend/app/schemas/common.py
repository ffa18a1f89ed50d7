"""
Postboard Backend: Shared Response Envelopes
==============================================

What:  Success/error envelopes, pagination block and health payload used by
       every route.
How:   Routes wrap service results with `success(...)`; exception handlers
       build `ErrorResponse` bodies.

Success example:
    {
        "success": true,
        "message": "Users retrieved successfully",
        "data": {...},
        "timestamp": "2024-01-15T12:00:00+00:00"
    }
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    success: bool = Field(default=True)
    message: str = Field(description="Human-readable outcome")
    data: Any = Field(default=None, description="Payload of the request")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Fields:
        error: Machine-readable code (e.g. "validation_error", "not_found")
        message: Human-readable description
        details: Optional extra context (failing field, resource id)
        request_id: Correlation ID for tracing the error in server logs
    """
    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class Pagination(BaseModel):
    current_page: int
    per_page: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


def success(data: Any = None, message: str = "Success") -> ApiResponse:
    return ApiResponse(message=message, data=data)
