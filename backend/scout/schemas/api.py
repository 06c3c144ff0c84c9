"""
Scout Query Service — HTTP Envelope Schemas
=============================================

What:  Response models for the HTTP surface: the success envelope wrapping
       every /api/mcp payload, the error body, and the health report.
Who:   Built by scout.responses; declared as response_model on the routes so
       the OpenAPI docs describe the real wire shape.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from scout.schemas.query import QueryResult


# ══════════════════════════════════════════════════════════════════════════
# Success Envelope
# ══════════════════════════════════════════════════════════════════════════


class ApiResponse(BaseModel):
    """
    What:  Standard wrapper for successful API calls.

    `success` reports that the HTTP call was handled; whether the query itself
    succeeded is `data.success`.

    Example:
        {
            "success": true,
            "data": {"success": true, "data": [{"id": 1}],
                     "metadata": {"rowCount": 1, "executionTime": 2, "columns": ["id"]}},
            "request_id": "a1b2c3d4",
            "timestamp": "2025-01-15T12:00:00.000000+00:00"
        }
    """

    success: bool = Field(default=True, description="The request was handled")
    data: Any = Field(default=None, description="Endpoint payload")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
    timestamp: datetime = Field(description="When the response was built (UTC)")


class QueryResponse(ApiResponse):
    """ApiResponse whose payload is a QueryResult."""

    data: QueryResult


# ══════════════════════════════════════════════════════════════════════════
# Error & Health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for every non-2xx response.

    Fields:
        error: Machine-readable error code (e.g., "validation_error")
        message: Human-readable description
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Service status plus reachability of both query backends."""

    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    local_store: str = Field(description="Embedded store: available, unavailable")
    remote_service: str = Field(description="Remote query service: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
