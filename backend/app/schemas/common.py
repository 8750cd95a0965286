"""
Storefront Backend - Shared Response Envelopes
================================================

What:  The JSON envelope every endpoint returns: domain fields plus a
       `success` flag and, where there is something to say, a `message`.
Who:   Subclassed by every resource schema; ErrorResponse documents the
       shape produced by the global exception handlers.

Wire names are camelCase (`totalCount`, `nextOffset`, ...). Models declare
snake_case attributes with camelCase aliases and accept either on input;
FastAPI serializes responses by alias.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Envelope(BaseModel):
    """Base for successful responses."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(default=True, description="Always true on 2xx responses")


class MessageResponse(Envelope):
    message: str = Field(description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """
    What:  Error envelope produced by the global exception handlers.

    Example:
        {
            "success": false,
            "error": "validation_error",
            "message": "One or more product IDs do not exist",
            "invalidProducts": ["c0ffee00-..."],
            "request_id": "a1b2c3d4"
        }
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[List[dict]] = Field(default=None, description="Field-level validation errors")
    invalid_products: Optional[List[str]] = Field(
        default=None,
        alias="invalidProducts",
        description="Product ids that do not exist (collection writes only)",
    )
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(Envelope):
    """Returned by /health for monitoring and load balancer probes."""

    message: str = Field(default="Server is healthy")
    timestamp: str = Field(description="Server time (UTC ISO 8601)")
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
