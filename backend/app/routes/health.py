"""
Storefront Backend - Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Probes the database with SELECT 1 and reports uptime and version.
Who:   Docker health checks, load balancers, uptime monitors.

Status levels:
    - healthy:   database reachable
    - unhealthy: database unreachable

Both are answered with HTTP 200 so the response body always reaches the
caller; monitors key on `status`.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app import __version__
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.api_route(
    "/health",
    methods=["GET", "POST"],
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    database = request.app.state.database

    db_status = "connected"
    overall = "healthy"
    if not await database.ping():
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable")

    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
