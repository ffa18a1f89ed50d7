"""
Postboard Backend: Health Check Route
=======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the database through the shared QueryExecutor (SELECT 1) and
       reports version and uptime.
Who:   Called by Docker health checks, load balancers and monitoring.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response, status

from app import __version__
from app.database import QueryExecutor
from app.dependencies import get_executor
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    response: Response,
    executor: QueryExecutor = Depends(get_executor),
) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    if not await executor.ping():
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning("Health check: database unreachable")

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
