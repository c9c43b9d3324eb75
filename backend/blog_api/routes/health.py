"""
Blog Posts API: Health Check Route
===================================

What:  Health check endpoint for container probes and load balancers.
How:   Runs SELECT 1 against the store and reports uptime.

Status levels:
    - healthy:   database reachable
    - unhealthy: database unreachable (still HTTP 200; the body carries the verdict)
"""

import logging
import time

from fastapi import APIRouter, Request

from blog_api import __version__
from blog_api.schemas.blog_post import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    database = request.app.state.database
    connected = await database.ping()

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
