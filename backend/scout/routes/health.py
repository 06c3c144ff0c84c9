"""
Scout Query Service — Health Check Route
==========================================

What:  GET /health for container probes and monitoring.
How:   Asks the query client to probe both backends (SELECT 1 on the embedded
       store, GET /health on the remote service).

Status levels:
    healthy:   both backends reachable
    degraded:  at least one backend unreachable; the other target still works
"""

import logging
import time

from fastapi import APIRouter, Depends

from scout import __version__
from scout.schemas.api import HealthResponse
from scout.services.query_client import QueryClient, get_query_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


def _availability(ok: bool) -> str:
    return "available" if ok else "unavailable"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(client: QueryClient = Depends(get_query_client)) -> HealthResponse:
    probes = await client.health()
    overall = "healthy" if all(probes.values()) else "degraded"
    if overall != "healthy":
        logger.warning("Health check degraded: %s", probes)

    return HealthResponse(
        status=overall,
        version=__version__,
        local_store=_availability(probes.get("local", False)),
        remote_service=_availability(probes.get("remote", False)),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
