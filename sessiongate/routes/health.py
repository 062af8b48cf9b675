"""
SessionGate — Health Check Route
=================================

What:  Liveness endpoint for load balancers and container health checks.
Why:   It is not a controller action, so it is never gated and never redirects
       a health check to a login page.
How:   Reports version, uptime, and the controllers registered with the gate.
       An application with no registered controllers is reported unhealthy,
       since every action would pass through ungated.
"""

import time

from fastapi import APIRouter, Request, Response, status

from sessiongate import __version__
from sessiongate.schemas.session import HealthResponse

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(request: Request, response: Response) -> HealthResponse:
    registry = getattr(request.app.state, "registry", None)
    controllers = registry.controllers if registry is not None else []

    overall = "healthy" if controllers else "unhealthy"
    if not controllers:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=overall,
        version=__version__,
        controllers=controllers,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
