"""
FileRelay — Health Check Route
===============================

What:  Liveness and configuration probe.
How:   Reports "misconfigured" when the active mode lacks required settings.
       Downstream services are not called: a probe must stay cheap and must
       not consume extraction quota.
"""

import time

from fastapi import APIRouter, Request

from filerelay import __version__
from filerelay.schemas.relay import HealthResponse

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    settings = request.app.state.settings
    return HealthResponse(
        status="misconfigured" if settings.missing_settings() else "ok",
        version=__version__,
        mode=settings.relay_mode,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
