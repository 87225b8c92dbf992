"""
Health check endpoints for Hello Directory.

Liveness, readiness against the database and cache, and the Prometheus
scrape endpoint.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ...constants import APP_NAME, APP_VERSION, get_current_timestamp
from ...services.container import ServiceContainer
from ..dependencies import get_container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Returns a static status for load balancers; touches no backend.
    """
    return {
        "status": "healthy",
        "timestamp": get_current_timestamp().isoformat(),
        "service": APP_NAME,
        "version": APP_VERSION,
    }


@router.get("/health/ready")
async def readiness_check(
    container: ServiceContainer = Depends(get_container),
) -> JSONResponse:
    """
    Readiness check endpoint.

    Fails with 503 when the database is unreachable. An unreachable cache
    only marks the service ``degraded`` since requests still succeed
    without it.
    """
    report = await container.readiness()
    report["timestamp"] = get_current_timestamp().isoformat()
    code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if report["status"] == "unhealthy"
        else status.HTTP_200_OK
    )
    return JSONResponse(status_code=code, content=report)


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus exposition of the process metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
