"""
System Router - Health, readiness and status endpoints.
"""

from fastapi import APIRouter, HTTPException

from ....config import settings
from ....models import HealthResponse
from ....services.browser_pool import browser_pool

router = APIRouter(tags=["system"])


def _browser_status() -> HealthResponse:
    return HealthResponse(
        status="healthy" if browser_pool.is_initialized else "starting",
        browser_ready=browser_pool.is_initialized,
        active_contexts=browser_pool.active_contexts,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check; answers 200 as long as the process serves requests."""
    return _browser_status()


@router.get("/ready", response_model=HealthResponse)
async def readiness_check() -> HealthResponse:
    """
    Readiness check for container orchestration.

    Returns HTTP 503 until the browser has been launched, so no render
    request is routed to an instance that cannot print yet.
    """
    status = _browser_status()
    if not status.browser_ready:
        raise HTTPException(status_code=503, detail=status.model_dump())
    return status


@router.get("/")
async def root() -> dict:
    """Service name and version."""
    return {
        "service": settings.api_title,
        "version": settings.api_version,
        "status": "running",
    }
