"""
Health check endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from billboard_api.core.config import settings
from billboard_api.core.database import is_database_healthy
from billboard_api.core.redis import is_redis_healthy

router = APIRouter()


@router.get("")
async def health_check() -> Dict[str, str]:
    """
    Basic health check endpoint.

    Returns:
        Dict[str, str]: Health status and timestamp.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/ready")
async def readiness_check() -> Any:
    """
    Readiness check endpoint that verifies all services are ready.

    Redis is optional; it only counts when a URL is configured.
    """
    checks = {
        "database": "healthy" if await is_database_healthy() else "unhealthy",
    }
    if settings.redis_url:
        checks["redis"] = "healthy" if await is_redis_healthy() else "unhealthy"
    else:
        checks["redis"] = "disabled"

    ready = all(value != "unhealthy" for value in checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": checks,
        },
    )
