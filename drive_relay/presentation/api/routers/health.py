"""
Health check API endpoints.

This module provides health check endpoints for monitoring
application and component status.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ....application.startup import ApplicationStartup
from ....infrastructure.config.models import ApplicationConfig
from ..dependencies import get_config, get_startup

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
async def health_check(
    startup: ApplicationStartup = Depends(get_startup),
    config: ApplicationConfig = Depends(get_config)
) -> Dict[str, Any]:
    """
    Health check with component status.

    Reports the backend client and the upload manager, including the upload
    statistics.
    """
    components = await startup.check_health()
    overall_healthy = all(info.get("healthy", False) for info in components.values())

    return {
        "status": "healthy" if overall_healthy else "degraded",
        "timestamp": _now(),
        "application": {
            "name": config.name,
            "version": config.version,
            "environment": config.environment
        },
        "components": components
    }


@router.get("/ready")
async def readiness_check(
    startup: ApplicationStartup = Depends(get_startup)
) -> Dict[str, Any]:
    """Indicates if the application is ready to serve requests."""
    return {
        "ready": startup.is_running,
        "timestamp": _now()
    }


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    """Simple endpoint to indicate the application is running."""
    return {
        "alive": True,
        "timestamp": _now()
    }
