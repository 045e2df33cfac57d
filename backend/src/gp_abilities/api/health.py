"""Health check endpoint."""

import time

from fastapi import APIRouter, Depends

from ..abilities.registry import AbilityRegistry
from ..core.config import get_settings_instance
from ..core.logging import get_logger
from ..core.response import AbilityResponse
from .dependencies import get_registry

logger = get_logger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("", summary="Health check", description="Liveness plus a count of registered abilities.")
async def health_check(registry: AbilityRegistry = Depends(get_registry)):
    settings = get_settings_instance()
    health_data = {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.version,
        "environment": settings.environment,
        "store_backend": settings.store_backend,
        "checks": {},
    }

    try:
        health_data["checks"]["abilities"] = {"status": "healthy", "count": len(registry.list())}
    except Exception as e:  # noqa: BLE001
        logger.error(f"Ability registry health check failed: {e}")
        health_data["checks"]["abilities"] = {"status": "unhealthy", "error": str(e)}
        health_data["status"] = "unhealthy"

    return AbilityResponse.success(health_data)
