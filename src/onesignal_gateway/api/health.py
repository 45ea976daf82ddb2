"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, status

from onesignal_gateway.core.delay import Clock, format_instant
from onesignal_gateway.dependencies import ClockDep, SettingsDep
from onesignal_gateway.utils.logging import get_logger

logger = get_logger("health")

PROVIDER_NAME = "onesignal"

router = APIRouter(tags=["health"])


def subsystem_health(service: str, clock: Clock) -> Dict[str, Any]:
    """Liveness payload for one subsystem router. Does not call the provider."""
    return {
        "status": "OK",
        "service": service,
        "provider": PROVIDER_NAME,
        "timestamp": format_instant(clock()),
    }


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(settings: SettingsDep, clock: ClockDep):
    """
    Health check endpoint.

    Returns basic service health status. This endpoint does not check
    external dependencies and will always return healthy if the service is running.
    """
    logger.debug("Health check requested")
    return {
        "status": "OK",
        "service": settings.app_name,
        "timestamp": format_instant(clock()),
        "environment": settings.environment.value,
    }
