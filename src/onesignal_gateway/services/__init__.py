"""Service layer."""

from onesignal_gateway.services.journeys_service import JourneysService
from onesignal_gateway.services.notifications_service import NotificationsService

__all__ = [
    "JourneysService",
    "NotificationsService",
]
