"""Push and email delivery through OneSignal."""

from __future__ import annotations

from typing import Any, Dict

from onesignal_gateway.clients.onesignal_client import OneSignalClient
from onesignal_gateway.core.payloads import EmailNotification, PayloadBuilder, PushNotification
from onesignal_gateway.utils.errors import DeliveryError, ProviderError
from onesignal_gateway.utils.logging import get_logger

logger = get_logger("notifications_service")


class NotificationsService:
    """Builds notification payloads and forwards them to OneSignal.

    Provider failures surface as ``DeliveryError`` naming the failed action.
    """

    def __init__(self, client: OneSignalClient, builder: PayloadBuilder):
        self.client = client
        self.builder = builder

    async def send_push(
        self, notification: PushNotification, action: str = "Failed to send push notification"
    ) -> Dict[str, Any]:
        payload = self.builder.push(notification)
        target = notification.user_id or notification.segment or payload["included_segments"][0]
        logger.info(
            f"Forwarding push notification to {target}"
            + (" (scheduled)" if notification.directive else "")
        )
        try:
            return await self.client.create_notification(payload)
        except ProviderError as e:
            raise DeliveryError(action, e) from e

    async def send_email(
        self, notification: EmailNotification, action: str = "Failed to send email"
    ) -> Dict[str, Any]:
        payload = self.builder.email(notification)
        target = notification.segment if "included_segments" in payload else ", ".join(notification.recipients)
        logger.info(
            f"Forwarding email to {target}" + (" (scheduled)" if notification.directive else "")
        )
        try:
            return await self.client.create_notification(payload)
        except ProviderError as e:
            raise DeliveryError(action, e) from e

    async def get_notification(self, notification_id: str) -> Dict[str, Any]:
        logger.info(f"Fetching notification {notification_id}")
        try:
            return await self.client.get_notification(notification_id)
        except ProviderError as e:
            raise DeliveryError("Failed to get notification details", e) from e

    async def cancel_notification(self, notification_id: str) -> Dict[str, Any]:
        logger.info(f"Cancelling notification {notification_id}")
        try:
            return await self.client.delete_notification(notification_id)
        except ProviderError as e:
            raise DeliveryError("Failed to cancel notification", e) from e
