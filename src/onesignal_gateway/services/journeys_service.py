"""User creation and journey triggering through OneSignal."""

from __future__ import annotations

from typing import Any, Dict

from onesignal_gateway.clients.onesignal_client import ConnectionProbeResult, OneSignalClient
from onesignal_gateway.core.payloads import PayloadBuilder, UserRecord
from onesignal_gateway.utils.errors import DeliveryError, ProviderError
from onesignal_gateway.utils.logging import get_logger

logger = get_logger("journeys_service")

DEFAULT_SEGMENT_TAG = "new_users"
DEFAULT_SEGMENT_VALUE = "true"


class JourneysService:
    """Manages users whose tags drive provider-side journeys."""

    def __init__(self, client: OneSignalClient, builder: PayloadBuilder):
        self.client = client
        self.builder = builder

    async def create_user(self, record: UserRecord) -> Dict[str, Any]:
        logger.info(f"Creating user {record.external_id}")
        try:
            return await self.client.create_user(self.builder.user(record))
        except ProviderError as e:
            raise DeliveryError("Failed to create user", e) from e

    async def trigger_journey(
        self,
        external_id: str,
        segment_tag: str = DEFAULT_SEGMENT_TAG,
        segment_value: str = DEFAULT_SEGMENT_VALUE,
    ) -> Dict[str, Any]:
        """Set one tag on the user so they enter the journey's segment."""
        logger.info(f"Triggering journey for {external_id}: {segment_tag}={segment_value}")
        try:
            return await self.client.update_user_tags(
                external_id, self.builder.tag_patch(segment_tag, segment_value)
            )
        except ProviderError as e:
            raise DeliveryError("Failed to trigger journey", e) from e

    async def test_connection(self) -> ConnectionProbeResult:
        result = await self.client.test_connection()
        if result.success:
            logger.info(f"OneSignal connectivity OK via {result.api} API")
        else:
            logger.warning(f"OneSignal connectivity failed: {result.failures}")
        return result
