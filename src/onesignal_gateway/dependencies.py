"""FastAPI dependencies for the OneSignal Gateway service.

Everything is read from ``app.state``, which the application factory fills
once at startup with the settings, the OneSignal client and the clock.
"""

from typing import Annotated

from fastapi import Depends, Request

from onesignal_gateway.clients.onesignal_client import OneSignalClient
from onesignal_gateway.config import Settings
from onesignal_gateway.core.delay import Clock
from onesignal_gateway.core.payloads import PayloadBuilder
from onesignal_gateway.services.journeys_service import JourneysService
from onesignal_gateway.services.notifications_service import NotificationsService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_onesignal_client(request: Request) -> OneSignalClient:
    return request.app.state.onesignal_client


def get_payload_builder(
    client: Annotated[OneSignalClient, Depends(get_onesignal_client)],
) -> PayloadBuilder:
    return PayloadBuilder(app_id=client.app_id)


def get_notifications_service(
    client: Annotated[OneSignalClient, Depends(get_onesignal_client)],
    builder: Annotated[PayloadBuilder, Depends(get_payload_builder)],
) -> NotificationsService:
    return NotificationsService(client=client, builder=builder)


def get_journeys_service(
    client: Annotated[OneSignalClient, Depends(get_onesignal_client)],
    builder: Annotated[PayloadBuilder, Depends(get_payload_builder)],
) -> JourneysService:
    return JourneysService(client=client, builder=builder)


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
ClockDep = Annotated[Clock, Depends(get_clock)]
NotificationsServiceDep = Annotated[NotificationsService, Depends(get_notifications_service)]
JourneysServiceDep = Annotated[JourneysService, Depends(get_journeys_service)]
