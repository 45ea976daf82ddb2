"""Push notification endpoints."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, status

from onesignal_gateway.api.health import subsystem_health
from onesignal_gateway.core.delay import (
    DEFAULT_DELAY_AMOUNT,
    DEFAULT_DELAY_UNIT,
    VALID_DELAY_UNITS,
    describe_delay,
    is_valid_delay_unit,
    normalize,
)
from onesignal_gateway.core.payloads import PushNotification
from onesignal_gateway.core.validation import is_missing, missing_fields
from onesignal_gateway.dependencies import ClockDep, NotificationsServiceDep
from onesignal_gateway.models.notifications import (
    DelayedPushRequest,
    NotificationCancelledResponse,
    NotificationDetailsResponse,
    NotificationSentResponse,
    PushRequest,
)
from onesignal_gateway.utils.errors import InvalidDelayUnitError, MissingFieldsError
from onesignal_gateway.utils.logging import get_logger

logger = get_logger("notifications_api")

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _require_push_fields(values: Dict[str, Any]) -> None:
    """title and body are required, plus at least one of userId or segment."""
    missing: List[str] = missing_fields(values, ["title", "body"])
    if is_missing(values.get("userId")) and is_missing(values.get("segment")):
        missing.append("userId or segment")
    if missing:
        raise MissingFieldsError(missing)


def _to_notification(request: PushRequest) -> PushNotification:
    return PushNotification(
        title=request.title,
        body=request.body,
        data=request.data or {},
        user_id=request.user_id,
        segment=request.segment,
    )


@router.get("/health", status_code=status.HTTP_200_OK)
async def notifications_health(clock: ClockDep):
    """Liveness probe for the notifications subsystem."""
    return subsystem_health("notifications", clock)


@router.post(
    "/push",
    response_model=NotificationSentResponse,
    response_model_exclude_none=True,
    summary="Send push notification",
    description="Send an immediate push notification to a user (by external id) or a segment.",
)
async def send_push(
    request: PushRequest, service: NotificationsServiceDep
) -> NotificationSentResponse:
    _require_push_fields(request.model_dump(by_alias=True))

    result = await service.send_push(_to_notification(request))

    return NotificationSentResponse(
        message="Push notification sent successfully",
        notification_id=result.get("id"),
        recipients=result.get("recipients"),
    )


@router.post(
    "/push/delayed",
    response_model=NotificationSentResponse,
    response_model_exclude_none=True,
    summary="Schedule push notification",
    description=(
        "Schedule a push notification after a delay (seconds, minutes, hours, days) "
        "or at a local clock time per recipient (timezone)."
    ),
)
async def send_delayed_push(
    request: DelayedPushRequest, service: NotificationsServiceDep, clock: ClockDep
) -> NotificationSentResponse:
    _require_push_fields(request.model_dump(by_alias=True))

    delay_amount = DEFAULT_DELAY_AMOUNT if request.delay_amount is None else request.delay_amount
    delay_unit = DEFAULT_DELAY_UNIT if request.delay_unit is None else request.delay_unit
    if not is_valid_delay_unit(delay_unit):
        raise InvalidDelayUnitError(delay_unit, VALID_DELAY_UNITS)

    directive = normalize(delay_amount, delay_unit, clock)
    notification = _to_notification(request)
    notification.directive = directive

    result = await service.send_push(notification, action="Failed to schedule push notification")

    return NotificationSentResponse(
        message=f"Push notification scheduled {describe_delay(delay_amount, delay_unit)}",
        notification_id=result.get("id"),
        recipients=result.get("recipients"),
        scheduled_for=directive.describe_schedule(),
    )


@router.post(
    "/push/segment",
    response_model=NotificationSentResponse,
    response_model_exclude_none=True,
    summary="Send push notification to segment",
)
async def send_segment_push(
    request: PushRequest, service: NotificationsServiceDep
) -> NotificationSentResponse:
    missing = missing_fields(request.model_dump(by_alias=True), ["segment", "title", "body"])
    if missing:
        raise MissingFieldsError(missing)

    notification = _to_notification(request)
    # Segment endpoint never targets a single user
    notification.user_id = None
    result = await service.send_push(
        notification, action="Failed to send push notification to segment"
    )

    return NotificationSentResponse(
        message=f"Push notification sent to segment: {request.segment}",
        notification_id=result.get("id"),
        recipients=result.get("recipients"),
    )


@router.get(
    "/push/{notification_id}",
    response_model=NotificationDetailsResponse,
    summary="Get notification status",
)
async def get_notification(
    notification_id: str, service: NotificationsServiceDep
) -> NotificationDetailsResponse:
    result = await service.get_notification(notification_id)
    return NotificationDetailsResponse(
        message="Notification details retrieved",
        notification=result,
    )


@router.delete(
    "/push/{notification_id}",
    response_model=NotificationCancelledResponse,
    summary="Cancel scheduled notification",
)
async def cancel_notification(
    notification_id: str, service: NotificationsServiceDep
) -> NotificationCancelledResponse:
    await service.cancel_notification(notification_id)
    logger.info(f"Notification {notification_id} cancelled")
    return NotificationCancelledResponse(
        message="Notification cancelled successfully",
        notification_id=notification_id,
    )
