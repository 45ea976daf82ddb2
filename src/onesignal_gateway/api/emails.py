"""Transactional email endpoints."""

from __future__ import annotations

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
from onesignal_gateway.core.payloads import EmailNotification
from onesignal_gateway.core.validation import normalize_recipients, require_fields
from onesignal_gateway.dependencies import ClockDep, NotificationsServiceDep
from onesignal_gateway.models.notifications import (
    DelayedEmailRequest,
    EmailRequest,
    NotificationSentResponse,
)
from onesignal_gateway.utils.errors import InvalidDelayUnitError

router = APIRouter(prefix="/emails", tags=["emails"])


def _to_email(request: EmailRequest) -> EmailNotification:
    require_fields(request.model_dump(by_alias=True), ["email", "subject", "body"])
    return EmailNotification(
        subject=request.subject,
        body=request.body,
        recipients=normalize_recipients(request.email),
        user_id=request.user_id,
        custom_data=request.custom_data or {},
    )


@router.get("/health", status_code=status.HTTP_200_OK)
async def emails_health(clock: ClockDep):
    """Liveness probe for the email subsystem."""
    return subsystem_health("email", clock)


@router.post(
    "/send",
    response_model=NotificationSentResponse,
    response_model_exclude_none=True,
    summary="Send email",
)
async def send_email(
    request: EmailRequest, service: NotificationsServiceDep
) -> NotificationSentResponse:
    result = await service.send_email(_to_email(request))

    return NotificationSentResponse(
        message="Email sent successfully",
        email=request.email,
        notification_id=result.get("id"),
        recipients=result.get("recipients"),
    )


@router.post(
    "/send/delayed",
    response_model=NotificationSentResponse,
    response_model_exclude_none=True,
    summary="Schedule email",
)
async def send_delayed_email(
    request: DelayedEmailRequest, service: NotificationsServiceDep, clock: ClockDep
) -> NotificationSentResponse:
    email = _to_email(request)

    delay_amount = DEFAULT_DELAY_AMOUNT if request.delay_amount is None else request.delay_amount
    delay_unit = DEFAULT_DELAY_UNIT if request.delay_unit is None else request.delay_unit
    if not is_valid_delay_unit(delay_unit):
        raise InvalidDelayUnitError(delay_unit, VALID_DELAY_UNITS)
    email.directive = normalize(delay_amount, delay_unit, clock)

    result = await service.send_email(email, action="Failed to schedule email")

    return NotificationSentResponse(
        message=f"Email scheduled {describe_delay(delay_amount, delay_unit)}",
        email=request.email,
        notification_id=result.get("id"),
        recipients=result.get("recipients"),
        scheduled_for=email.directive.describe_schedule(),
    )


@router.post(
    "/send/segment",
    response_model=NotificationSentResponse,
    response_model_exclude_none=True,
    summary="Send email to segment",
)
async def send_segment_email(
    request: EmailRequest, service: NotificationsServiceDep
) -> NotificationSentResponse:
    require_fields(request.model_dump(by_alias=True), ["segment", "subject", "body"])

    email = EmailNotification(
        subject=request.subject,
        body=request.body,
        segment=request.segment,
        custom_data=request.custom_data or {},
    )
    result = await service.send_email(email, action="Failed to send email to segment")

    return NotificationSentResponse(
        message=f"Email sent to segment: {request.segment}",
        notification_id=result.get("id"),
        recipients=result.get("recipients"),
    )
