"""Push notification and email API models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from onesignal_gateway.models.common import CamelModel, Envelope


class PushRequest(CamelModel):
    """Request model for immediate and segment push endpoints."""

    user_id: Optional[str] = Field(None, description="External id of the target user")
    segment: Optional[str] = Field(None, description="Target segment name")
    title: Optional[str] = Field(None, description="Notification heading")
    body: Optional[str] = Field(None, description="Notification content")
    data: Optional[Dict[str, Any]] = Field(None, description="Custom data delivered with the push")


class DelayedPushRequest(PushRequest):
    """Request model for scheduled push notifications."""

    # Left untyped so the delay normalizer reports bad amounts as 400s
    delay_amount: Any = Field(None, description="Delay amount, or a clock time for the timezone unit")
    delay_unit: Optional[str] = Field(
        None, description="seconds, minutes, hours, days or timezone"
    )


class EmailRequest(CamelModel):
    """Request model for immediate and segment email endpoints."""

    email: Optional[Union[str, List[str]]] = Field(None, description="Recipient address or addresses")
    segment: Optional[str] = Field(None, description="Target segment name")
    subject: Optional[str] = Field(None, description="Email subject")
    body: Optional[str] = Field(None, description="HTML email body")
    user_id: Optional[str] = Field(None, description="External id to link the email to")
    custom_data: Optional[Dict[str, Any]] = Field(None, description="Personalization data")


class DelayedEmailRequest(EmailRequest):
    """Request model for scheduled emails."""

    delay_amount: Any = Field(None, description="Delay amount, or a clock time for the timezone unit")
    delay_unit: Optional[str] = Field(
        None, description="seconds, minutes, hours, days or timezone"
    )


class NotificationSentResponse(Envelope):
    """Response for a forwarded push notification or email."""

    notification_id: Optional[str] = None
    recipients: Optional[int] = None
    email: Optional[Union[str, List[str]]] = None
    scheduled_for: Optional[str] = None


class NotificationDetailsResponse(Envelope):
    """Response for a notification status fetch."""

    notification: Dict[str, Any] = Field(default_factory=dict)


class NotificationCancelledResponse(Envelope):
    """Response for a cancelled notification."""

    notification_id: str
