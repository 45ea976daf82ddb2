"""OneSignal wire-format payload construction.

Every shape here mirrors the provider's REST API exactly; field names and
nesting must not drift.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from onesignal_gateway.core.delay import SendDirective

DEFAULT_SEGMENT = "Subscribed Users"
DEFAULT_LANGUAGE = "en"
DEFAULT_COMPANY_NAME = "Test Company"

CHANNEL_PUSH = "push"
CHANNEL_EMAIL = "email"


@dataclass
class PushNotification:
    """A push notification to one user, one segment, or the default segment."""

    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)
    user_id: Optional[str] = None
    segment: Optional[str] = None
    directive: Optional[SendDirective] = None


@dataclass
class EmailNotification:
    """An email to explicit recipients or to a segment."""

    subject: str
    body: str
    recipients: List[str] = field(default_factory=list)
    user_id: Optional[str] = None
    segment: Optional[str] = None
    custom_data: Dict[str, Any] = field(default_factory=dict)
    directive: Optional[SendDirective] = None


@dataclass
class UserRecord:
    """An end user keyed by external id."""

    external_id: str
    first_name: str
    company_name: str = DEFAULT_COMPANY_NAME
    email: Optional[str] = None


def target_fields(user_id: Optional[str], segment: Optional[str]) -> Dict[str, Any]:
    """Targeting precedence: user id, then segment, then the default segment."""
    if user_id:
        return {"include_aliases": {"external_id": [user_id]}}
    if segment:
        return {"included_segments": [segment]}
    return {"included_segments": [DEFAULT_SEGMENT]}


def localized(text: str) -> Dict[str, str]:
    return {DEFAULT_LANGUAGE: text}


class PayloadBuilder:
    """Builds request bodies for one OneSignal app."""

    def __init__(self, app_id: str):
        self.app_id = app_id

    def _base(self, channel: str) -> Dict[str, Any]:
        return {"app_id": self.app_id, "target_channel": channel}

    def push(self, notification: PushNotification) -> Dict[str, Any]:
        payload = self._base(CHANNEL_PUSH)
        payload["headings"] = localized(notification.title)
        payload["contents"] = localized(notification.body)
        if notification.data:
            payload["data"] = dict(notification.data)
        payload.update(target_fields(notification.user_id, notification.segment))
        if notification.directive is not None:
            payload.update(notification.directive.to_payload())
        return payload

    def email(self, notification: EmailNotification) -> Dict[str, Any]:
        """Email payload.

        Segment emails go to ``included_segments``; everything else goes to
        ``include_email_tokens`` with an optional ``include_aliases`` link to
        the user. The two never mix.
        """
        payload = self._base(CHANNEL_EMAIL)
        payload["email_subject"] = notification.subject
        payload["email_body"] = notification.body

        if notification.segment and not notification.recipients:
            payload["included_segments"] = [notification.segment]
        else:
            payload["include_email_tokens"] = list(notification.recipients)
            if notification.user_id:
                payload["include_aliases"] = {"external_id": [notification.user_id]}

        if notification.custom_data:
            payload["custom_data"] = dict(notification.custom_data)
        if notification.directive is not None:
            payload.update(notification.directive.to_payload())
        return payload

    @staticmethod
    def user(record: UserRecord) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "aliases": {"external_id": record.external_id},
            "properties": {
                "tags": {
                    "first_name": record.first_name,
                    "company_name": record.company_name,
                }
            },
        }
        if record.email:
            payload["subscriptions"] = [
                {"type": "Email", "token": record.email, "enabled": True}
            ]
        return payload

    @staticmethod
    def tag_patch(tag: str, value: str) -> Dict[str, Any]:
        """Patch exactly one tag; other tags on the user are left alone."""
        return {"properties": {"tags": {tag: value}}}
