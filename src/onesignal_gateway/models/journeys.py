"""Journey and user management API models."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import Field

from onesignal_gateway.models.common import CamelModel, Envelope


class CreateUserRequest(CamelModel):
    """Request model for user creation."""

    external_id: Optional[str] = Field(None, description="Stable caller-assigned user id")
    email: Optional[str] = Field(None, description="Email to subscribe")
    first_name: Optional[str] = Field(None, description="Stored as the first_name tag")
    company_name: Optional[str] = Field(None, description="Stored as the company_name tag")


class TriggerJourneyRequest(CamelModel):
    """Request model for journey triggering."""

    external_id: Optional[str] = Field(None, description="User to tag")
    segment_tag: Optional[str] = Field(None, description="Tag key (default new_users)")
    segment_value: Optional[str] = Field(None, description="Tag value (default \"true\")")


class CreateUserResponse(Envelope):
    external_id: str
    email: str
    user: Dict[str, Any] = Field(default_factory=dict)


class TriggerJourneyResponse(Envelope):
    external_id: str
    segment_tag: str
    segment_value: str
    note: str


class ConnectionTestResponse(Envelope):
    api: Optional[str] = None
    url: Optional[str] = None
    app_name: Optional[str] = None
