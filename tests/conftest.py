"""Pytest configuration and fixtures for onesignal-gateway tests."""

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from onesignal_gateway.config import OneSignalSettings, Settings
from onesignal_gateway.main import create_app

FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

APP_ID = "app-123"
API_KEY = "os_v2_app_testkey"


def fixed_clock() -> datetime:
    return FIXED_NOW


class FakeOneSignal:
    """Stands in for the OneSignal API behind an ``httpx.MockTransport``.

    Records every request it receives. Answers with ``default_response``
    unless ``handler`` is set.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.handler: Optional[Callable[[httpx.Request], httpx.Response]] = None
        self.default_response: Dict[str, Any] = {"id": "notif-123", "recipients": 1}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        return httpx.Response(200, json=self.default_response)

    def respond_with(self, status_code: int, body: Any = None) -> None:
        self.handler = lambda request: httpx.Response(status_code, json=body)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.last_request.content)


@pytest.fixture
def onesignal_settings() -> OneSignalSettings:
    return OneSignalSettings(app_id=APP_ID, api_key=API_KEY)


@pytest.fixture
def settings(onesignal_settings: OneSignalSettings) -> Settings:
    return Settings(onesignal=onesignal_settings, environment="development", log_level="WARNING")


@pytest.fixture
def fake_onesignal() -> FakeOneSignal:
    return FakeOneSignal()


@pytest.fixture
def transport(fake_onesignal: FakeOneSignal) -> httpx.MockTransport:
    return httpx.MockTransport(fake_onesignal)


@pytest.fixture
def client(settings: Settings, transport: httpx.MockTransport) -> TestClient:
    """Test client wired to the fake provider and a fixed clock."""
    app = create_app(settings=settings, transport=transport, clock=fixed_clock)
    return TestClient(app)
