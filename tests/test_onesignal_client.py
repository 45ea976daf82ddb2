"""Tests for the OneSignal REST client."""

import logging

import httpx
import pytest

from onesignal_gateway.clients.onesignal_client import (
    CONNECTION_SUGGESTION,
    OneSignalClient,
    extract_errors,
    to_provider_error,
)
from onesignal_gateway.config import OneSignalSettings
from onesignal_gateway.utils.errors import ConfigurationError, ProviderError

from conftest import API_KEY, APP_ID


@pytest.fixture
def onesignal(onesignal_settings, fake_onesignal):
    return OneSignalClient(onesignal_settings, transport=httpx.MockTransport(fake_onesignal))


class TestConfiguration:
    """Construction-time checks."""

    def test_missing_app_id(self):
        with pytest.raises(ConfigurationError) as exc_info:
            OneSignalClient(OneSignalSettings(app_id=None, api_key=API_KEY))

        assert "ONESIGNAL_APP_ID" in exc_info.value.message
        assert exc_info.value.details["missing"] == ["ONESIGNAL_APP_ID"]

    def test_missing_both(self):
        with pytest.raises(ConfigurationError) as exc_info:
            OneSignalClient(OneSignalSettings(app_id="", api_key="  "))

        assert exc_info.value.details["missing"] == ["ONESIGNAL_APP_ID", "ONESIGNAL_API_KEY"]
        assert exc_info.value.message == "ONESIGNAL_APP_ID and ONESIGNAL_API_KEY are required"

    def test_legacy_key_warns_but_constructs(self, monkeypatch):
        warnings = []
        logger = logging.getLogger("onesignal_gateway.onesignal_client")
        monkeypatch.setattr(logger, "warning", lambda msg, *a, **kw: warnings.append(msg))

        client = OneSignalClient(OneSignalSettings(app_id=APP_ID, api_key="legacy-key"))

        assert client.app_id == APP_ID
        assert len(warnings) == 1
        assert "os_v2_" in warnings[0]

    def test_probe_strategies_order(self, onesignal):
        names = [(s.name, s.auth_scheme) for s in onesignal.probe_strategies]

        assert names == [("current", "Key"), ("legacy", "Basic")]


class TestOperations:
    """Each operation is one request with the right method, path and credential."""

    @pytest.mark.asyncio
    async def test_create_notification(self, onesignal, fake_onesignal):
        result = await onesignal.create_notification({"app_id": APP_ID})

        assert result == {"id": "notif-123", "recipients": 1}
        request = fake_onesignal.last_request
        assert request.method == "POST"
        assert str(request.url) == "https://api.onesignal.com/notifications"
        assert request.headers["Authorization"] == f"Key {API_KEY}"
        assert fake_onesignal.last_json() == {"app_id": APP_ID}

    @pytest.mark.asyncio
    async def test_get_notification_scopes_app_id(self, onesignal, fake_onesignal):
        await onesignal.get_notification("n-1")

        request = fake_onesignal.last_request
        assert request.method == "GET"
        assert request.url.path == "/notifications/n-1"
        assert request.url.params["app_id"] == APP_ID

    @pytest.mark.asyncio
    async def test_delete_notification(self, onesignal, fake_onesignal):
        fake_onesignal.respond_with(200, {"success": True})

        result = await onesignal.delete_notification("n-1")

        assert result == {"success": True}
        request = fake_onesignal.last_request
        assert request.method == "DELETE"
        assert request.url.path == "/notifications/n-1"
        assert request.url.params["app_id"] == APP_ID

    @pytest.mark.asyncio
    async def test_create_user(self, onesignal, fake_onesignal):
        await onesignal.create_user({"aliases": {"external_id": "u1"}})

        request = fake_onesignal.last_request
        assert request.method == "POST"
        assert request.url.path == f"/apps/{APP_ID}/users"

    @pytest.mark.asyncio
    async def test_update_user_tags(self, onesignal, fake_onesignal):
        payload = {"properties": {"tags": {"new_users": "true"}}}

        await onesignal.update_user_tags("u1", payload)

        request = fake_onesignal.last_request
        assert request.method == "PATCH"
        assert request.url.path == f"/apps/{APP_ID}/users/by/external_id/u1"
        assert fake_onesignal.last_json() == payload

    @pytest.mark.asyncio
    async def test_empty_response_body_becomes_empty_dict(self, onesignal, fake_onesignal):
        fake_onesignal.handler = lambda request: httpx.Response(204)

        assert await onesignal.update_user_tags("u1", {}) == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "external_id,encoded",
        [
            ("u1/../../../../notifications/abc", "u1%2F..%2F..%2F..%2F..%2Fnotifications%2Fabc"),
            ("..", "%2E%2E"),
            ("a b?c#d", "a%20b%3Fc%23d"),
        ],
    )
    async def test_external_id_stays_one_path_segment(
        self, onesignal, fake_onesignal, external_id, encoded
    ):
        await onesignal.update_user_tags(external_id, {})

        request = fake_onesignal.last_request
        assert request.url.raw_path == f"/apps/{APP_ID}/users/by/external_id/{encoded}".encode()

    @pytest.mark.asyncio
    async def test_notification_id_stays_one_path_segment(self, onesignal, fake_onesignal):
        await onesignal.delete_notification("../apps/other")

        request = fake_onesignal.last_request
        assert request.url.raw_path.startswith(b"/notifications/..%2Fapps%2Fother?")
        assert request.url.params["app_id"] == APP_ID


class TestErrorMapping:
    """Provider failures become ProviderError, never retried."""

    @pytest.mark.asyncio
    async def test_remote_error_detail_is_the_message(self, onesignal, fake_onesignal):
        fake_onesignal.respond_with(401, {"errors": ["Access denied. Please include an 'Authorization: ...' header"]})

        with pytest.raises(ProviderError) as exc_info:
            await onesignal.create_notification({})

        error = exc_info.value
        assert error.message.startswith("Access denied")
        assert error.remote_status == 401
        assert len(fake_onesignal.requests) == 1

    @pytest.mark.asyncio
    async def test_status_without_detail(self, onesignal, fake_onesignal):
        fake_onesignal.handler = lambda request: httpx.Response(502, text="bad gateway")

        with pytest.raises(ProviderError) as exc_info:
            await onesignal.get_app()

        assert exc_info.value.message == "Request failed with status code 502"
        assert exc_info.value.errors == []

    @pytest.mark.asyncio
    async def test_connect_error(self, onesignal, fake_onesignal):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        fake_onesignal.handler = refuse

        with pytest.raises(ProviderError) as exc_info:
            await onesignal.create_notification({})

        assert exc_info.value.message == "connection refused"
        assert exc_info.value.remote_status is None
        assert len(fake_onesignal.requests) == 1

    @pytest.mark.asyncio
    async def test_undecodable_success_body(self, onesignal, fake_onesignal):
        fake_onesignal.handler = lambda request: httpx.Response(200, text="<html>")

        with pytest.raises(ProviderError) as exc_info:
            await onesignal.get_app()

        assert "Invalid JSON" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_object_success_body(self, onesignal, fake_onesignal):
        fake_onesignal.respond_with(200, ["not", "an", "object"])

        with pytest.raises(ProviderError) as exc_info:
            await onesignal.create_notification({})

        assert "expected a JSON object" in exc_info.value.message
        assert len(fake_onesignal.requests) == 1

    def test_extract_errors_shapes(self):
        def response(body):
            return httpx.Response(400, json=body)

        assert extract_errors(response({"errors": ["a", "b"]})) == ["a", "b"]
        assert extract_errors(response({"errors": {"email": "invalid"}})) == ["email: invalid"]
        assert extract_errors(response({"errors": "boom"})) == ["boom"]
        assert extract_errors(response(["not", "a", "dict"])) == []
        assert extract_errors(httpx.Response(400, text="plain")) == []

    def test_timeout_message(self):
        request = httpx.Request("GET", "https://api.onesignal.com/apps/x")

        error = to_provider_error(httpx.ReadTimeout("read timed out", request=request))

        assert error.message == "Request timed out: read timed out"


class TestConnectionProbe:
    """Connectivity diagnostics across probe strategies."""

    @pytest.mark.asyncio
    async def test_current_api_succeeds(self, onesignal, fake_onesignal):
        fake_onesignal.respond_with(200, {"id": APP_ID, "name": "My App"})

        result = await onesignal.test_connection()

        assert result.success is True
        assert result.api == "current"
        assert result.url == "https://api.onesignal.com"
        assert result.app["name"] == "My App"
        assert len(fake_onesignal.requests) == 1

    @pytest.mark.asyncio
    async def test_falls_back_to_legacy(self, onesignal, fake_onesignal):
        def handler(request):
            if request.url.host == "api.onesignal.com":
                return httpx.Response(403, json={"errors": ["forbidden"]})
            return httpx.Response(200, json={"name": "Legacy App"})

        fake_onesignal.handler = handler

        result = await onesignal.test_connection()

        assert result.success is True
        assert result.api == "legacy"
        assert result.url == "https://onesignal.com/api/v1"
        assert result.failures == {"current": "forbidden"}
        legacy_request = fake_onesignal.last_request
        assert legacy_request.url.path == f"/api/v1/apps/{APP_ID}"
        assert legacy_request.headers["Authorization"] == f"Basic {API_KEY}"

    @pytest.mark.asyncio
    async def test_all_strategies_fail(self, onesignal, fake_onesignal):
        fake_onesignal.respond_with(401, {"errors": ["nope"]})

        result = await onesignal.test_connection()

        assert result.success is False
        assert result.failures == {"current": "nope", "legacy": "nope"}
        assert result.suggestion == CONNECTION_SUGGESTION
        assert len(fake_onesignal.requests) == 2
