"""OneSignal REST API client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from onesignal_gateway.clients.http_client import ProviderHTTPClient
from onesignal_gateway.config import OneSignalSettings
from onesignal_gateway.utils.errors import ConfigurationError, ProviderError
from onesignal_gateway.utils.logging import get_logger

logger = get_logger("onesignal_client")

CONNECTION_SUGGESTION = (
    "Check your API key and App ID. Make sure your API key is the REST API Key "
    "from Settings > Keys & IDs"
)


@dataclass(frozen=True)
class ProbeStrategy:
    """One way of reaching the app-info endpoint for the connectivity test."""

    name: str
    base_url: str
    auth_scheme: str


@dataclass
class ConnectionProbeResult:
    """Outcome of the connectivity test across all probe strategies."""

    success: bool
    api: Optional[str] = None
    url: Optional[str] = None
    app: Optional[Dict[str, Any]] = None
    failures: Dict[str, str] = field(default_factory=dict)
    suggestion: Optional[str] = None


def path_segment(value: str) -> str:
    """Percent-encode a caller-supplied id so it stays one URL path segment."""
    segment = quote(value, safe="")
    # "." and ".." would be collapsed as dot segments
    if segment in (".", ".."):
        segment = segment.replace(".", "%2E")
    return segment


def extract_errors(response: httpx.Response) -> List[Any]:
    """Pull the provider's ``errors`` detail array out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return []
    if not isinstance(body, dict):
        return []

    errors = body.get("errors")
    if isinstance(errors, list):
        return errors
    if isinstance(errors, dict):
        return [f"{key}: {value}" for key, value in errors.items()]
    if isinstance(errors, str) and errors:
        return [errors]
    return []


def to_provider_error(exc: Exception) -> ProviderError:
    """Map an httpx failure to a ProviderError.

    The message is the first provider error detail when there is one, else
    the transport error text.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        errors = extract_errors(exc.response)
        if errors:
            first = errors[0]
            message = first if isinstance(first, str) else str(first)
        else:
            message = f"Request failed with status code {status_code}"
        return ProviderError(message, remote_status=status_code, errors=errors)
    if isinstance(exc, httpx.TimeoutException):
        return ProviderError(f"Request timed out: {exc}" if str(exc) else "Request timed out")
    return ProviderError(str(exc) or type(exc).__name__)


class OneSignalClient:
    """
    HTTP client for the OneSignal REST API.

    Bound to one app id, one API key and one base URL at construction. Every
    operation is a single round trip; failures raise ``ProviderError`` and are
    never retried.
    """

    def __init__(
        self,
        settings: OneSignalSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the OneSignal client.

        Args:
            settings: OneSignal configuration (app id, API key, URLs, timeout)
            transport: Optional httpx transport shared by every call

        Raises:
            ConfigurationError: If the app id or API key is missing
        """
        if not settings.is_configured:
            missing = [
                name
                for name, value in (("ONESIGNAL_APP_ID", settings.app_id), ("ONESIGNAL_API_KEY", settings.api_key))
                if not value
            ]
            raise ConfigurationError(
                f"{' and '.join(missing)} {'is' if len(missing) == 1 else 'are'} required",
                details={"missing": missing},
            )

        if not settings.is_current_key_format:
            logger.warning(
                "ONESIGNAL_API_KEY does not look like a current-generation key "
                "(expected prefix 'os_v2_'). Requests to the current API will likely fail."
            )

        self.app_id: str = settings.app_id
        self.base_url = settings.api_url.rstrip("/")
        self._api_key: str = settings.api_key
        self._timeout = float(settings.timeout)
        self._transport = transport
        self._client = ProviderHTTPClient(
            base_url=self.base_url,
            api_key=self._api_key,
            auth_scheme="Key",
            timeout=self._timeout,
            transport=transport,
        )
        self.probe_strategies: Sequence[ProbeStrategy] = (
            ProbeStrategy(name="current", base_url=self.base_url, auth_scheme="Key"),
            ProbeStrategy(
                name="legacy",
                base_url=settings.legacy_api_url.rstrip("/"),
                auth_scheme="Basic",
            ),
        )

    async def _call(self, operation: str, call: Awaitable[Optional[Dict[str, Any]]]) -> Dict[str, Any]:
        try:
            result = await call
        except httpx.HTTPError as e:
            error = to_provider_error(e)
            logger.error(
                f"OneSignal {operation} failed: status={error.remote_status}, message={error.message}",
                extra={"extra_fields": {"operation": operation, "errors": error.errors}},
            )
            raise error from e
        except ValueError as e:
            logger.error(f"OneSignal {operation} returned an undecodable body: {e}")
            raise ProviderError(f"Invalid JSON in provider response: {e}") from e
        if result is None:
            return {}
        if not isinstance(result, dict):
            logger.error(f"OneSignal {operation} returned a {type(result).__name__}, expected an object")
            raise ProviderError(
                f"Unexpected provider response: expected a JSON object, got {type(result).__name__}"
            )
        return result

    async def create_notification(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a push or email notification.

        Args:
            payload: Wire-format notification body

        Returns:
            Provider response (``id``, ``recipients``, ...)
        """
        return await self._call("create_notification", self._client.post("/notifications", json=payload))

    async def get_notification(self, notification_id: str) -> Dict[str, Any]:
        """Fetch a notification's details and delivery status."""
        return await self._call(
            "get_notification",
            self._client.get(f"/notifications/{path_segment(notification_id)}", params={"app_id": self.app_id}),
        )

    async def delete_notification(self, notification_id: str) -> Dict[str, Any]:
        """Cancel a scheduled notification that has not been delivered yet."""
        return await self._call(
            "delete_notification",
            self._client.delete(f"/notifications/{path_segment(notification_id)}", params={"app_id": self.app_id}),
        )

    async def create_user(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a user record."""
        return await self._call(
            "create_user", self._client.post(f"/apps/{self.app_id}/users", json=payload)
        )

    async def update_user_tags(self, external_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Patch tags on the user addressed by external id."""
        return await self._call(
            "update_user_tags",
            self._client.patch(
                f"/apps/{self.app_id}/users/by/external_id/{path_segment(external_id)}", json=payload
            ),
        )

    async def get_app(self) -> Dict[str, Any]:
        """Fetch app information (diagnostic)."""
        return await self._call("get_app", self._client.get(f"/apps/{self.app_id}"))

    async def test_connection(self) -> ConnectionProbeResult:
        """
        Probe connectivity with each strategy in order.

        The first strategy that can read the app info wins. If every strategy
        fails, the result aggregates each failure and a remediation hint.
        Diagnostic only: request delivery never falls back like this.
        """
        failures: Dict[str, str] = {}
        for strategy in self.probe_strategies:
            client = ProviderHTTPClient(
                base_url=strategy.base_url,
                api_key=self._api_key,
                auth_scheme=strategy.auth_scheme,
                timeout=self._timeout,
                transport=self._transport,
            )
            logger.info(f"Testing OneSignal connectivity via {strategy.name} API ({strategy.base_url})")
            try:
                app = await client.get(f"/apps/{self.app_id}")
            except httpx.HTTPError as e:
                failures[strategy.name] = to_provider_error(e).message
                logger.warning(f"{strategy.name} API probe failed: {failures[strategy.name]}")
                continue
            except ValueError as e:
                failures[strategy.name] = f"Invalid JSON in provider response: {e}"
                logger.warning(f"{strategy.name} API probe failed: {failures[strategy.name]}")
                continue
            if app is not None and not isinstance(app, dict):
                failures[strategy.name] = "Unexpected provider response: expected a JSON object"
                logger.warning(f"{strategy.name} API probe failed: {failures[strategy.name]}")
                continue

            return ConnectionProbeResult(
                success=True,
                api=strategy.name,
                url=strategy.base_url,
                app=app or {},
                failures=failures,
            )

        return ConnectionProbeResult(
            success=False,
            failures=failures,
            suggestion=CONNECTION_SUGGESTION,
        )
