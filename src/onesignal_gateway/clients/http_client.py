"""Authenticated JSON HTTP client for the provider's REST API.

This module provides a reusable client class bound to one base URL and one
``Authorization`` credential. Each call opens a short-lived
``httpx.AsyncClient`` over an optional injected transport, so the client
holds no connection state and is safe to share between concurrent requests.
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ProviderHTTPClient:
    """
    HTTP client for calling the provider's REST API.

    Handles:
    - Automatic injection of the ``Authorization: <scheme> <key>`` header
    - Timeout configuration
    - Transport injection (``httpx.MockTransport`` in tests)
    - Standard HTTP methods (GET, POST, PATCH, DELETE)

    Non-2xx responses raise ``httpx.HTTPStatusError``; network failures raise
    ``httpx.RequestError``. Nothing is retried.

    Example:
        ```python
        client = ProviderHTTPClient(
            base_url="https://api.onesignal.com",
            api_key="os_v2_app_...",
            auth_scheme="Key",
        )

        response = await client.post(
            "/notifications",
            json={"app_id": "...", "contents": {"en": "Hello"}},
        )
        ```
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        auth_scheme: str = "Key",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        default_headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the provider HTTP client.

        Args:
            base_url: Base URL of the API (e.g., "https://api.onesignal.com")
            api_key: API key sent in the Authorization header
            auth_scheme: Authorization scheme ("Key" for the current API, "Basic" for legacy)
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (for tests or custom networking)
            default_headers: Optional default headers to include in all requests
        """
        self.base_url = base_url.rstrip("/")
        self.auth_scheme = auth_scheme
        self.timeout = timeout
        self._transport = transport
        self._headers: Dict[str, str] = {"Accept": "application/json"}

        if default_headers:
            self._headers.update(default_headers)

        self._headers["Authorization"] = f"{auth_scheme} {api_key}"

    def _get_headers(self, additional_headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        Get headers for a request, merging default headers with additional headers.

        Args:
            additional_headers: Optional additional headers to include

        Returns:
            Merged headers dictionary
        """
        headers = self._headers.copy()
        if additional_headers:
            headers.update(additional_headers)
        return headers

    def _build_url(self, path: str) -> str:
        """
        Build full URL from base URL and path.

        Args:
            path: API path (e.g., "/notifications")

        Returns:
            Full URL
        """
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    @staticmethod
    def _parse(response: httpx.Response) -> Optional[Dict[str, Any]]:
        # DELETE and some PATCH calls may answer with an empty body
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Make a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: API path
            params: Optional query parameters
            json: Optional JSON payload
            headers: Optional additional headers

        Returns:
            Response JSON as dictionary, or None if the response is empty

        Raises:
            httpx.HTTPStatusError: If response status code indicates an error
            httpx.RequestError: If request fails
        """
        url = self._build_url(path)
        request_headers = self._get_headers(headers)

        if json is not None and "Content-Type" not in request_headers:
            request_headers["Content-Type"] = "application/json"

        logger.debug(f"{method} {url}")

        async with self._client() as client:
            response = await client.request(
                method, url, params=params, json=json, headers=request_headers
            )
            response.raise_for_status()
            return self._parse(response)

    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Make a GET request."""
        return await self.request("GET", path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Make a POST request."""
        return await self.request("POST", path, json=json, headers=headers)

    async def patch(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Make a PATCH request."""
        return await self.request("PATCH", path, json=json, headers=headers)

    async def delete(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Make a DELETE request."""
        return await self.request("DELETE", path, params=params, headers=headers)
