"""HTTP client implementation for Edge Gateway service.

Wraps a shared httpx AsyncClient. Proxied responses are read as raw bytes so
compressed or otherwise encoded upstream payloads are relayed untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from services.edge_gateway_service.models.proxy_models import UpstreamReply
from services.edge_gateway_service.protocols import HttpClientProtocol


class GatewayHttpClient(HttpClientProtocol):
    """HTTP client implementation for the gateway."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize the HTTP client.

        Args:
            client: The underlying httpx AsyncClient to use
        """
        self._client = client

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str | bytes] | None = None,
        params: dict[str, str] | None = None,
        content: bytes | None = None,
        json: Any = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> UpstreamReply:
        """Send a request and read the whole raw response.

        Args:
            method: HTTP method
            url: Absolute upstream URL without query string
            headers: Headers to send as-is
            params: Query parameters (omitted when empty)
            content: Raw request body
            json: Structured request body, JSON-encoded by httpx
            timeout: Per-phase httpx timeout

        Returns:
            UpstreamReply with status, header pairs and undecoded body

        Raises:
            httpx.HTTPError: On transport failures
        """
        request = self._client.build_request(
            method=method,
            url=url,
            headers=headers,
            params=params or None,
            content=content,
            json=json,
            timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
        response = await self._client.send(request, stream=True)
        try:
            body = b"".join([chunk async for chunk in response.aiter_raw()])
        finally:
            await response.aclose()

        return UpstreamReply(
            status_code=response.status_code,
            headers=[(key, value) for key, value in response.headers.multi_items()],
            body=body,
        )

    async def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str | bytes] | None = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> httpx.Response:
        """Send GET request.

        Args:
            url: Target URL for the GET request
            headers: Additional HTTP headers (optional)
            timeout: Request timeout (optional)

        Returns:
            Raw httpx Response object
        """
        return await self._client.get(
            url=url,
            headers=headers,
            timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
