"""MCP mesh gateway client.

Calls gateway tools with JSON-RPC ``tools/call`` requests over HTTP. The
gateway may answer with ``application/json`` or ``text/event-stream``; both
are handled by the response normalizer.

Requirements:
    - ``MESH_GATEWAY_URL``: the gateway endpoint
    - ``MESH_API_KEY``: bearer token for the gateway

This client is never called directly by request handlers; it sits behind
the rate-limited command queue.
"""

import itertools
import time
from typing import Any

import httpx

from site_publisher.config import settings
from site_publisher.entities import ToolCall
from site_publisher.errors import GatewayError, GatewayNotConfiguredError, GatewayTimeoutError
from site_publisher.services.response_normalizer import normalize_response


class McpGatewayClient:
    """HTTP implementation of the CommandGateway protocol.

    Example:
        ```python
        gateway = McpGatewayClient.create()
        rows = await gateway.execute(ToolCall("execute_sql", {"query": "SELECT 1"}))
        await gateway.close()
        ```
    """

    def __init__(
        self,
        gateway_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the gateway client.

        Args:
            gateway_url: Gateway endpoint. Defaults to settings.mesh_gateway_url.
            api_key: Bearer token. Defaults to settings.mesh_api_key.
            timeout: Request timeout in seconds. Defaults to settings.
            client: Pre-built HTTP client (tests inject one).
        """
        self._gateway_url = gateway_url or settings.mesh_gateway_url
        self._api_key = api_key or settings.mesh_api_key
        self._timeout = settings.gateway_timeout if timeout is None else timeout
        self._client = client
        self._ids = itertools.count(int(time.time() * 1000))

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @classmethod
    def create(
        cls,
        gateway_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> "McpGatewayClient":
        """Factory method to create McpGatewayClient with defaults from settings."""
        return cls(gateway_url=gateway_url, api_key=api_key, timeout=timeout)

    @property
    def configured(self) -> bool:
        return bool(self._gateway_url and self._api_key)

    def build_envelope(self, command: ToolCall) -> dict[str, Any]:
        """Build the JSON-RPC request body for one tool call."""
        return {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": "tools/call",
            "params": {"name": command.name, "arguments": command.arguments},
        }

    async def execute(self, command: ToolCall) -> Any:
        """Call a gateway tool and return its normalized result.

        Raises:
            GatewayNotConfiguredError: If URL or API key is missing
            GatewayTimeoutError: If the request timed out
            GatewayError: On connection failure or non-2xx status
            GatewayProtocolError: If the gateway reports a JSON-RPC error
        """
        if not self.configured:
            raise GatewayNotConfiguredError("MESH_GATEWAY_URL and MESH_API_KEY required")

        try:
            response = await self.client.post(
                self._gateway_url,
                json=self.build_envelope(command),
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json, text/event-stream",
                    "Authorization": f"Bearer {self._api_key}",
                },
            )
        except httpx.TimeoutException as e:
            raise GatewayTimeoutError(f"Gateway request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise GatewayError(f"Gateway request failed: {e}") from e

        if response.status_code >= 400:
            raise GatewayError(
                f"Gateway returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        return normalize_response(response)

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
