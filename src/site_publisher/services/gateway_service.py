"""Gateway service for content-store reads and writes.

All access to the content store goes through this service, which submits
every call to the injected rate-limited queue.
"""

from typing import Any

from site_publisher.config import settings
from site_publisher.entities import ToolCall
from site_publisher.services.command_queue import RateLimitedCommandQueue


def escape_sql(value: str | None) -> str:
    """Quote a string literal for SQL using dollar-quoting.

    Dollar-quoting needs no escaping of backslashes or quotes. When the
    value itself contains ``$$`` a tag that does not occur in it is used.

    Args:
        value: The string to quote, or None

    Returns:
        A SQL literal (``NULL`` for None)
    """
    if value is None:
        return "NULL"
    if "$$" not in value:
        return f"$${value}$$"
    tag = "q"
    while f"${tag}$" in value:
        tag += "q"
    return f"${tag}${value}${tag}$"


class GatewayService:
    """Entry point for gateway tool calls.

    Example:
        ```python
        queue = RateLimitedCommandQueue(gateway=McpGatewayClient.create())
        service = GatewayService(queue=queue)
        rows = await service.execute_sql("SELECT slug FROM articles")
        ```
    """

    def __init__(
        self,
        queue: RateLimitedCommandQueue,
        sql_tool: str | None = None,
    ) -> None:
        """Initialize the gateway service.

        Args:
            queue: The process-wide command queue (required).
            sql_tool: Tool name used for SQL execution. Defaults to settings.
        """
        self._queue = queue
        self._sql_tool = sql_tool or settings.gateway_sql_tool

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> Any:
        """Call a gateway tool through the queue.

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            The normalized tool result
        """
        return await self._queue.submit(ToolCall(name=name, arguments=arguments or {}))

    async def execute_sql(self, query: str) -> Any:
        """Run a SQL statement against the content store.

        Returns:
            Parsed rows when the result is JSON-shaped, otherwise the raw text
        """
        return await self.call_tool(self._sql_tool, {"query": query})

    @property
    def queue(self) -> RateLimitedCommandQueue:
        """Get the underlying queue (for health reporting)."""
        return self._queue
