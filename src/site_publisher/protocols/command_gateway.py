"""Command gateway protocol.

Defines the interface for the external command-execution endpoint through
which the authoritative content store is read and written.

Implementations can include:
- MCP mesh gateway over HTTP (default)
- In-process fakes for tests
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CommandGateway(Protocol):
    """Protocol for command gateways.

    Any type implementing these methods satisfies the protocol, no explicit
    inheritance needed. Gateways are only ever called by the rate-limited
    command queue.
    """

    async def execute(self, command: Any) -> Any:
        """Dispatch one command and wait for its settled result.

        Args:
            command: The command payload (usually a ``ToolCall``)

        Returns:
            The normalized gateway result

        Raises:
            GatewayError: On transport or protocol failure
        """
        ...

    async def close(self) -> None:
        """Release transport resources."""
        ...
