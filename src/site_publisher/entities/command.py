"""Gateway command entities."""

import asyncio
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ToolCall:
    """A single tool invocation sent to the command gateway.

    Attributes:
        name: Gateway tool name (e.g. ``execute_sql``)
        arguments: Tool arguments, serialized as the JSON-RPC ``arguments``
    """

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass
class QueuedCommand:
    """A unit of work waiting in the rate-limited queue.

    The future is settled exactly once, with either the gateway result or
    the exception raised while dispatching ``payload``.
    """

    payload: Any
    future: "asyncio.Future[Any]"
    sequence: int = 0

    def resolve(self, value: Any) -> None:
        if not self.future.done():
            self.future.set_result(value)

    def reject(self, error: BaseException) -> None:
        if not self.future.done():
            self.future.set_exception(error)
