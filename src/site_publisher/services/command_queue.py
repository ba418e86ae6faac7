"""Rate-limited command queue.

Every call to the command gateway goes through one queue instance. The
queue dispatches commands strictly one at a time in submission order and
waits at least ``min_delay_ms`` after each command settles before starting
the next one.
"""

import asyncio
import itertools
from collections import deque
from typing import Any

import structlog

from site_publisher.config import settings
from site_publisher.entities import QueuedCommand
from site_publisher.errors import GatewayTimeoutError, QueueClosedError
from site_publisher.protocols import CommandGateway

logger = structlog.get_logger()

IDLE = "idle"
DRAINING = "draining"


class RateLimitedCommandQueue:
    """FIFO queue serializing and throttling gateway calls.

    State machine: ``idle -> draining -> idle``. Submitting to an idle
    queue starts a drain task; the task pops commands until the queue is
    empty and then returns to idle.

    A failing command rejects only its own future. Callers that are
    cancelled while waiting do not cancel their command; once submitted it
    is dispatched.

    Example:
        ```python
        queue = RateLimitedCommandQueue(gateway=McpGatewayClient.create())
        rows = await queue.submit(ToolCall("execute_sql", {"query": "SELECT 1"}))
        await queue.close()
        ```
    """

    def __init__(
        self,
        gateway: CommandGateway,
        min_delay_ms: int | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            gateway: The gateway commands are dispatched to (required).
            min_delay_ms: Minimum delay between calls. Defaults to settings.
            timeout: Per-command timeout in seconds. Defaults to settings.
        """
        self._gateway = gateway
        self._min_delay = (
            settings.gateway_min_delay_ms if min_delay_ms is None else min_delay_ms
        ) / 1000
        self._timeout = settings.gateway_timeout if timeout is None else timeout
        self._pending: deque[QueuedCommand] = deque()
        self._drain_task: asyncio.Task[None] | None = None
        self._last_completed: float | None = None
        self._sequence = itertools.count(1)
        self._closed = False

    @property
    def state(self) -> str:
        return DRAINING if self._drain_task is not None else IDLE

    @property
    def pending_count(self) -> int:
        """Number of commands waiting to be dispatched."""
        return len(self._pending)

    @property
    def min_delay_ms(self) -> int:
        return round(self._min_delay * 1000)

    @property
    def closed(self) -> bool:
        return self._closed

    async def submit(self, command: Any) -> Any:
        """Queue a command and wait for its result.

        Args:
            command: Payload handed to the gateway unchanged

        Returns:
            The gateway result for this command

        Raises:
            QueueClosedError: If the queue has been closed
            Exception: Whatever the gateway raised for this command
        """
        if self._closed:
            raise QueueClosedError("Command queue is closed")

        loop = asyncio.get_running_loop()
        item = QueuedCommand(
            payload=command,
            future=loop.create_future(),
            sequence=next(self._sequence),
        )
        self._pending.append(item)

        if self._drain_task is None:
            self._drain_task = loop.create_task(self._drain())

        return await asyncio.shield(item.future)

    async def join(self) -> None:
        """Wait until every queued command has settled."""
        while self._drain_task is not None:
            await asyncio.shield(self._drain_task)

    async def close(self) -> None:
        """Stop accepting commands and wait for the queue to drain."""
        self._closed = True
        await self.join()

    async def _drain(self) -> None:
        try:
            while self._pending:
                item = self._pending.popleft()
                await self._wait_for_slot()
                await self._dispatch(item)
        finally:
            self._drain_task = None

    async def _wait_for_slot(self) -> None:
        if self._last_completed is None:
            return
        loop = asyncio.get_running_loop()
        # Loop so an early timer wake-up never shortens the gap.
        while True:
            remaining = self._last_completed + self._min_delay - loop.time()
            if remaining <= 0:
                return
            await asyncio.sleep(remaining)

    async def _dispatch(self, item: QueuedCommand) -> None:
        loop = asyncio.get_running_loop()
        try:
            result = await asyncio.wait_for(
                self._gateway.execute(item.payload), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "gateway_command_timed_out",
                sequence=item.sequence,
                timeout=self._timeout,
            )
            item.reject(GatewayTimeoutError(f"Gateway call timed out after {self._timeout}s"))
        except Exception as e:
            logger.warning(
                "gateway_command_failed",
                sequence=item.sequence,
                error=str(e),
                error_type=type(e).__name__,
            )
            item.reject(e)
        else:
            item.resolve(result)
        finally:
            self._last_completed = loop.time()
