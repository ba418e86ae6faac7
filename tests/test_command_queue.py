"""
Tests for the rate-limited command queue.
"""

import asyncio

import pytest

from site_publisher.entities import ToolCall
from site_publisher.errors import GatewayError, GatewayTimeoutError, QueueClosedError
from site_publisher.services import RateLimitedCommandQueue
from site_publisher.services.command_queue import DRAINING, IDLE

from .conftest import FakeGateway


@pytest.mark.asyncio
async def test_results_follow_submission_order(fake_gateway):
    queue = RateLimitedCommandQueue(gateway=fake_gateway, min_delay_ms=0)

    results = await asyncio.gather(
        *(queue.submit(ToolCall("echo", {"n": n})) for n in range(5))
    )

    assert results == [{"n": n} for n in range(5)]
    assert [call.arguments["n"] for call in fake_gateway.calls] == list(range(5))


@pytest.mark.asyncio
async def test_ten_simultaneous_commands_are_spaced():
    """Ten commands at once: one in flight at a time, each start after the delay."""
    gateway = FakeGateway(delay=0.01)
    queue = RateLimitedCommandQueue(gateway=gateway, min_delay_ms=50)

    await asyncio.gather(*(queue.submit(ToolCall("echo", {"n": n})) for n in range(10)))

    assert len(gateway.calls) == 10
    assert gateway.max_active == 1
    for previous_end, start in zip(gateway.finished, gateway.started[1:]):
        # Tolerance covers float rounding of loop.time() only.
        assert start - previous_end >= 0.05 - 0.001
    total = gateway.finished[-1] - gateway.started[0]
    assert total >= 9 * 0.05


@pytest.mark.asyncio
async def test_failure_rejects_only_its_own_command():
    def respond(command):
        if command.arguments["n"] == 1:
            return GatewayError("boom")
        return command.arguments["n"]

    gateway = FakeGateway(responses={"echo": respond})
    queue = RateLimitedCommandQueue(gateway=gateway, min_delay_ms=0)

    results = await asyncio.gather(
        *(queue.submit(ToolCall("echo", {"n": n})) for n in range(3)),
        return_exceptions=True,
    )

    assert results[0] == 0
    assert isinstance(results[1], GatewayError)
    assert results[2] == 2
    assert queue.state == IDLE


@pytest.mark.asyncio
async def test_timeout_rejects_with_gateway_timeout():
    gateway = FakeGateway(delay=0.5)
    queue = RateLimitedCommandQueue(gateway=gateway, min_delay_ms=0, timeout=0.05)

    with pytest.raises(GatewayTimeoutError):
        await queue.submit(ToolCall("slow"))

    gateway.delay = 0
    assert await queue.submit(ToolCall("fast", {"ok": True})) == {"ok": True}


@pytest.mark.asyncio
async def test_state_and_pending_count(fake_gateway):
    fake_gateway.delay = 0.02
    queue = RateLimitedCommandQueue(gateway=fake_gateway, min_delay_ms=0)
    assert queue.state == IDLE

    tasks = [asyncio.ensure_future(queue.submit(ToolCall("echo"))) for _ in range(3)]
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert queue.state == DRAINING
    assert queue.pending_count == 2

    await asyncio.gather(*tasks)
    await queue.join()
    assert queue.state == IDLE
    assert queue.pending_count == 0


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_command(fake_gateway):
    fake_gateway.delay = 0.02
    queue = RateLimitedCommandQueue(gateway=fake_gateway, min_delay_ms=0)

    task = asyncio.ensure_future(queue.submit(ToolCall("echo", {"n": 1})))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    await queue.join()
    assert len(fake_gateway.calls) == 1
    assert len(fake_gateway.finished) == 1


@pytest.mark.asyncio
async def test_closed_queue_rejects_new_commands(fake_gateway):
    queue = RateLimitedCommandQueue(gateway=fake_gateway, min_delay_ms=0)
    await queue.submit(ToolCall("echo"))

    await queue.close()

    assert queue.closed
    with pytest.raises(QueueClosedError):
        await queue.submit(ToolCall("echo"))


@pytest.mark.asyncio
async def test_close_waits_for_pending_commands(fake_gateway):
    fake_gateway.delay = 0.01
    queue = RateLimitedCommandQueue(gateway=fake_gateway, min_delay_ms=10)

    tasks = [asyncio.ensure_future(queue.submit(ToolCall("echo", {"n": n}))) for n in range(3)]
    await asyncio.sleep(0)
    await queue.close()

    assert len(fake_gateway.finished) == 3
    assert await asyncio.gather(*tasks) == [{"n": n} for n in range(3)]


@pytest.mark.asyncio
async def test_zero_timeout_is_respected():
    gateway = FakeGateway(delay=0.05)
    queue = RateLimitedCommandQueue(gateway=gateway, min_delay_ms=0, timeout=0)

    with pytest.raises(GatewayTimeoutError):
        await queue.submit(ToolCall("slow"))
