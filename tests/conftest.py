"""
Shared fixtures for the site publisher tests.
"""

import asyncio
from pathlib import Path
from typing import Any

import pytest

from site_publisher.config import Settings
from site_publisher.entities import ContentItem, ToolCall
from site_publisher.entities.content_item import CONTEXT
from site_publisher.logging_config import configure_logging
from site_publisher.repositories import InMemoryKeyValueStorage

configure_logging(testing=True)


class FakeGateway:
    """In-process CommandGateway recording dispatch timing.

    ``responses`` maps a tool name to a value, an exception instance or a
    callable taking the ToolCall.
    """

    def __init__(self, responses: dict[str, Any] | None = None, delay: float = 0.0) -> None:
        self.responses = responses or {}
        self.delay = delay
        self.calls: list[ToolCall] = []
        self.started: list[float] = []
        self.finished: list[float] = []
        self.active = 0
        self.max_active = 0
        self.closed = False

    async def execute(self, command: ToolCall) -> Any:
        loop = asyncio.get_running_loop()
        self.calls.append(command)
        self.started.append(loop.time())
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            response = self.responses.get(command.name, command.arguments)
            if callable(response):
                response = response(command)
            if isinstance(response, BaseException):
                raise response
            return response
        finally:
            self.active -= 1
            self.finished.append(loop.time())

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings rooted in a temporary site directory."""
    return Settings(
        mesh_gateway_url="https://gateway.test/mcp",
        mesh_api_key="test-key",
        gateway_min_delay_ms=0,
        site_root=str(tmp_path),
        production=False,
    )


@pytest.fixture
def article() -> ContentItem:
    return ContentItem(
        slug="hello-world",
        title="Hello World",
        content="# Hello World\n\nFirst post. It mentions </script> on purpose.",
        description="A first post",
        date="2024-05-01",
        status="published",
        tags=("intro", "meta"),
    )


@pytest.fixture
def draft() -> ContentItem:
    return ContentItem(slug="work-in-progress", title="WIP", content="Not yet.", status="draft")


@pytest.fixture
def context_doc() -> ContentItem:
    return ContentItem(
        slug="principles/integrity",
        title="Integrity",
        content="# Integrity\n\nDo what you said you would do.",
        category=CONTEXT,
        status="published",
    )
