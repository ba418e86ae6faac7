"""Content source protocol."""

from typing import Protocol, runtime_checkable

from site_publisher.entities import ContentItem


@runtime_checkable
class ContentSource(Protocol):
    """Protocol for anything that can list publishable content items."""

    async def list_items(self) -> list[ContentItem]:
        """Return every content item the source knows about.

        Returns:
            Content items in a stable order
        """
        ...
