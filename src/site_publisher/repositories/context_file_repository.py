"""Context documents read from markdown files."""

import re
from pathlib import Path

from site_publisher.config import settings
from site_publisher.entities import ContentItem
from site_publisher.entities.content_item import CONTEXT

TITLE_PATTERN = re.compile(r"^#\s+(.+)", re.MULTILINE)


class ContextFileRepository:
    """ContentSource for ``*.md`` files below a directory.

    The item id is the relative path without ``.md``; the title is the
    first level-one heading, or the file stem.
    """

    def __init__(self, root: Path | None = None) -> None:
        self._root = root or settings.resolve(settings.context_dir)

    async def list_items(self) -> list[ContentItem]:
        if not self._root.is_dir():
            return []

        items = []
        for path in sorted(self._root.rglob("*.md")):
            content = path.read_text(encoding="utf-8")
            match = TITLE_PATTERN.search(content)
            items.append(
                ContentItem(
                    slug=path.relative_to(self._root).with_suffix("").as_posix(),
                    title=match.group(1).strip() if match else path.stem,
                    content=content,
                    category=CONTEXT,
                    status="published",
                )
            )
        return items
