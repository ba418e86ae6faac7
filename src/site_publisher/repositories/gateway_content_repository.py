"""Articles read from the content store through the gateway."""

from typing import Any

from site_publisher.entities import ContentItem
from site_publisher.errors import GatewayError
from site_publisher.services.gateway_service import GatewayService

ARTICLES_QUERY = """
SELECT a.slug, a.title, a.description, a.content, a.status, a.date,
       a.cover_image, a.updated_at,
       COALESCE(array_agg(t.name ORDER BY t.name) FILTER (WHERE t.name IS NOT NULL), '{}') AS tags
FROM articles a
LEFT JOIN article_tags art ON art.article_id = a.id
LEFT JOIN tags t ON t.id = art.tag_id
GROUP BY a.id
ORDER BY a.date DESC, a.slug
"""


def row_to_item(row: dict[str, Any]) -> ContentItem:
    """Convert an article row into a ContentItem."""
    return ContentItem(
        slug=row["slug"],
        title=row["title"],
        content=row.get("content") or "",
        description=row.get("description"),
        date=str(row.get("date") or ""),
        status=row.get("status") or "draft",
        tags=tuple(row.get("tags") or ()),
        cover_image=row.get("cover_image"),
        updated_at=str(row["updated_at"]) if row.get("updated_at") else None,
    )


class GatewayContentRepository:
    """ContentSource backed by SQL over the command gateway."""

    def __init__(self, gateway: GatewayService, query: str = ARTICLES_QUERY) -> None:
        self._gateway = gateway
        self._query = query

    async def list_items(self) -> list[ContentItem]:
        """Fetch all articles.

        Raises:
            GatewayError: If the gateway answered with something other than rows
        """
        result = await self._gateway.execute_sql(self._query)
        if not isinstance(result, list):
            preview = result[:200] if isinstance(result, str) else type(result).__name__
            raise GatewayError(f"Expected article rows from gateway, got: {preview}")
        return [row_to_item(row) for row in result if isinstance(row, dict)]
