"""Cache-first enrichment reads."""

from typing import Any

import structlog

from site_publisher.errors import GatewayError
from site_publisher.services.enrichment_cache import EnrichmentCache
from site_publisher.services.gateway_service import GatewayService, escape_sql

logger = structlog.get_logger()

ENRICHMENT_FIELDS = (
    "perplexity_research",
    "firecrawl_content",
    "insight_dev",
    "insight_founder",
    "insight_investor",
)


class EnrichmentService:
    """Reads enrichment payloads, consulting the cache before the gateway."""

    def __init__(
        self,
        gateway: GatewayService,
        cache: EnrichmentCache,
        table: str = "bookmarks",
        fields: tuple[str, ...] = ENRICHMENT_FIELDS,
    ) -> None:
        self._gateway = gateway
        self._cache = cache
        self._table = table
        self._fields = fields

    def build_query(self, url: str) -> str:
        columns = ", ".join(self._fields)
        return f"SELECT {columns} FROM {self._table} WHERE url = {escape_sql(url)} LIMIT 1"

    async def get(self, url: str) -> tuple[dict[str, Any], bool]:
        """Return the enrichment payload for a URL.

        Args:
            url: Resource URL the enrichment belongs to

        Returns:
            Tuple (payload, cached). The payload has one key per enrichment
            field; missing rows yield None values.

        Raises:
            GatewayError: If the gateway failed or answered with non-row text
        """
        cached = self._cache.get(url)
        if cached is not None:
            return cached, True

        result = await self._gateway.execute_sql(self.build_query(url))
        if isinstance(result, str):
            raise GatewayError(f"Unexpected enrichment result: {result[:200]}")

        row = result[0] if isinstance(result, list) and result else {}
        if not isinstance(row, dict):
            raise GatewayError("Unexpected enrichment row shape")

        payload = {field: row.get(field) for field in self._fields}
        # A missing row may be enriched upstream later; only real content is cached.
        if any(value is not None for value in payload.values()):
            self._cache.set(url, payload)
        else:
            logger.info("enrichment_not_found", url=url)
        return payload, False

    def clear_cache(self) -> None:
        logger.info("enrichment_cache_cleared")
        self._cache.clear()
