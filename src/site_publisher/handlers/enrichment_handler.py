"""HTTP handlers for enrichment reads."""

from fastapi import HTTPException, status

from site_publisher.dto import CacheClearResponse, EnrichmentResponse
from site_publisher.errors import GatewayError, QueueClosedError
from site_publisher.handlers.gateway_handler import gateway_http_error
from site_publisher.services import EnrichmentService


class EnrichmentHandler:
    """HTTP handlers for enrichment payloads and their cache."""

    def __init__(self, enrichment_service: EnrichmentService) -> None:
        self._enrichment = enrichment_service

    async def get_enrichment(self, url: str) -> EnrichmentResponse:
        """Handle GET /api/enrichment requests.

        Raises:
            HTTPException: If the URL is empty or the gateway failed
        """
        if not url:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL required")

        try:
            content, cached = await self._enrichment.get(url)
        except (GatewayError, QueueClosedError) as e:
            raise gateway_http_error(e) from e

        return EnrichmentResponse(url=url, content=content, cached=cached)

    async def clear_cache(self) -> CacheClearResponse:
        """Handle DELETE /api/enrichment/cache requests."""
        self._enrichment.clear_cache()
        return CacheClearResponse(success=True, message="Enrichment cache cleared")
