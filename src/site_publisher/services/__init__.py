"""Service layer for business logic.

This layer contains the core pipeline logic. Services depend on protocols
(interfaces), not concrete implementations, making them testable and
flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Pipeline) -> (Gateway / Storage)

Usage:
    ```python
    from site_publisher.services import GatewayService, RateLimitedCommandQueue

    queue = RateLimitedCommandQueue(gateway=gateway)
    service = GatewayService(queue=queue)
    ```
"""

from .command_queue import RateLimitedCommandQueue
from .dev_reconciler import DevAssetInjector, DevReconciler
from .enrichment_cache import EnrichmentCache, is_likely_error
from .enrichment_service import EnrichmentService
from .fingerprint import ManifestBuilder, content_hash
from .gateway_service import GatewayService, escape_sql
from .materializer import PageMaterializer
from .publish_service import PublishService
from .response_normalizer import normalize_body, normalize_response

__all__ = [
    "DevAssetInjector",
    "DevReconciler",
    "EnrichmentCache",
    "EnrichmentService",
    "GatewayService",
    "ManifestBuilder",
    "PageMaterializer",
    "PublishService",
    "RateLimitedCommandQueue",
    "content_hash",
    "escape_sql",
    "is_likely_error",
    "normalize_body",
    "normalize_response",
]
