"""Site Publisher - Cache-coherent static publishing with a rate-limited gateway.

This package provides a layered architecture for building and serving a
content site:

Layers:
    - protocols: Interface contracts (CommandGateway, ContentSource, KeyValueStorage)
    - repositories: Data access implementations (gateway client, Redis, files)
    - services: Pipeline logic (queue, fingerprinting, materialization, caching)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from site_publisher.repositories import McpGatewayClient
    from site_publisher.services import GatewayService, RateLimitedCommandQueue

    queue = RateLimitedCommandQueue(gateway=McpGatewayClient.create())
    rows = await GatewayService(queue=queue).execute_sql("SELECT 1")
    ```

For the dev server:
    ```python
    from site_publisher.api.app import app
    ```
"""

from site_publisher.config import get_redis_client, settings
from site_publisher.dto import EnrichmentResponse, GatewayCallRequest
from site_publisher.entities import ContentItem, EnrichmentCacheEntry, Manifest
from site_publisher.errors import GatewayError, ManifestConflictError, StorageError
from site_publisher.handlers import DevPageHandler, EnrichmentHandler, GatewayHandler
from site_publisher.protocols import AssetInjector, CommandGateway, ContentSource, KeyValueStorage
from site_publisher.repositories import McpGatewayClient, RedisKeyValueStorage
from site_publisher.services import (
    EnrichmentCache,
    GatewayService,
    ManifestBuilder,
    PublishService,
    RateLimitedCommandQueue,
)

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Errors
    "GatewayError",
    "ManifestConflictError",
    "StorageError",
    # Protocols (interfaces)
    "AssetInjector",
    "CommandGateway",
    "ContentSource",
    "KeyValueStorage",
    # Services (pipeline logic)
    "EnrichmentCache",
    "GatewayService",
    "ManifestBuilder",
    "PublishService",
    "RateLimitedCommandQueue",
    # Handlers (HTTP)
    "DevPageHandler",
    "EnrichmentHandler",
    "GatewayHandler",
    # Repositories (data access)
    "McpGatewayClient",
    "RedisKeyValueStorage",
    # Entities (domain models)
    "ContentItem",
    "EnrichmentCacheEntry",
    "Manifest",
    # DTOs (API contracts)
    "EnrichmentResponse",
    "GatewayCallRequest",
]
