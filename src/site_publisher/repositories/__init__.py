"""Repository layer for data access.

This layer wraps external dependencies (the command gateway, Redis, the
filesystem) behind protocol-based interfaces. The repositories are
protocol-based (structural typing), not inheritance-based.
"""

from site_publisher.protocols import CommandGateway, ContentSource, KeyValueStorage

from .context_file_repository import ContextFileRepository
from .gateway_content_repository import GatewayContentRepository
from .mcp_gateway import McpGatewayClient
from .memory_storage import InMemoryKeyValueStorage
from .redis_storage import RedisKeyValueStorage

__all__ = [
    "CommandGateway",
    "ContentSource",
    "ContextFileRepository",
    "GatewayContentRepository",
    "InMemoryKeyValueStorage",
    "KeyValueStorage",
    "McpGatewayClient",
    "RedisKeyValueStorage",
]
