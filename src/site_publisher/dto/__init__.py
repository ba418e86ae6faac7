"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract of the dev server.
Internal logic uses entities from the entities package.
"""

from .requests import GatewayCallRequest
from .responses import (
    CacheClearResponse,
    EnrichmentResponse,
    GatewayCallResponse,
    HealthCheckResponse,
)

__all__ = [
    "CacheClearResponse",
    "EnrichmentResponse",
    "GatewayCallRequest",
    "GatewayCallResponse",
    "HealthCheckResponse",
]
