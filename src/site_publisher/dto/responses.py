"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class GatewayCallResponse(BaseModel):
    """Response DTO for a proxied gateway tool call."""

    result: Any = Field(None, description="Normalized tool result (JSON value or raw text)")


class EnrichmentResponse(BaseModel):
    """Response DTO for an enrichment read."""

    url: str = Field(..., description="Resource the enrichment belongs to")
    content: dict[str, Any] = Field(default_factory=dict, description="Enrichment fields")
    cached: bool = Field(..., description="Whether the payload came from the cache")


class CacheClearResponse(BaseModel):
    """Response DTO for cache clearing."""

    success: bool = Field(..., description="Whether the operation succeeded")
    message: str = Field(..., description="Human-readable status message")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'degraded'")
    queue_state: str = Field(..., description="Command queue state: 'idle' or 'draining'")
    pending_commands: int = Field(..., description="Commands waiting for dispatch", ge=0)
    gateway_configured: bool = Field(..., description="Whether gateway URL and key are set")
