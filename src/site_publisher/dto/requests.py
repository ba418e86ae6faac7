"""Request DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GatewayCallRequest(BaseModel):
    """Request DTO for proxied gateway tool calls."""

    model_config = ConfigDict(populate_by_name=True)

    tool_name: str = Field(..., alias="toolName", description="Gateway tool to call", min_length=1)
    args: dict[str, Any] = Field(
        default_factory=dict,
        description="Arguments passed to the tool unchanged",
    )
