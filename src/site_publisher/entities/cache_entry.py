"""Enrichment cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class EnrichmentCacheEntry:
    """A cached enrichment payload.

    Attributes:
        content: The payload as fetched from upstream
        timestamp: Creation time in milliseconds since the epoch
    """

    content: dict[str, Any]
    timestamp: int

    def age_ms(self, now_ms: int) -> int:
        """Milliseconds elapsed since the entry was written."""
        return now_ms - self.timestamp

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Any) -> "EnrichmentCacheEntry | None":
        """Rebuild an entry from its stored form, or None if the shape is wrong."""
        if not isinstance(data, dict):
            return None
        content = data.get("content")
        timestamp = data.get("timestamp")
        if not isinstance(content, dict) or not isinstance(timestamp, (int, float)):
            return None
        return cls(content=content, timestamp=int(timestamp))
