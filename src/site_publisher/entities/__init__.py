"""Domain entities for internal representation.

These are plain dataclasses used internally by services and repositories.
They are NOT used for API contracts - use DTOs from the dto package for that.
"""

from .cache_entry import EnrichmentCacheEntry
from .command import QueuedCommand, ToolCall
from .content_item import ContentItem
from .manifest import AssetManifestEntry, BuildOutput, Manifest
from .page import ReconciledPage

__all__ = [
    "AssetManifestEntry",
    "BuildOutput",
    "ContentItem",
    "EnrichmentCacheEntry",
    "Manifest",
    "QueuedCommand",
    "ReconciledPage",
    "ToolCall",
]
