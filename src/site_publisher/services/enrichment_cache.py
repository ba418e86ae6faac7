"""Expiring enrichment cache.

The cache keeps one versioned document under a single namespaced storage
key::

    {"version": 1, "entries": {"<resource key>": {"content": {...}, "timestamp": <ms>}}}

Entries older than the TTL are treated as absent. Payloads whose text looks
like an upstream error are never written. Storage failures degrade to
"always refetch" and never raise.
"""

import json
import re
import time
from collections.abc import Callable, Iterable
from typing import Any

import structlog

from site_publisher.config import settings
from site_publisher.entities import EnrichmentCacheEntry
from site_publisher.errors import StorageError
from site_publisher.protocols import KeyValueStorage

logger = structlog.get_logger()

ERROR_SIGNATURES: tuple[re.Pattern[str], ...] = (
    re.compile(r"authorization failed", re.IGNORECASE),
    re.compile(r"mcp error", re.IGNORECASE),
    re.compile(r"request timed out", re.IGNORECASE),
    re.compile(r"connection refused", re.IGNORECASE),
    re.compile(r"network error", re.IGNORECASE),
    re.compile(r"failed to fetch", re.IGNORECASE),
    re.compile(r"internal server error", re.IGNORECASE),
    re.compile(r"^error:", re.IGNORECASE),
)


def iter_text_fields(payload: Any) -> Iterable[str]:
    """Yield every string found in a nested payload."""
    if isinstance(payload, str):
        yield payload
    elif isinstance(payload, dict):
        for value in payload.values():
            yield from iter_text_fields(value)
    elif isinstance(payload, (list, tuple)):
        for value in payload:
            yield from iter_text_fields(value)


def is_likely_error(
    payload: Any,
    patterns: Iterable[re.Pattern[str]] = ERROR_SIGNATURES,
) -> bool:
    """Check whether any text field of a payload matches an error signature."""
    patterns = tuple(patterns)
    return any(
        pattern.search(text) for text in iter_text_fields(payload) for pattern in patterns
    )


class EnrichmentCache:
    """Persistent, expiring cache for enrichment payloads.

    Example:
        ```python
        cache = EnrichmentCache(storage=RedisKeyValueStorage.create())
        cache.set("https://example.com", {"insight_dev": "..."})
        cache.get("https://example.com")
        ```
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        storage_key: str | None = None,
        version: int | None = None,
        ttl: int | None = None,
        is_error: Callable[[Any], bool] = is_likely_error,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache.

        Args:
            storage: Storage backend (required).
            storage_key: Namespaced key holding the store. Defaults to settings.
            version: Running schema version. Defaults to settings.
            ttl: Entry lifetime in seconds. Defaults to settings.
            is_error: Predicate rejecting payloads before they are written.
            clock: Wall clock in seconds.
        """
        self._storage = storage
        self._storage_key = storage_key or settings.enrichment_cache_key
        self._version = settings.enrichment_cache_version if version is None else version
        self._ttl_ms = (settings.enrichment_cache_ttl if ttl is None else ttl) * 1000
        self._is_error = is_error
        self._clock = clock

    @property
    def version(self) -> int:
        return self._version

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def _now_ms(self) -> int:
        return round(self._clock() * 1000)

    def _empty(self) -> dict[str, Any]:
        return {"version": self._version, "entries": {}}

    def _load(self) -> dict[str, Any]:
        try:
            raw = self._storage.get_item(self._storage_key)
        except StorageError as e:
            logger.warning("cache_read_failed", key=self._storage_key, error=str(e))
            return self._empty()

        if not raw:
            return self._empty()

        try:
            store = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("cache_store_corrupt", key=self._storage_key)
            return self._empty()

        if not isinstance(store, dict) or store.get("version") != self._version:
            return self._empty()
        if not isinstance(store.get("entries"), dict):
            return self._empty()
        return store

    def _is_fresh(self, entry: EnrichmentCacheEntry, now_ms: int) -> bool:
        return entry.age_ms(now_ms) < self._ttl_ms

    def get(self, key: str) -> dict[str, Any] | None:
        """Return the cached payload for ``key`` if present and fresh."""
        entry = EnrichmentCacheEntry.from_dict(self._load()["entries"].get(key))
        if entry is None or not self._is_fresh(entry, self._now_ms()):
            return None
        return entry.content

    def set(self, key: str, payload: dict[str, Any]) -> bool:
        """Store a payload unless it looks like an error.

        Expired entries are dropped from the store on every write.

        Returns:
            True if the payload was written, False if it was skipped
        """
        if self._is_error(payload):
            logger.warning("cache_write_skipped", key=key, reason="error_signature")
            return False

        now_ms = self._now_ms()
        store = self._load()
        entries = {}
        for entry_key, raw_entry in store["entries"].items():
            entry = EnrichmentCacheEntry.from_dict(raw_entry)
            if entry is not None and self._is_fresh(entry, now_ms):
                entries[entry_key] = raw_entry
        entries[key] = EnrichmentCacheEntry(content=payload, timestamp=now_ms).to_dict()
        store["entries"] = entries

        try:
            self._storage.set_item(self._storage_key, json.dumps(store))
        except StorageError as e:
            logger.warning("cache_write_failed", key=key, error=str(e))
            return False
        return True

    def clear(self) -> None:
        """Drop the entire cache."""
        try:
            self._storage.remove_item(self._storage_key)
        except StorageError as e:
            logger.warning("cache_clear_failed", key=self._storage_key, error=str(e))
