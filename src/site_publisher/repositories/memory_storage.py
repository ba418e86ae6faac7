"""In-memory implementation of KeyValueStorage."""

from site_publisher.errors import StorageError, StorageQuotaExceededError


class InMemoryKeyValueStorage:
    """Dictionary-backed storage with an optional byte quota.

    Used for tests and for running the dev server without Redis.
    """

    def __init__(self, quota_bytes: int | None = None, available: bool = True) -> None:
        self._items: dict[str, str] = {}
        self._quota_bytes = quota_bytes
        self.available = available

    def _check_available(self) -> None:
        if not self.available:
            raise StorageError("Storage is disabled")

    def get_item(self, key: str) -> str | None:
        self._check_available()
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._check_available()
        if self._quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._items.items() if k != key)
            if used + len(value.encode("utf-8")) > self._quota_bytes:
                raise StorageQuotaExceededError(f"Quota of {self._quota_bytes} bytes exceeded")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._check_available()
        self._items.pop(key, None)
