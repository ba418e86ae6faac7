"""Redis implementation of KeyValueStorage."""

import redis

from site_publisher.config import get_redis_client
from site_publisher.errors import StorageError


class RedisKeyValueStorage:
    """Redis string storage.

    This class satisfies the KeyValueStorage protocol through structural
    typing. Redis failures surface as ``StorageError``.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        prefix: str = "site_publisher:",
    ) -> None:
        """Initialize the Redis storage.

        Args:
            redis_client: Redis client instance. If None, creates default.
            prefix: Namespace prepended to every key.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = prefix

    @classmethod
    def create(cls, prefix: str = "site_publisher:") -> "RedisKeyValueStorage":
        """Factory method to create RedisKeyValueStorage with the default client."""
        return cls(prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get_item(self, key: str) -> str | None:
        try:
            value = self._client.get(self._key(key))
            if isinstance(value, bytes):
                value = value.decode("utf-8")
        except redis.RedisError as e:
            raise StorageError(f"Redis read failed: {e}") from e
        except UnicodeDecodeError as e:
            raise StorageError(f"Redis value is not valid UTF-8: {e}") from e
        if value is None:
            return None
        return str(value)

    def set_item(self, key: str, value: str) -> None:
        try:
            self._client.set(self._key(key), value.encode("utf-8"))
        except redis.RedisError as e:
            raise StorageError(f"Redis write failed: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError as e:
            raise StorageError(f"Redis delete failed: {e}") from e

    def health_check(self) -> bool:
        """Check if Redis is accessible."""
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
