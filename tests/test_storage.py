"""
Tests for the key-value storage adapters.
"""

import fakeredis
import pytest
import redis

from site_publisher.errors import StorageError, StorageQuotaExceededError
from site_publisher.protocols import KeyValueStorage
from site_publisher.repositories import InMemoryKeyValueStorage, RedisKeyValueStorage
from site_publisher.services import EnrichmentCache


class BrokenRedis:
    def get(self, key):
        raise redis.ConnectionError("down")

    def set(self, key, value):
        raise redis.ConnectionError("down")

    def delete(self, key):
        raise redis.ConnectionError("down")

    def ping(self):
        raise redis.ConnectionError("down")


@pytest.fixture
def redis_storage():
    return RedisKeyValueStorage(redis_client=fakeredis.FakeRedis(), prefix="test:")


def test_redis_storage_round_trip(redis_storage):
    redis_storage.set_item("cache", '{"version": 1}')

    assert redis_storage.get_item("cache") == '{"version": 1}'
    assert redis_storage.client.get("test:cache") == b'{"version": 1}'

    redis_storage.remove_item("cache")
    assert redis_storage.get_item("cache") is None


def test_redis_storage_health_check(redis_storage):
    assert redis_storage.health_check() is True
    assert RedisKeyValueStorage(redis_client=BrokenRedis()).health_check() is False


def test_redis_failures_become_storage_errors():
    storage = RedisKeyValueStorage(redis_client=BrokenRedis())

    with pytest.raises(StorageError):
        storage.get_item("k")
    with pytest.raises(StorageError):
        storage.set_item("k", "v")
    with pytest.raises(StorageError):
        storage.remove_item("k")


def test_adapters_satisfy_protocol(redis_storage):
    assert isinstance(redis_storage, KeyValueStorage)
    assert isinstance(InMemoryKeyValueStorage(), KeyValueStorage)


def test_memory_storage_quota():
    storage = InMemoryKeyValueStorage(quota_bytes=8)
    storage.set_item("a", "1234")

    with pytest.raises(StorageQuotaExceededError):
        storage.set_item("b", "56789")

    # Overwriting a key only counts its new size.
    storage.set_item("a", "12345678")
    assert storage.get_item("a") == "12345678"


def test_undecodable_value_becomes_storage_error(redis_storage):
    redis_storage.client.set("test:cache", b"\xff\xfe garbage")

    with pytest.raises(StorageError):
        redis_storage.get_item("cache")


def test_undecodable_value_reads_as_cache_miss(redis_storage):
    redis_storage.client.set("test:cache", b"\xff\xfe garbage")
    cache = EnrichmentCache(storage=redis_storage, storage_key="cache", version=1, ttl=60)

    assert cache.get("https://example.com") is None
