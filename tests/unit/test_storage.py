"""
Unit tests for session storage providers.
"""

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from ystp.session.models import FileMetadata, Phase, SessionRecord
from ystp.session.storage import (
    MemoryStorageProvider,
    RedisStorageProvider,
    StorageFactory,
    StorageProvider,
)
from ystp.utils.config import Settings


def make_record(phase=Phase.WAITING_RECEIVER):
    metadata = FileMetadata(name="f", size=42) if phase >= Phase.WAITING_RECEIVER else None
    return SessionRecord(code="a-b", phase=phase, metadata=metadata)


class TestMemoryStorageProvider:
    """In-process store."""

    @pytest.mark.asyncio
    async def test_save_load_delete(self):
        provider = MemoryStorageProvider()

        assert await provider.save_record(make_record())
        loaded = await provider.load_record("a-b")

        assert loaded == make_record()
        assert len(provider) == 1

        assert await provider.delete_record("a-b")
        assert await provider.load_record("a-b") is None
        assert len(provider) == 0

    @pytest.mark.asyncio
    async def test_load_returns_copy(self):
        provider = MemoryStorageProvider()
        record = make_record(Phase.WAITING_METADATA)
        await provider.save_record(record)

        record.phase = Phase.TRANSFER

        assert (await provider.load_record("a-b")).phase == Phase.WAITING_METADATA

    @pytest.mark.asyncio
    async def test_delete_missing_is_ok(self):
        assert await MemoryStorageProvider().delete_record("missing")

    @pytest.mark.asyncio
    async def test_inconsistent_record_loads_as_none(self):
        provider = MemoryStorageProvider()
        provider._records["a-b"] = '{"phase":2}'

        assert await provider.load_record("a-b") is None


class TestStorageFactory:
    """Provider registry."""

    def test_creates_known_providers(self):
        assert isinstance(StorageFactory.create("memory"), MemoryStorageProvider)
        provider = StorageFactory.create("redis", url="redis://example:6379/1", prefix="p:")

        assert isinstance(provider, RedisStorageProvider)
        assert provider.url == "redis://example:6379/1"
        assert provider._get_record_key("a-b") == "p:a-b"

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError):
            StorageFactory.create("sqlite")

    def test_register_provider(self, monkeypatch):
        monkeypatch.setattr(StorageFactory, "_providers", dict(StorageFactory._providers))

        class CustomProvider(MemoryStorageProvider):
            pass

        StorageFactory.register_provider("custom", CustomProvider)

        assert "custom" in StorageFactory.available()
        assert isinstance(StorageFactory.create("custom"), CustomProvider)

    def test_from_settings(self):
        memory = StorageFactory.from_settings(Settings(STORAGE_TYPE="memory"))
        redis = StorageFactory.from_settings(Settings(
            STORAGE_TYPE="redis",
            REDIS_URL="redis://cache:6379/3",
            REDIS_PREFIX="relay:",
            REDIS_EXPIRY=120,
        ))

        assert isinstance(memory, MemoryStorageProvider)
        assert isinstance(redis, RedisStorageProvider)
        assert (redis.url, redis.prefix, redis.expiry) == ("redis://cache:6379/3", "relay:", 120)

    def test_providers_implement_interface(self):
        assert issubclass(MemoryStorageProvider, StorageProvider)
        assert issubclass(RedisStorageProvider, StorageProvider)


@pytest.fixture
def redis_provider():
    provider = RedisStorageProvider(url="redis://localhost:6379/0", prefix="test:", expiry=0)
    provider.redis = AsyncMock()
    return provider


class TestRedisStorageProvider:
    """Redis store with the client mocked out."""

    @pytest.mark.asyncio
    async def test_save_without_expiry(self, redis_provider):
        assert await redis_provider.save_record(make_record())

        redis_provider.redis.set.assert_awaited_once_with(
            "test:a-b", '{"phase":2,"metadata":{"name":"f","size":42}}'
        )

    @pytest.mark.asyncio
    async def test_save_with_expiry(self, redis_provider):
        redis_provider.expiry = 60

        await redis_provider.save_record(make_record())

        redis_provider.redis.set.assert_awaited_once_with(
            "test:a-b", '{"phase":2,"metadata":{"name":"f","size":42}}', ex=60
        )

    @pytest.mark.asyncio
    async def test_load_record(self, redis_provider):
        redis_provider.redis.get.return_value = json.dumps({"phase": 1})

        record = await redis_provider.load_record("a-b")

        redis_provider.redis.get.assert_awaited_once_with("test:a-b")
        assert record == SessionRecord(code="a-b", phase=Phase.WAITING_METADATA)

    @pytest.mark.asyncio
    async def test_load_missing_record(self, redis_provider):
        redis_provider.redis.get.return_value = None

        assert await redis_provider.load_record("a-b") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", [
        "not json",
        '{"phase":42}',
        '{"phase":2,"metadata":{"size":-1}}',
        '{"phase":3}',
        '{"phase":1,"metadata":{"name":"f","size":1}}',
    ])
    async def test_corrupt_record_loads_as_none(self, redis_provider, raw):
        redis_provider.redis.get.return_value = raw

        assert await redis_provider.load_record("a-b") is None

    @pytest.mark.asyncio
    async def test_redis_errors_are_reported(self, redis_provider):
        redis_provider.redis.set.side_effect = RedisConnectionError("down")
        redis_provider.redis.get.side_effect = RedisConnectionError("down")
        redis_provider.redis.delete.side_effect = RedisConnectionError("down")

        assert not await redis_provider.save_record(make_record())
        assert await redis_provider.load_record("a-b") is None
        assert not await redis_provider.delete_record("a-b")

    @pytest.mark.asyncio
    async def test_delete_record(self, redis_provider):
        assert await redis_provider.delete_record("a-b")

        redis_provider.redis.delete.assert_awaited_once_with("test:a-b")

    @pytest.mark.asyncio
    async def test_close_releases_client(self, redis_provider):
        client = redis_provider.redis

        await redis_provider.close()

        client.aclose.assert_awaited_once()
        assert redis_provider.redis is None

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://env-host:6379/2")
        monkeypatch.setenv("REDIS_PREFIX", "env:")
        monkeypatch.setenv("REDIS_EXPIRY", "30")

        provider = RedisStorageProvider()

        assert provider.url == "redis://env-host:6379/2"
        assert provider.prefix == "env:"
        assert provider.expiry == 30
