"""Tests for the TTL cache store."""

from datetime import timedelta

import pytest
from freezegun import freeze_time

from jarvis_api.services.cache import CacheStore
from jarvis_api.services.errors import CacheError


class TestCacheTTL:
    async def test_get_before_ttl_returns_value(self) -> None:
        cache = CacheStore(max_size=10)
        with freeze_time("2025-06-01 12:00:00", real_asyncio=True) as frozen:
            await cache.set("k", {"v": 1}, ttl=timedelta(seconds=5))
            frozen.tick(timedelta(seconds=4))

            entry = await cache.get("k")

        assert entry is not None
        assert entry.data == {"v": 1}

    async def test_get_after_ttl_returns_none_and_removes_entry(self) -> None:
        cache = CacheStore(max_size=10)
        with freeze_time("2025-06-01 12:00:00", real_asyncio=True) as frozen:
            await cache.set("k", {"v": 1}, ttl=timedelta(seconds=5))
            frozen.tick(timedelta(seconds=6))

            assert await cache.get("k") is None

        assert "k" not in cache.keys()
        assert cache.size == 0

    async def test_get_does_not_extend_expiry(self) -> None:
        cache = CacheStore(max_size=10)
        with freeze_time("2025-06-01 12:00:00", real_asyncio=True) as frozen:
            await cache.set("k", "value", ttl=timedelta(seconds=5))
            frozen.tick(timedelta(seconds=3))
            assert await cache.get("k") is not None
            frozen.tick(timedelta(seconds=3))

            assert await cache.get("k") is None

    async def test_default_ttl_applies(self) -> None:
        cache = CacheStore(max_size=10, default_ttl=timedelta(seconds=30))
        with freeze_time("2025-06-01 12:00:00", real_asyncio=True) as frozen:
            await cache.set("k", "value")
            entry = await cache.get("k")
            assert entry is not None
            assert entry.expires_at - entry.stored_at == timedelta(seconds=30)

            frozen.tick(timedelta(seconds=31))
            assert await cache.get("k") is None

    async def test_non_positive_ttl_rejected(self) -> None:
        cache = CacheStore(max_size=10)
        with pytest.raises(CacheError):
            await cache.set("k", "value", ttl=timedelta(0))

    async def test_set_overwrites_existing_entry(self) -> None:
        cache = CacheStore(max_size=10)
        await cache.set("k", "old")
        await cache.set("k", "new")

        entry = await cache.get("k")
        assert entry is not None
        assert entry.data == "new"
        assert cache.size == 1


class TestCacheEviction:
    async def test_size_bounded_and_newest_retained(self) -> None:
        cache = CacheStore(max_size=5)
        for i in range(8):
            await cache.set(f"key-{i}", i)

        assert cache.size == 5
        assert cache.keys() == [f"key-{i}" for i in range(3, 8)]
        assert await cache.get("key-0") is None
        assert (await cache.get("key-7")).data == 7

    async def test_overwrite_counts_as_newest_insertion(self) -> None:
        cache = CacheStore(max_size=3)
        await cache.set("a", 1)
        await cache.set("b", 2)
        await cache.set("c", 3)
        await cache.set("a", 10)
        await cache.set("d", 4)

        assert sorted(cache.keys()) == ["a", "c", "d"]

    async def test_expired_entries_removed_before_eviction(self) -> None:
        cache = CacheStore(max_size=3)
        with freeze_time("2025-06-01 12:00:00", real_asyncio=True) as frozen:
            await cache.set("short", 1, ttl=timedelta(seconds=1))
            await cache.set("long-1", 2, ttl=timedelta(minutes=5))
            await cache.set("long-2", 3, ttl=timedelta(minutes=5))
            frozen.tick(timedelta(seconds=2))

            await cache.set("long-3", 4, ttl=timedelta(minutes=5))

        assert cache.keys() == ["long-1", "long-2", "long-3"]
        assert cache.get_stats().evictions == 0

    async def test_eviction_counted_in_stats(self) -> None:
        cache = CacheStore(max_size=2)
        for i in range(4):
            await cache.set(f"k{i}", i)

        stats = cache.get_stats()
        assert stats.evictions == 2
        assert stats.size == 2
        assert stats.max_size == 2


class TestCacheMaintenance:
    async def test_invalidate(self) -> None:
        cache = CacheStore(max_size=10)
        await cache.set("k", 1)

        assert await cache.invalidate("k") is True
        assert await cache.invalidate("k") is False
        assert await cache.get("k") is None

    async def test_clear(self) -> None:
        cache = CacheStore(max_size=10)
        await cache.set("a", 1)
        await cache.set("b", 2)

        await cache.clear()

        assert cache.size == 0

    async def test_cleanup_expired(self) -> None:
        cache = CacheStore(max_size=10)
        with freeze_time("2025-06-01 12:00:00", real_asyncio=True) as frozen:
            await cache.set("a", 1, ttl=timedelta(seconds=1))
            await cache.set("b", 2, ttl=timedelta(seconds=10))
            frozen.tick(timedelta(seconds=5))

            removed = await cache.cleanup_expired()

        assert removed == 1
        assert cache.keys() == ["b"]

    async def test_hit_rate(self) -> None:
        cache = CacheStore(max_size=10)
        await cache.set("a", 1)
        await cache.get("a")
        await cache.get("missing")

        stats = cache.get_stats()
        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.to_dict()["hit_rate"] == "50.00%"
