"""
CacheStore - Async-compatible response cache with TTL and bounded size.

Features:
- Memory-based store keyed by request fingerprint
- TTL (Time To Live) per entry, no sliding expiration
- Expiry-first cleanup after every write, then oldest-insertion eviction
- Lock-guarded async operations
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Generic, TypeVar

from loguru import logger

from jarvis_api.services.errors import CacheError

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with metadata."""

    key: str
    data: T
    stored_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if entry is past its TTL."""
        return (now or datetime.now()) > self.expires_at


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    size: int = 0
    max_size: int = 0
    oldest_entry: datetime | None = None
    newest_entry: datetime | None = None

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "size": self.size,
            "max_size": self.max_size,
            "hit_rate": f"{self.hit_rate:.2%}",
            "oldest_entry": (
                self.oldest_entry.isoformat() if self.oldest_entry else None
            ),
            "newest_entry": (
                self.newest_entry.isoformat() if self.newest_entry else None
            ),
        }


class CacheStore:
    """
    Response cache owned by a single ResilientClient.

    Usage:
        cache = CacheStore(max_size=50, default_ttl=timedelta(minutes=5))

        entry = await cache.get("github-stats")
        if entry:
            return entry.data

        data = await fetch_data()
        await cache.set("github-stats", data, ttl=timedelta(minutes=3))
    """

    def __init__(
        self,
        max_size: int = 100,
        default_ttl: timedelta = timedelta(minutes=5),
        debug: bool = False,
    ):
        if max_size < 1:
            raise CacheError(f"max_size must be positive, got {max_size}")
        self._memory: dict[str, CacheEntry[Any]] = {}
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._debug = debug
        self._lock = asyncio.Lock()
        self._stats = CacheStats()

    @property
    def size(self) -> int:
        return len(self._memory)

    @property
    def max_size(self) -> int:
        return self._max_size

    def keys(self) -> list[str]:
        """Keys currently held, oldest insertion first (expired ones included)."""
        return list(self._memory.keys())

    async def get(self, key: str) -> CacheEntry[Any] | None:
        """
        Get entry from cache.

        Returns the entry if present and unexpired. An expired entry is
        deleted on the spot and None is returned.
        """
        async with self._lock:
            entry = self._memory.get(key)
            if entry is None:
                self._stats.misses += 1
                self._log(f"MISS: {key[:50]}")
                return None

            if entry.is_expired():
                del self._memory[key]
                self._stats.misses += 1
                self._stats.expirations += 1
                self._log(f"EXPIRED: {key[:50]}")
                return None

            self._stats.hits += 1
            self._log(f"HIT: {key[:50]}")
            return entry

    async def set(
        self,
        key: str,
        data: Any,
        ttl: timedelta | None = None,
    ) -> None:
        """
        Set value in cache.

        Args:
            key: Cache key
            data: Data to cache
            ttl: Time to live (uses default if not specified)

        Raises:
            CacheError: If the TTL is not positive
        """
        ttl = ttl if ttl is not None else self._default_ttl
        if ttl <= timedelta(0):
            raise CacheError(f"Cache TTL must be positive, got {ttl}")

        now = datetime.now()
        entry = CacheEntry(key=key, data=data, stored_at=now, expires_at=now + ttl)

        async with self._lock:
            # Re-insert so an overwritten key counts as the newest insertion
            self._memory.pop(key, None)
            self._memory[key] = entry
            self._log(f"SET: {key[:50]} (TTL: {ttl.total_seconds()}s)")
            self._cleanup(now)

    async def invalidate(self, key: str) -> bool:
        """Delete a specific key from cache."""
        async with self._lock:
            if key in self._memory:
                del self._memory[key]
                self._log(f"INVALIDATE: {key[:50]}")
                return True
            return False

    async def clear(self) -> None:
        """Clear all cache entries."""
        async with self._lock:
            count = len(self._memory)
            self._memory.clear()
            self._log(f"CLEAR: {count} entries removed")

    async def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns count of removed entries."""
        async with self._lock:
            return self._remove_expired(datetime.now())

    def _cleanup(self, now: datetime) -> None:
        """Drop expired entries, then evict oldest until within max_size."""
        self._remove_expired(now)

        overflow = len(self._memory) - self._max_size
        if overflow <= 0:
            return

        # sorted() is stable, so equal timestamps keep insertion order
        oldest = sorted(self._memory.values(), key=lambda e: e.stored_at)[:overflow]
        for entry in oldest:
            del self._memory[entry.key]
            self._stats.evictions += 1
            self._log(f"EVICT: {entry.key[:50]}")

    def _remove_expired(self, now: datetime) -> int:
        expired_keys = [k for k, v in self._memory.items() if v.is_expired(now)]
        for key in expired_keys:
            del self._memory[key]

        if expired_keys:
            self._stats.expirations += len(expired_keys)
            self._log(f"CLEANUP: {len(expired_keys)} expired entries removed")

        return len(expired_keys)

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        self._stats.size = len(self._memory)
        self._stats.max_size = self._max_size
        stamps = [e.stored_at for e in self._memory.values()]
        self._stats.oldest_entry = min(stamps) if stamps else None
        self._stats.newest_entry = max(stamps) if stamps else None
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[CacheStore] {message}")
