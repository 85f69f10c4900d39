"""
In-memory caching for compiled rule tables, so each table is parsed and
compiled once per process instead of once per user agent.
"""
import threading
from typing import Any, Optional, Protocol, runtime_checkable
from dataclasses import dataclass
from datetime import datetime, timedelta


@runtime_checkable
class CacheInterface(Protocol):
    """Any key/value store usable as the pattern cache.

    ``get`` returns None on a miss. No eviction or invalidation is required.
    """

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


@dataclass
class CacheEntry:
    """A single cache entry with optional expiration."""
    value: Any
    expires_at: Optional[datetime] = None


class MemoryCache:
    """
    Simple thread-safe in-memory cache.

    Entries never expire unless a TTL is given, since compiled rule tables
    stay valid for the whole process lifetime.
    """

    def __init__(self, default_ttl_seconds: Optional[int] = None):
        """
        Initialize the cache.

        Args:
            default_ttl_seconds: Default time-to-live in seconds (default: no expiry)
        """
        self._cache: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.default_ttl = default_ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        """
        Get a value from the cache.

        Args:
            key: The cache key

        Returns:
            The cached value or None if not found or expired
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            if entry.expires_at is not None and datetime.now() > entry.expires_at:
                del self._cache[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """
        Set a value in the cache. Last write wins.

        Args:
            key: The cache key
            value: The value to cache
            ttl_seconds: Time-to-live in seconds (uses default if not specified)
        """
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl
        expires_at = datetime.now() + timedelta(seconds=ttl) if ttl is not None else None
        with self._lock:
            self._cache[key] = CacheEntry(value=value, expires_at=expires_at)

    def invalidate(self, key: str) -> None:
        """Remove a specific key from the cache."""
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        """Get the current number of cached entries."""
        with self._lock:
            return len(self._cache)


# Global cache instance
_global_cache = MemoryCache()


def get_cache() -> MemoryCache:
    """Get the process-wide default cache instance."""
    return _global_cache
