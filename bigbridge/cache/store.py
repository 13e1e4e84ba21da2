"""Cache store abstraction injected into the schema deriver.

Two implementations:
- RedisCacheStore: shared across processes, JSON-encoded, fail-open.
- MemoryCacheStore: per-process TTL dict, used when Redis is disabled and in tests.

Values must be JSON-serializable so both stores behave the same.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import redis

from bigbridge.cache import redis as redis_cache
from bigbridge.core.logging import get_logger
from bigbridge.core.redis_client import get_redis_client

logger = get_logger(__name__)


@runtime_checkable
class CacheStore(Protocol):
    """Minimal get/set/TTL store."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool: ...

    def delete(self, key: str) -> None: ...


def remember(cache: CacheStore, key: str, ttl_seconds: int, compute: Callable[[], Any]) -> Any:
    """Return the cached value for key, computing and storing it on a miss."""
    cached = cache.get(key)
    if cached is not None:
        logger.debug("cache_hit", extra={"event": "cache_hit", "key": key})
        return cached

    value = compute()
    cache.set(key, value, ttl_seconds)
    logger.debug("cache_miss", extra={"event": "cache_miss", "key": key, "ttl_seconds": ttl_seconds})
    return value


class MemoryCacheStore:
    """Thread-safe in-process TTL cache."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        with self._lock:
            self._data[key] = (self._clock() + ttl_seconds, value)
        return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class RedisCacheStore:
    """Redis-backed store; a missing or failing Redis behaves as a cache miss."""

    def __init__(self, client: redis.Redis | None = None):
        self._client = client

    def get(self, key: str) -> Any | None:
        return redis_cache.get_json(key, client=self._client)

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        return redis_cache.set_json(key, value, ttl_seconds, client=self._client)

    def delete(self, key: str) -> None:
        redis_cache.delete(key, client=self._client)

    def delete_pattern(self, pattern: str) -> int:
        return redis_cache.delete_pattern(pattern, client=self._client)


_default_store: CacheStore | None = None


def get_default_store() -> CacheStore:
    """Redis when it is configured and reachable, memory otherwise."""
    global _default_store

    if _default_store is None:
        client = get_redis_client()
        if client is not None:
            _default_store = RedisCacheStore(client)
        else:
            _default_store = MemoryCacheStore()
        logger.info(
            "cache_store_selected",
            extra={"event": "cache_store_selected", "store": type(_default_store).__name__},
        )
    return _default_store


def reset_default_store() -> None:
    global _default_store
    _default_store = None
