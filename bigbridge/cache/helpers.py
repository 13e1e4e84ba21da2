"""Cache key helpers and invalidation hooks."""

from __future__ import annotations

from bigbridge.cache.store import CacheStore, RedisCacheStore

KEY_PREFIX = "bigbridge"


def describe_key(table_name: str) -> str:
    return f"{KEY_PREFIX}:describe:{table_name}"


def invalidate_describe_cache(cache: CacheStore, table_name: str | None = None) -> int:
    """Forget cached describe-table results (after a migration, typically).

    With no table name every describe entry is dropped; only Redis supports
    pattern deletes, the memory store is cleared wholesale.
    """
    if table_name is not None:
        cache.delete(describe_key(table_name))
        return 1
    if isinstance(cache, RedisCacheStore):
        return cache.delete_pattern(f"{KEY_PREFIX}:describe:*")
    clear = getattr(cache, "clear", None)
    if clear is not None:
        clear()
    return 0
