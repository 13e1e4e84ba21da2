"""Describe-table cache stores and helpers."""

from bigbridge.cache.store import CacheStore, MemoryCacheStore, RedisCacheStore, remember

__all__ = ["CacheStore", "MemoryCacheStore", "RedisCacheStore", "remember"]
