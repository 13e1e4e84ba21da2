"""Redis JSON helpers (fail-open).

A Redis outage must never break schema derivation: reads degrade to a miss
and writes report False so the caller recomputes.
"""

from __future__ import annotations

import json
from typing import Any

import redis

from bigbridge.core.logging import get_logger
from bigbridge.core.redis_client import get_redis_client

logger = get_logger(__name__)


def _client(client: redis.Redis | None) -> redis.Redis | None:
    return client if client is not None else get_redis_client()


def get_json(key: str, client: redis.Redis | None = None) -> Any | None:
    conn = _client(client)
    if conn is None:
        return None
    try:
        raw = conn.get(key)
        if not raw:
            return None
        return json.loads(raw)
    except Exception as e:
        logger.warning("redis_get_json_failed", extra={"event": "redis_get_json_failed", "key": key, "error": str(e)})
        return None


def set_json(key: str, value: Any, ttl_seconds: int, client: redis.Redis | None = None) -> bool:
    conn = _client(client)
    if conn is None:
        return False
    try:
        conn.setex(key, int(ttl_seconds), json.dumps(value))
        return True
    except Exception as e:
        logger.warning("redis_set_json_failed", extra={"event": "redis_set_json_failed", "key": key, "error": str(e)})
        return False


def delete(key: str, client: redis.Redis | None = None) -> None:
    conn = _client(client)
    if conn is None:
        return
    try:
        conn.delete(key)
    except Exception as e:
        logger.warning("redis_delete_failed", extra={"event": "redis_delete_failed", "key": key, "error": str(e)})


def delete_pattern(pattern: str, max_delete: int = 5000, client: redis.Redis | None = None) -> int:
    """Delete keys matching a pattern using SCAN."""
    conn = _client(client)
    if conn is None:
        return 0
    deleted = 0
    try:
        pipe = conn.pipeline(transaction=False)
        for key in conn.scan_iter(match=pattern, count=500):
            pipe.delete(key)
            deleted += 1
            if deleted % 200 == 0:
                pipe.execute()
            if deleted >= max_delete:
                break
        if deleted % 200 != 0:
            pipe.execute()
    except Exception as e:
        logger.warning(
            "redis_delete_pattern_failed",
            extra={"event": "redis_delete_pattern_failed", "pattern": pattern, "error": str(e)},
        )
        return 0
    return deleted
