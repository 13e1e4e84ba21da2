"""Redis client module with connection pooling."""

import redis
from redis.exceptions import ConnectionError, RedisError

from bigbridge.core.config import settings
from bigbridge.core.logging import get_logger

logger = get_logger(__name__)

# Global Redis client instance
_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis | None:
    """Get Redis client instance. Returns None if Redis is disabled or unavailable."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        if not settings.REDIS_URL:
            if settings.REDIS_REQUIRED:
                raise ValueError("REDIS_URL must be set when REDIS_REQUIRED=true")
            logger.warning("Redis enabled but REDIS_URL not set. Describe cache falls back to memory.")
            return None

        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=1,
                socket_timeout=1,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            _redis_client.ping()
            logger.info("Redis connection established")
        except (ConnectionError, RedisError) as e:
            if settings.REDIS_REQUIRED:
                raise ConnectionError(
                    f"Redis connection failed and REDIS_REQUIRED=true: {e}"
                ) from e
            logger.warning(f"Redis connection failed (non-fatal): {e}")
            _redis_client = None

    return _redis_client


def reset_redis_client() -> None:
    """Drop the cached client (tests, settings changes)."""
    global _redis_client
    _redis_client = None

