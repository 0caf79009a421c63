"""Redis client configuration and cache helpers."""

import json
from typing import Any, cast

import redis
import structlog

from app.config import settings

logger = structlog.get_logger()

# Generation counters live outside the namespaces they version
VERSION_KEY_PREFIX = "cache-version"

# Global Redis client instance
_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client instance.

    Returns:
        Redis client instance
    """
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password,
            decode_responses=settings.redis_decode_responses,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )

    return _redis_client


async def check_redis_connection() -> bool:
    """
    Check if Redis connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        client = get_redis_client()
        client.ping()
        return True
    except redis.RedisError:
        return False


def close_redis_connection() -> None:
    """Close Redis connection."""
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class CacheManager:
    """
    Redis-based cache manager.

    Every operation fails soft: a Redis outage degrades to cache misses and
    skipped invalidations, it never fails the request that triggered it.
    """

    def __init__(self, redis_client: redis.Redis):
        """Initialize cache manager with Redis client."""
        self.redis = redis_client

    def get_json(self, key: str) -> Any | None:
        """
        Get JSON value from cache and deserialize.

        Args:
            key: Cache key

        Returns:
            Deserialized object or None
        """
        try:
            value = cast(str | None, self.redis.get(key))
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None

    def set_json(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """
        Serialize and set JSON value in cache.

        Args:
            key: Cache key
            value: Value to serialize and cache
            ttl: Time to live in seconds

        Returns:
            True if successful, False otherwise
        """
        try:
            json_value = json.dumps(value, default=str)
            if ttl:
                self.redis.setex(key, ttl, json_value)
            else:
                self.redis.set(key, json_value)
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning("cache_write_failed", key=key, error=str(e))
            return False

    def delete(self, key: str) -> bool:
        """Delete key from cache."""
        try:
            self.redis.delete(key)
            return True
        except redis.RedisError as e:
            logger.warning("cache_delete_failed", key=key, error=str(e))
            return False

    def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a pattern.

        Args:
            pattern: Redis key pattern (e.g., 'appointments:*')

        Returns:
            Number of keys deleted
        """
        try:
            keys = list(self.redis.scan_iter(match=pattern))
            if keys:
                return cast(int, self.redis.delete(*keys))
            return 0
        except redis.RedisError as e:
            logger.warning("cache_delete_pattern_failed", pattern=pattern, error=str(e))
            return 0

    def namespace_version(self, namespace: str) -> int | None:
        """
        Current generation of a namespace.

        Every ``invalidate`` bumps it. Entries keyed by the generation read
        before a database query can never be served after a later write.

        Returns:
            Generation number, or None if Redis is unavailable
        """
        try:
            value = self.redis.get(f"{VERSION_KEY_PREFIX}:{namespace}")
            return int(value) if value else 0
        except (redis.RedisError, ValueError) as e:
            logger.warning("cache_version_read_failed", namespace=namespace, error=str(e))
            return None

    def invalidate(self, namespace: str) -> int:
        """
        Drop every cached entry under a namespace and start a new generation.

        Args:
            namespace: Key prefix without the trailing separator (e.g. 'appointments')

        Returns:
            Number of keys deleted
        """
        try:
            self.redis.incr(f"{VERSION_KEY_PREFIX}:{namespace}")
        except redis.RedisError as e:
            logger.warning("cache_version_bump_failed", namespace=namespace, error=str(e))
        return self.delete_pattern(f"{namespace}:*")
