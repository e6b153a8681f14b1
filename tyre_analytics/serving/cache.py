"""
Redis Cache Module

Response cache for the analytics API:
- Connection pooling
- JSON serialization of report payloads
- Namespaced keys with per-namespace TTL

Reports are served uncached when Redis is disabled, not initialized or
failing; a cache problem never fails a report.
"""

import json
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, Union

import structlog
from pydantic_core import to_jsonable_python
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from tyre_analytics.config import get_settings

logger = structlog.get_logger(__name__)

# Global Redis connection
_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None


async def init_redis() -> Optional[Redis]:
    """Initialize the Redis connection pool; returns None when caching is disabled."""
    global _redis_pool, _redis_client

    settings = get_settings()
    if not settings.redis.enabled:
        logger.info("Redis cache disabled")
        return None

    if _redis_client is not None:
        return _redis_client

    _redis_pool = ConnectionPool.from_url(
        settings.redis.get_url(),
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
        decode_responses=True,
    )
    client = Redis(connection_pool=_redis_pool)

    # Test connection
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        logger.error("Redis connection failed", error=str(e))
        await _redis_pool.disconnect()
        _redis_pool = None
        raise

    _redis_client = client
    logger.info("Redis connection established")
    return _redis_client


async def close_redis() -> None:
    """Close Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None

    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None

    logger.info("Redis connection closed")


def get_redis() -> Redis:
    """Get Redis client instance"""
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


def cache_available() -> bool:
    return _redis_client is not None


async def cache_get(key: str) -> Optional[Any]:
    """
    Get value from cache.

    Returns:
        Cached value, or None if missing or the cache is unavailable
    """
    if not cache_available():
        return None

    try:
        value = await get_redis().get(key)
    except RedisError as e:
        logger.warning("Cache read failed", key=key, error=str(e))
        return None

    if value is None:
        return None

    try:
        return json.loads(value)
    except json.JSONDecodeError:
        logger.warning("Discarding undecodable cache entry", key=key)
        return None


async def cache_set(
    key: str,
    value: Any,
    ttl: Optional[Union[int, timedelta]] = None,
) -> bool:
    """
    Set value in cache.

    Args:
        key: Cache key
        value: Value to cache; pydantic models and dates are converted to JSON
        ttl: Time-to-live in seconds or timedelta

    Returns:
        True if stored
    """
    if not cache_available():
        return False

    try:
        serialized = json.dumps(to_jsonable_python(value))
    except (TypeError, ValueError) as e:
        logger.warning("Failed to serialize value for cache", key=key, error=str(e))
        return False

    if isinstance(ttl, timedelta):
        ttl = int(ttl.total_seconds())

    try:
        if ttl:
            await get_redis().setex(key, ttl, serialized)
        else:
            await get_redis().set(key, serialized)
    except RedisError as e:
        logger.warning("Cache write failed", key=key, error=str(e))
        return False

    return True


async def cache_delete_pattern(pattern: str) -> int:
    """Delete all keys matching pattern"""
    if not cache_available():
        return 0

    client = get_redis()
    keys = [key async for key in client.scan_iter(match=pattern)]
    if not keys:
        return 0
    return await client.delete(*keys)


class CacheManager:
    """
    Cache manager with namespace support.

    Example:
        cache = CacheManager("analytics", default_ttl=300)
        overview = await cache.get_or_set("overview:30d", compute_overview)
    """

    def __init__(self, namespace: str, default_ttl: int = 300):
        self.namespace = namespace
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        return await cache_get(self._key(key))

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        return await cache_set(self._key(key), value, ttl or self.default_ttl)

    async def invalidate_all(self) -> int:
        """Invalidate all keys in namespace"""
        return await cache_delete_pattern(f"{self.namespace}:*")

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: Optional[int] = None,
    ) -> Any:
        """
        Get from cache or compute and cache.

        A cache hit returns the JSON-decoded payload; a miss returns the
        factory's result unchanged.
        """
        value = await self.get(key)
        if value is not None:
            logger.debug("Cache hit", namespace=self.namespace, key=key)
            return value

        value = await factory()
        await self.set(key, value, ttl)
        return value


# Pre-configured cache managers
analytics_cache = CacheManager("analytics", default_ttl=300)
intelligence_cache = CacheManager("intelligence", default_ttl=900)
