"""
Redis connection and named cache accessors.

Redis is optional: when disabled or unreachable every cache runs in
process memory.
"""

import logging
from typing import Optional

import redis.asyncio as redis

from marketdash.core.config import settings
from marketdash.services.cache.ttl_cache import MemoryTTLCache, RedisTTLCache, TTLCache

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_pool: Optional[redis.Redis] = None


async def init_redis() -> Optional[redis.Redis]:
    """
    Initialize Redis connection pool.
    Called on application startup.
    """
    global _redis_pool

    if _redis_pool is not None:
        return _redis_pool

    try:
        _redis_pool = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        # Test connection
        await _redis_pool.ping()
        logger.info(f"Redis connected: {settings.redis_url}")
        _bind_caches(_redis_pool)
        return _redis_pool
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Using in-memory caches.")
        _redis_pool = None
        return None


async def close_redis() -> None:
    """Close Redis connection pool."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.close()
        _redis_pool = None
        _bind_caches(None)
        logger.info("Redis connection closed")


def _bind_caches(client: Optional[redis.Redis]) -> None:
    for cache in (_macro_cache, _valuation_cache):
        if isinstance(cache, RedisTTLCache):
            cache.bind(client)


def _build_cache(ttl: int, namespace: str) -> TTLCache:
    if settings.use_redis_cache:
        return RedisTTLCache(ttl, redis_client=_redis_pool, namespace=namespace)
    return MemoryTTLCache(ttl, namespace=namespace)


# Singleton instances
_macro_cache: Optional[TTLCache] = None
_valuation_cache: Optional[TTLCache] = None


def get_macro_cache() -> TTLCache:
    """Cache for raw macro series (CPI, jobless claims)."""
    global _macro_cache
    if _macro_cache is None:
        _macro_cache = _build_cache(settings.macro_cache_ttl_seconds, "marketdash:macro")
    return _macro_cache


def get_valuation_cache() -> TTLCache:
    """Cache for the index-level CAPE series."""
    global _valuation_cache
    if _valuation_cache is None:
        _valuation_cache = _build_cache(settings.cape_cache_ttl_seconds, "marketdash:cape")
    return _valuation_cache


def reset_caches() -> None:
    """Forget the cache singletons so the next accessor call rebuilds them."""
    global _macro_cache, _valuation_cache
    _macro_cache = None
    _valuation_cache = None
