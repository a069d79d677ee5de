"""
Cache module for MarketDash.

Provides TTL caches for macro data and index-level CAPE, backed by
Redis when enabled and process memory otherwise.
"""

from marketdash.services.cache.ttl_cache import (
    TTLCache,
    MemoryTTLCache,
    RedisTTLCache,
)
from marketdash.services.cache.redis_client import (
    get_macro_cache,
    get_valuation_cache,
    reset_caches,
    init_redis,
    close_redis,
)

__all__ = [
    "TTLCache",
    "MemoryTTLCache",
    "RedisTTLCache",
    "get_macro_cache",
    "get_valuation_cache",
    "reset_caches",
    "init_redis",
    "close_redis",
]
