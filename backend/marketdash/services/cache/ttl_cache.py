"""
TTL cache for process-wide derived data.

Two caches live behind this interface: the macro-data cache (raw FRED
series, ~1 hour) and the index-level CAPE cache (~24 hours). Values must be
JSON-serializable so the Redis backend can hold them.

There is no single-flight coalescing: concurrent misses for the same key
each trigger their own upstream fetch.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class TTLCache(ABC):
    """Key/value cache whose entries expire after a fixed time-to-live."""

    def __init__(self, default_ttl: int, namespace: str = "marketdash"):
        self.default_ttl = default_ttl
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store a value for ttl seconds (default_ttl when omitted)."""
        pass

    @abstractmethod
    async def invalidate(self, key: str) -> None:
        """Drop one entry."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry in this cache's namespace."""
        pass


class MemoryTTLCache(TTLCache):
    """In-process cache. Expired entries are evicted on read."""

    def __init__(
        self,
        default_ttl: int,
        namespace: str = "marketdash",
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(default_ttl, namespace)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    async def get(self, key: str) -> Optional[Any]:
        full_key = self._key(key)
        entry = self._entries.get(full_key)
        if entry is None:
            return None

        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[full_key]
            return None
        return value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[self._key(key)] = (self._clock() + ttl, value)
        return True

    async def invalidate(self, key: str) -> None:
        self._entries.pop(self._key(key), None)

    async def clear(self) -> None:
        self._entries.clear()


class RedisTTLCache(TTLCache):
    """
    Redis-backed cache shared across worker processes.

    Falls back to an embedded MemoryTTLCache whenever Redis is unavailable
    or a command fails.
    """

    def __init__(
        self,
        default_ttl: int,
        redis_client: Optional[redis.Redis] = None,
        namespace: str = "marketdash",
    ):
        super().__init__(default_ttl, namespace)
        self._redis = redis_client
        self._fallback = MemoryTTLCache(default_ttl, namespace)

    @property
    def client(self) -> Optional[redis.Redis]:
        return self._redis

    def bind(self, redis_client: Optional[redis.Redis]) -> None:
        """Attach (or detach) the Redis client after construction."""
        self._redis = redis_client

    async def get(self, key: str) -> Optional[Any]:
        if self.client:
            try:
                value = await self.client.get(self._key(key))
                return json.loads(value) if value else None
            except Exception as e:
                logger.debug(f"Redis cache get failed for {key}: {e}")

        return await self._fallback.get(key)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        ttl = self.default_ttl if ttl is None else ttl

        if self.client:
            try:
                await self.client.set(self._key(key), json.dumps(value, default=str), ex=ttl)
                return True
            except Exception as e:
                logger.debug(f"Redis cache set failed for {key}: {e}")

        return await self._fallback.set(key, value, ttl)

    async def invalidate(self, key: str) -> None:
        if self.client:
            try:
                await self.client.delete(self._key(key))
            except Exception as e:
                logger.debug(f"Redis cache delete failed for {key}: {e}")

        await self._fallback.invalidate(key)

    async def clear(self) -> None:
        if self.client:
            try:
                keys = [k async for k in self.client.scan_iter(match=f"{self.namespace}:*")]
                if keys:
                    await self.client.delete(*keys)
            except Exception as e:
                logger.debug(f"Redis cache clear failed for {self.namespace}: {e}")

        await self._fallback.clear()
