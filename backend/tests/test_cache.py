import pytest

from marketdash.services.cache import MemoryTTLCache, RedisTTLCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class BrokenRedis:
    async def get(self, key):
        raise ConnectionError("redis down")

    async def set(self, key, value, ex=None):
        raise ConnectionError("redis down")

    async def delete(self, *keys):
        raise ConnectionError("redis down")


class DictRedis:
    def __init__(self):
        self.store = {}
        self.expiry = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.expiry[key] = ex

    async def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)


class TestMemoryTTLCache:

    async def test_hit_before_expiry(self):
        clock = FakeClock()
        cache = MemoryTTLCache(60, clock=clock)

        await cache.set("k", [1, 2])
        clock.now = 59.9

        assert await cache.get("k") == [1, 2]

    async def test_miss_after_expiry(self):
        clock = FakeClock()
        cache = MemoryTTLCache(60, clock=clock)

        await cache.set("k", "v")
        clock.now = 60

        assert await cache.get("k") is None

    async def test_explicit_ttl(self):
        clock = FakeClock()
        cache = MemoryTTLCache(60, clock=clock)

        await cache.set("k", "v", ttl=5)
        clock.now = 10

        assert await cache.get("k") is None

    async def test_invalidate_and_clear(self):
        cache = MemoryTTLCache(60)
        await cache.set("a", 1)
        await cache.set("b", 2)

        await cache.invalidate("a")
        assert await cache.get("a") is None
        assert await cache.get("b") == 2

        await cache.clear()
        assert await cache.get("b") is None

    async def test_namespaces_do_not_collide(self):
        macro = MemoryTTLCache(60, namespace="macro")
        cape = MemoryTTLCache(60, namespace="cape")

        await macro.set("k", "macro")

        assert await cape.get("k") is None


class TestRedisTTLCache:

    async def test_without_client_uses_memory(self):
        cache = RedisTTLCache(60)

        assert await cache.set("k", {"a": 1})
        assert await cache.get("k") == {"a": 1}

    async def test_redis_errors_fall_back_to_memory(self):
        cache = RedisTTLCache(60, redis_client=BrokenRedis())

        await cache.set("k", "v")

        assert await cache.get("k") == "v"
        await cache.invalidate("k")
        assert await cache.get("k") is None

    async def test_bind_detaches_client(self):
        cache = RedisTTLCache(60, redis_client=BrokenRedis())
        cache.bind(None)

        assert cache.client is None

    async def test_values_round_trip_through_client(self):
        client = DictRedis()
        cache = RedisTTLCache(60, redis_client=client, namespace="cape")

        await cache.set("index", [{"date": "2024-01-01", "value": 25.0}], ttl=30)

        assert cache.client is client
        assert client.expiry == {"cape:index": 30}
        assert await cache.get("index") == [{"date": "2024-01-01", "value": 25.0}]
