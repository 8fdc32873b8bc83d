"""
Tests for the Redis cache wrapper.

Tests:
- JSON get/set with TTL expiry
- Graceful degradation when Redis fails or is disabled
"""

from stockapp.cache import RedisCache
from stockapp.config import Settings


class TestJsonOperations:
    def test_set_then_get_returns_value(self, redis_cache):
        assert redis_cache.set_json("dashboard:stats", {"total_products": 3}, ttl=30)
        assert redis_cache.get_json("dashboard:stats") == {"total_products": 3}

    def test_missing_key_is_a_miss(self, redis_cache):
        assert redis_cache.get_json("products:list:page:1") is None

    def test_entry_expires_after_ttl(self, redis_cache, fake_redis):
        redis_cache.set_json("k", [1, 2, 3], ttl=60)

        fake_redis.advance(59)
        assert redis_cache.get_json("k") == [1, 2, 3]

        fake_redis.advance(1)
        assert redis_cache.get_json("k") is None

    def test_default_ttl_comes_from_settings(self, fake_redis):
        cache = RedisCache(client=fake_redis, settings=Settings(cache_default_ttl=15))
        cache.set_json("k", {"a": 1})

        assert cache.ttl("k") == 15

    def test_unparseable_entry_is_a_miss(self, redis_cache, fake_redis):
        fake_redis.set("k", b"{not json")

        assert redis_cache.get_json("k") is None

    def test_unserializable_value_is_not_stored(self, redis_cache):
        assert redis_cache.set_json("k", {"when": object()}) is False
        assert redis_cache.exists("k") is False

    def test_delete_removes_key(self, redis_cache):
        redis_cache.set_json("k", {"a": 1})

        assert redis_cache.delete("k") is True
        assert redis_cache.get_json("k") is None


class TestDegradation:
    def test_failing_store_never_raises(self, failing_cache):
        assert failing_cache.get_json("k") is None
        assert failing_cache.set_json("k", {"a": 1}) is False
        assert failing_cache.delete("k") is False
        assert failing_cache.exists("k") is False
        assert failing_cache.ttl("k") == -1

    def test_failing_store_reports_degraded(self, failing_cache):
        assert failing_cache.health_check()["status"] == "degraded"

    def test_disabled_cache_is_unavailable(self):
        cache = RedisCache(settings=Settings(cache_enabled=False))

        assert cache.initialize() is False
        assert cache.is_available is False
        assert cache.get_json("k") is None
        assert cache.set_json("k", {"a": 1}) is False

    def test_pattern_delete_is_a_no_op(self, redis_cache, fake_redis):
        redis_cache.set_json("products:list:page:1:size:10:cat:0:loc:0:search:", {"items": []})

        assert redis_cache.remove_by_pattern("products:list:*") == 0
        assert fake_redis.exists("products:list:page:1:size:10:cat:0:loc:0:search:")
