"""
Redis Caching Layer.

Provides Redis-based cache-aside storage for list pages and dashboard
stats, the key layout shared by readers and the sweeper, and the
enumeration sweep used after a reindex.

Usage:
    from stockapp.cache import cache, CacheKeys

    cache.set_json(CacheKeys.DASHBOARD_STATS, stats, ttl=60)
    stats = cache.get_json(CacheKeys.DASHBOARD_STATS)
"""

from stockapp.cache.cache_keys import CacheKeys
from stockapp.cache.redis_client import RedisCache, cache
from stockapp.cache.sweeper import CacheSweeper, SweepBounds

__all__ = [
    "RedisCache",
    "cache",
    "CacheKeys",
    "CacheSweeper",
    "SweepBounds",
]
