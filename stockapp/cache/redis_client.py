"""
Redis client with connection pooling.

Provides a Redis cache with:
- Connection pooling (max 50 connections)
- JSON serialization for list pages and dashboard stats
- Graceful degradation when Redis is unavailable: every failure is
  logged and turned into a miss, ``False`` or a no-op
"""

import json
from typing import Any, Optional

import redis
from redis.exceptions import RedisError

from stockapp.config import Settings, get_settings
from stockapp.logging import get_logger

logger = get_logger("cache")


class RedisCache:
    """
    Redis cache client with connection pooling.

    Features:
    - Lazy connection pool creation on first use
    - JSON serialization
    - Graceful fallback when Redis is unavailable

    Usage:
        from stockapp.cache import cache

        cache.set_json("products:list:page:1:size:10:cat:0:loc:0:search:", page, ttl=60)
        data = cache.get_json("products:list:page:1:size:10:cat:0:loc:0:search:")

    A pre-built client (e.g. an in-memory test double) can be passed in;
    it is then used as-is and no pool is created.
    """

    def __init__(self, client: Optional["redis.Redis"] = None, settings: Optional[Settings] = None):
        self._settings = settings
        self._pool: Optional[redis.ConnectionPool] = None
        self._client = client
        self._initialized = client is not None
        self._available = client is not None

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @property
    def default_ttl(self) -> int:
        return self.settings.cache_default_ttl

    def initialize(self, force: bool = False) -> bool:
        """
        Initialize Redis connection pool.

        Args:
            force: Force re-initialization even if already initialized

        Returns:
            True if Redis is available and connected, False otherwise
        """
        if self._initialized and not force:
            return self._available

        settings = self.settings
        if not settings.cache_enabled:
            logger.info("cache_disabled")
            self._available = False
            self._initialized = True
            return False

        try:
            self._pool = redis.ConnectionPool(
                host=settings.redis_host,
                port=settings.redis_port,
                db=settings.redis_db,
                password=settings.redis_password,
                max_connections=50,
                socket_timeout=5,
                socket_connect_timeout=5,
                decode_responses=False,  # We handle encoding ourselves
            )

            client = redis.Redis(connection_pool=self._pool)
            client.ping()

            self._client = client
            self._available = True
            self._initialized = True
            logger.info("redis_connected", host=settings.redis_host, port=settings.redis_port)
            return True

        except RedisError as e:
            logger.warning("redis_connection_failed", error=str(e))
            self._available = False
            self._initialized = True
            return False

    @property
    def client(self) -> Optional["redis.Redis"]:
        """Get Redis client from pool."""
        if not self._initialized:
            self.initialize()

        if not self._available:
            return None

        return self._client

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def is_available(self) -> bool:
        """Check if Redis is available."""
        if not self._initialized:
            self.initialize()
        return self._available

    # =========================================================================
    # JSON Operations
    # =========================================================================

    def get_json(self, key: str) -> dict | list | None:
        """
        Get JSON data from cache.

        Args:
            key: Cache key

        Returns:
            Parsed JSON data or None if not found/unavailable
        """
        client = self.client
        if client is None:
            return None

        try:
            data = client.get(key)
            if data is None:
                logger.debug("cache_miss", key=key)
                return None
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            parsed = json.loads(data)
            if not isinstance(parsed, (dict, list)):
                return None
            logger.debug("cache_hit", key=key)
            return parsed
        except (RedisError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("cache_get_error", key=key, error=str(e))
            return None

    def set_json(
        self,
        key: str,
        value: dict | list,
        ttl: int | None = None,
    ) -> bool:
        """
        Store JSON data in cache.

        Args:
            key: Cache key
            value: Data to cache (must be JSON-serializable)
            ttl: Time-to-live in seconds (default: CACHE_DEFAULT_TTL)

        Returns:
            True if cached successfully, False otherwise
        """
        client = self.client
        if client is None:
            return False

        ttl = ttl if ttl is not None else self.default_ttl
        try:
            serialized = json.dumps(value).encode("utf-8")
            client.setex(key, ttl, serialized)
            logger.debug("cache_set", key=key, ttl=ttl)
            return True
        except (TypeError, ValueError, RedisError) as e:
            logger.warning("cache_set_error", key=key, error=str(e))
            return False

    # =========================================================================
    # Key Operations
    # =========================================================================

    def delete(self, key: str) -> bool:
        """Delete a key from cache."""
        client = self.client
        if client is None:
            return False

        try:
            client.delete(key)
            logger.debug("cache_invalidated", key=key)
            return True
        except RedisError as e:
            logger.warning("cache_delete_error", key=key, error=str(e))
            return False

    def remove_by_pattern(self, pattern: str) -> int:
        """
        Pattern deletes are not supported; this logs and removes nothing.

        Bulk invalidation goes through :class:`stockapp.cache.sweeper.CacheSweeper`.
        """
        logger.warning("cache_pattern_delete_unsupported", pattern=pattern)
        return 0

    def exists(self, key: str) -> bool:
        """Check if a key exists in cache."""
        client = self.client
        if client is None:
            return False

        try:
            return bool(client.exists(key))
        except RedisError as e:
            logger.warning("cache_exists_error", key=key, error=str(e))
            return False

    def ttl(self, key: str) -> int:
        """Get remaining TTL for a key in seconds."""
        client = self.client
        if client is None:
            return -1

        try:
            result = client.ttl(key)
            return int(result) if result is not None else -1
        except RedisError:
            return -1

    # =========================================================================
    # Health Check
    # =========================================================================

    def health_check(self) -> dict[str, Any]:
        """
        Get cache health status.

        Returns:
            Dictionary with health information
        """
        status: dict[str, Any] = {
            "available": self._available,
            "initialized": self._initialized,
        }

        client = self.client
        if client is None:
            status["status"] = "unavailable"
            return status

        try:
            client.ping()
            status["status"] = "healthy"
        except RedisError:
            status["status"] = "degraded"

        return status


# Global instance
cache = RedisCache()
