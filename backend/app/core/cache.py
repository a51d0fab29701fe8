"""Redis-based cache for schedule snapshots."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional

import redis
from redis.exceptions import ConnectionError, RedisError

from app.core.config import settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


class _InMemoryCache:
    """Fallback in-memory cache when Redis is unavailable or disabled."""

    def __init__(self):
        self._cache: dict[str, tuple[Any, Optional[float]]] = {}

    def get(self, key: str) -> Optional[Any]:
        item = self._cache.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and time.monotonic() >= expires_at:
            self._cache.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any, ex: Optional[int] = None) -> None:
        self._cache[key] = (value, time.monotonic() + ex if ex else None)

    def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()


def _get_redis_client() -> redis.Redis | _InMemoryCache:
    """Get or create the Redis client, falling back to memory."""
    global _redis_client

    if not settings.REDIS_CACHE_ENABLED:
        return _InMemoryCache()

    if _redis_client is None:
        try:
            pool = redis.ConnectionPool.from_url(
                settings.REDIS_CACHE_URL,
                max_connections=50,
                decode_responses=True,
            )
            client = redis.Redis(connection_pool=pool)
            client.ping()
            _redis_client = client
            logger.info(f"Redis cache connected: {settings.REDIS_CACHE_URL}")
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Failed to connect to Redis cache: {e}. Using fallback in-memory cache.")
            return _InMemoryCache()

    return _redis_client


class RedisCache:
    """JSON cache with TTL support."""

    def __init__(self, default_ttl: int = 300):
        self.default_ttl = default_ttl
        self._client: redis.Redis | _InMemoryCache | None = None

    @property
    def client(self) -> redis.Redis | _InMemoryCache:
        # Connect lazily so importing the app never blocks on Redis
        if self._client is None:
            self._client = _get_redis_client()
        return self._client

    def get(self, key: str) -> Optional[Any]:
        try:
            if isinstance(self.client, _InMemoryCache):
                return self.client.get(key)

            value = self.client.get(key)
            if value is None:
                return None
            try:
                return json.loads(value)
            except (json.JSONDecodeError, TypeError):
                return value
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache get error for key {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        try:
            ttl = ttl or self.default_ttl
            if isinstance(self.client, _InMemoryCache):
                self.client.set(key, value, ex=ttl)
                return
            serialized = json.dumps(value) if isinstance(value, (dict, list)) else str(value)
            self.client.setex(key, ttl, serialized)
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache set error for key {key}: {e}")

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache delete error for key {key}: {e}")

    def clear(self) -> None:
        try:
            if isinstance(self.client, _InMemoryCache):
                self.client.clear()
                return
            self.client.flushdb()
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache clear error: {e}")


_cache = RedisCache(default_ttl=settings.SCHEDULE_CACHE_TTL)


def get_cache() -> RedisCache:
    """Get global cache instance."""
    return _cache


def schedule_cache_key(user_id: str) -> str:
    return f"schedule:{user_id}"


def invalidate_schedule_cache(user_id: str | None) -> None:
    """Drop the cached schedule of a user after a save."""
    if user_id:
        _cache.delete(schedule_cache_key(user_id))
        logger.debug(f"Invalidated schedule cache for user {user_id}")
