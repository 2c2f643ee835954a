"""Redis-backed cache strategy."""

import json
from typing import Any, Optional

import redis

from bakery_app.cache.base import CacheStrategy
from bakery_app.core.logging import logger


class RedisCacheStrategy(CacheStrategy):
    """Caches JSON values in Redis with ``SETEX``; pattern deletes use ``SCAN``."""

    name = "redis"

    def __init__(self, client: redis.Redis, default_ttl: int = 300):
        self._client = client
        self._default_ttl = default_ttl

    @classmethod
    def from_url(cls, url: str, default_ttl: int = 300) -> "RedisCacheStrategy":
        client = redis.from_url(url, decode_responses=True, socket_timeout=2, socket_connect_timeout=2)
        return cls(client, default_ttl=default_ttl)

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self._client.get(key)
        except redis.RedisError as e:
            logger.error(f"Error getting value from Redis cache: {e}", extra={"key": key})
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error(f"Error decoding Redis value: {e}", extra={"key": key})
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        expiration = self._default_ttl if ttl is None else ttl
        try:
            self._client.setex(key, expiration, json.dumps(value))
            logger.debug(f"Value cached in Redis: {key} ttl={expiration}")
        except (TypeError, ValueError) as e:
            logger.error(f"Error serializing value for Redis: {e}", extra={"key": key})
        except redis.RedisError as e:
            logger.error(f"Error setting value in Redis cache: {e}", extra={"key": key})

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
            logger.debug(f"Key deleted from Redis cache: {key}")
        except redis.RedisError as e:
            logger.error(f"Error deleting key from Redis cache: {e}", extra={"key": key})

    def delete_pattern(self, pattern: str) -> int:
        removed = 0
        try:
            batch = []
            for key in self._client.scan_iter(match=pattern, count=500):
                batch.append(key)
                if len(batch) >= 500:
                    removed += self._client.delete(*batch)
                    batch = []
            if batch:
                removed += self._client.delete(*batch)
        except redis.RedisError as e:
            logger.error(f"Error deleting pattern from Redis cache: {e}", extra={"pattern": pattern})
            return removed
        if removed:
            logger.debug(f"Keys deleted from Redis cache: pattern={pattern} count={removed}")
        return removed

    def is_available(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis availability check failed: {e}")
            return False

    def close(self) -> None:
        try:
            self._client.close()
        except redis.RedisError as e:
            logger.warning(f"Error closing Redis client: {e}")
