"""Cache backends behind a single strategy interface."""

from bakery_app.cache.base import CacheStrategy
from bakery_app.cache.memory import MemoryCacheStrategy
from bakery_app.cache.redis_cache import RedisCacheStrategy
from bakery_app.core.config import Settings
from bakery_app.core.logging import logger


def create_cache_strategy(settings: Settings) -> CacheStrategy:
    """Build the configured backend, falling back to memory if Redis is down."""
    if settings.cache_backend == "redis":
        strategy = RedisCacheStrategy.from_url(settings.redis_url, default_ttl=settings.cache_default_ttl)
        if strategy.is_available():
            logger.info("Using Redis cache strategy")
            return strategy
        logger.warning("Redis unavailable at startup; falling back to in-memory cache")
        strategy.close()

    logger.info("Using in-memory cache strategy")
    return MemoryCacheStrategy(
        max_entries=settings.cache_max_entries,
        default_ttl=settings.cache_default_ttl,
    )


__all__ = ["CacheStrategy", "MemoryCacheStrategy", "RedisCacheStrategy", "create_cache_strategy"]
