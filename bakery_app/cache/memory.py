"""In-process TTL cache."""

import json
import threading
import time
from collections import OrderedDict
from fnmatch import fnmatchcase
from typing import Any, Dict, List, Optional

from bakery_app.cache.base import CacheStrategy
from bakery_app.core.logging import logger


class MemoryCacheStrategy(CacheStrategy):
    """In-memory cache with per-key expiry and oldest-first eviction."""

    name = "memory"

    def __init__(self, max_entries: int = 10000, default_ttl: int = 300):
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self._max_entries = max_entries
        self._default_ttl = default_ttl
        self._store: "OrderedDict[str, str]" = OrderedDict()
        self._expiry: Dict[str, float] = {}
        self._lock = threading.Lock()
        logger.info(f"MemoryCacheStrategy created: max_entries={max_entries}")

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            raw = self._store.get(key)
            if raw is None:
                logger.debug(f"Cache miss: {key}")
                return None
            if time.monotonic() > self._expiry.get(key, 0):
                self._drop(key)
                logger.debug(f"Cache expired: {key}")
                return None
        try:
            value = json.loads(raw)
        except ValueError as e:
            logger.error(f"Error decoding cached value for {key}: {e}")
            return None
        logger.debug(f"Cache hit: {key}")
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Error serializing value for {key}: {e}")
            return

        expiration = self._default_ttl if ttl is None else ttl
        with self._lock:
            if key in self._store:
                self._store.move_to_end(key)
            elif len(self._store) >= self._max_entries:
                evicted_key, _ = self._store.popitem(last=False)
                self._expiry.pop(evicted_key, None)
                logger.debug(f"Cache evicted: {evicted_key}")
            self._store[key] = raw
            self._expiry[key] = time.monotonic() + expiration
        logger.debug(f"Value cached: {key} ttl={expiration}")

    def delete(self, key: str) -> None:
        with self._lock:
            self._drop(key)
        logger.debug(f"Key deleted from cache: {key}")

    def delete_pattern(self, pattern: str) -> int:
        with self._lock:
            matching = [key for key in self._store if fnmatchcase(key, pattern)]
            for key in matching:
                self._drop(key)
        if matching:
            logger.debug(f"Keys deleted from cache: pattern={pattern} count={len(matching)}")
        return len(matching)

    def is_available(self) -> bool:
        return True

    def keys(self) -> List[str]:
        """Return all live keys."""
        now = time.monotonic()
        with self._lock:
            return [key for key in self._store if self._expiry.get(key, 0) >= now]

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._expiry.clear()

    def _drop(self, key: str) -> None:
        self._store.pop(key, None)
        self._expiry.pop(key, None)
