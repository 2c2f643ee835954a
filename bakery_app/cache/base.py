"""Cache strategy contract shared by every backend."""

from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheStrategy(ABC):
    """
    Best-effort key/value cache.

    Implementations never raise from these methods: failures are logged and
    reads degrade to a miss. Values must be JSON-serializable.
    """

    name = "base"

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Retrieve a value by key. Returns None on miss or failure."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int = 300) -> None:
        """Store a value with a TTL in seconds."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Deleting a missing key is a no-op."""

    @abstractmethod
    def delete_pattern(self, pattern: str) -> int:
        """Remove every key matching a glob pattern. Returns count removed."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the backend is reachable."""

    def close(self) -> None:
        """Release backend resources."""
