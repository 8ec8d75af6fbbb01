# ==============================================================================
# Cache Abstract Base Class
# ==============================================================================
"""
Key-value store with TTLs, used to hold computed reports.

Reports are derived data: losing an entry only costs a recomputation, so
callers treat every cache error as a miss.
"""

from abc import ABC, abstractmethod


class Cache(ABC):
    """
    Stores JSON-serializable dict payloads under string keys.

    Implementations handle serialization and expiry.
    """

    @abstractmethod
    def get(self, key: str) -> dict | None:
        """Return the payload stored under *key*, or None."""
        ...

    @abstractmethod
    def set(self, key: str, value: dict, ttl_seconds: int | None = None) -> None:
        """
        Store a payload.

        Args:
            key: Cache key
            value: JSON-serializable dict
            ttl_seconds: Expiry in seconds; None keeps the entry until deleted
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete *key*. Returns True if it existed."""
        ...

    @abstractmethod
    def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern. Returns the count removed."""
        ...

    def ping(self) -> bool:
        """True if the backing store is reachable."""
        return True

    def close(self) -> None:
        """Release connections."""
