"""Cache storage protocol.

Defines the interface for any key-value store that can hold upstream
responses with a per-entry time-to-live.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed.

    Example:
        ```python
        from search_proxy.protocols import CacheStore

        store: CacheStore = InMemoryCacheRepository(max_entries=1000)
        ```
    """

    def get(self, key: str) -> dict[str, Any] | None:
        """Fetch an unexpired entry.

        Args:
            key: The cache key

        Returns:
            The stored value, or None if absent or expired
        """
        ...

    def set(self, key: str, value: dict[str, Any], ttl: int) -> None:
        """Insert or overwrite an entry.

        Args:
            key: The cache key
            value: The value to store
            ttl: Time-to-live in seconds
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete a specific entry by key.

        Returns:
            True if deleted, False otherwise
        """
        ...

    def clear_all(self) -> int:
        """Clear all entries from the cache.

        Returns:
            Number of entries deleted
        """
        ...

    def purge_expired(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed
        """
        ...

    def count_all(self) -> int:
        """Count entries currently held (expired ones included until purged)."""
        ...

    def health_check(self) -> bool:
        """Check if the store is usable."""
        ...

    def get_stats(self) -> dict:
        """Get store statistics (implementation-specific)."""
        ...
