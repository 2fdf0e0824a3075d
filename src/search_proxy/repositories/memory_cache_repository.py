"""In-memory implementation of CacheStore.

Entries live in an insertion-ordered dict guarded by a lock. Nothing
survives a process restart.

Eviction policy: when a new key would push the store past ``max_entries``,
expired entries are purged first; if the store is still full, the entry
that was set longest ago is evicted. Overwriting a key counts as setting
it again and moves it to the newest position.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from search_proxy.config import get_settings
from search_proxy.entities import CacheEntryEntity

logger = logging.getLogger(__name__)


class InMemoryCacheRepository:
    """Bounded TTL cache satisfying the CacheStore protocol.

    Example:
        ```python
        store = InMemoryCacheRepository.create(max_entries=100)
        store.set("key", {"choices": []}, ttl=60)
        store.get("key")
        ```
    """

    def __init__(
        self,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory cache repository.

        Args:
            max_entries: Maximum number of entries. Defaults to settings.
            clock: Monotonic time source in seconds (injectable for tests).
        """
        self._max_entries = max_entries or get_settings().cache_max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntryEntity] = OrderedDict()
        self._lock = threading.Lock()
        self._evictions = 0
        self._expirations = 0

    @classmethod
    def create(
        cls,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> "InMemoryCacheRepository":
        """Factory method to create InMemoryCacheRepository with defaults."""
        return cls(max_entries=max_entries, clock=clock)

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._expirations += 1
                return None
            return entry.value

    def set(self, key: str, value: dict[str, Any], ttl: int) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")

        with self._lock:
            now = self._clock()
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._max_entries:
                self._purge_expired_locked(now)
                while len(self._entries) >= self._max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    self._evictions += 1
                    logger.debug("Evicted cache entry %s", evicted[:12])

            self._entries[key] = CacheEntryEntity(
                value=value,
                stored_at=now,
                expires_at=now + ttl,
            )

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear_all(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def purge_expired(self) -> int:
        with self._lock:
            return self._purge_expired_locked(self._clock())

    def _purge_expired_locked(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        self._expirations += len(expired)
        return len(expired)

    def count_all(self) -> int:
        with self._lock:
            return len(self._entries)

    def health_check(self) -> bool:
        return True

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "backend": "memory",
                "total_entries": len(self._entries),
                "max_entries": self._max_entries,
                "evictions": self._evictions,
                "expirations": self._expirations,
            }
