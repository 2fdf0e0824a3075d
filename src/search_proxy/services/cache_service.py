"""Cache service for upstream responses.

Keys are derived from the normalized prompt and the parts of the request
configuration that change the answer, so trivially different prompts
share an entry while distinct configurations never collide.
"""

import hashlib
import json
import logging
from typing import Any

from search_proxy.entities import RequestConfiguration
from search_proxy.protocols import CacheStore

logger = logging.getLogger(__name__)


def normalize_prompt(prompt: str) -> str:
    """Lowercase and collapse all whitespace runs to single spaces."""
    return " ".join(prompt.lower().split())


def make_key(prompt: str, config: RequestConfiguration) -> str:
    """Deterministic digest of (normalized prompt, model, recency filter)."""
    material = json.dumps(
        [normalize_prompt(prompt), config.model, config.search_recency_filter],
        ensure_ascii=False,
    )
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


class CacheService:
    """Response cache orchestration.

    Depends on the CacheStore protocol, so the in-memory repository can be
    replaced by any store with the same methods.

    Example:
        ```python
        cache = CacheService(repository=InMemoryCacheRepository.create())
        cache.store(prompt, config, payload)
        cache.lookup(prompt, config)
        ```
    """

    def __init__(self, repository: CacheStore) -> None:
        self._repository = repository

    @classmethod
    def create(cls, repository: CacheStore) -> "CacheService":
        return cls(repository=repository)

    def lookup(self, prompt: str, config: RequestConfiguration) -> dict[str, Any] | None:
        """Return the cached response for this prompt and configuration, if fresh."""
        key = make_key(prompt, config)
        value = self._repository.get(key)
        if value is not None:
            logger.debug("Cache hit %s", key[:12])
        return value

    def store(self, prompt: str, config: RequestConfiguration, payload: dict[str, Any]) -> str:
        """Cache a successful response for ``config.cache_ttl`` seconds.

        Returns:
            The cache key
        """
        key = make_key(prompt, config)
        self._repository.set(key, payload, config.cache_ttl)
        return key

    def clear(self) -> int:
        """Clear all cache entries.

        Returns:
            Number of entries deleted
        """
        return self._repository.clear_all()

    def get_stats(self) -> dict:
        return self._repository.get_stats()

    def is_healthy(self) -> bool:
        return self._repository.health_check()

    @property
    def repository(self) -> CacheStore:
        """Get the underlying repository (for testing)."""
        return self._repository
