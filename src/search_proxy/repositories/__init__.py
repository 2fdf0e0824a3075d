"""Repository layer for data access.

This layer abstracts external dependencies (the completion API, the cache
backing store) behind protocol-based interfaces. The repositories are
protocol-based (structural typing), not inheritance-based.
"""

from search_proxy.protocols import CacheStore, UpstreamClient

from .completion_client import HttpxCompletionClient
from .memory_cache_repository import InMemoryCacheRepository

__all__ = [
    "CacheStore",
    "UpstreamClient",
    "HttpxCompletionClient",
    "InMemoryCacheRepository",
]
