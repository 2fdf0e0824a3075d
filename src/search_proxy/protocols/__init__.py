"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Swapping the cache backend or the upstream provider without touching services
- Unit testing with fake implementations
- Clear separation of concerns
"""

from .cache_store import CacheStore
from .upstream_client import UpstreamClient

__all__ = [
    "CacheStore",
    "UpstreamClient",
]
