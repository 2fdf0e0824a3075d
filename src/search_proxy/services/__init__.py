"""Service layer for business logic.

Services depend on protocols (interfaces), not concrete implementations,
making them testable with fake stores and upstream clients.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .cache_service import CacheService, make_key, normalize_prompt
from .classifier import QueryClassifier, classify
from .config_selector import ConfigurationSelector
from .dispatcher import KeyFailoverDispatcher
from .search_service import SearchService, validate_prompt

__all__ = [
    "CacheService",
    "ConfigurationSelector",
    "KeyFailoverDispatcher",
    "QueryClassifier",
    "SearchService",
    "classify",
    "make_key",
    "normalize_prompt",
    "validate_prompt",
]
