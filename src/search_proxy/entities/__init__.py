"""Domain entities for internal representation.

These are pure dataclasses and enums used internally by services and
repositories. They are NOT used for API contracts - use DTOs from the
dto package for that.
"""

from .cache_entry import CacheEntryEntity
from .complexity import ComplexityClass
from .credential import Credential
from .dispatch import DispatchAttempt, DispatchResult, FailoverPolicy
from .metrics import ServiceMetrics
from .request_config import RequestConfiguration
from .search_outcome import SearchOutcome

__all__ = [
    "CacheEntryEntity",
    "ComplexityClass",
    "Credential",
    "DispatchAttempt",
    "DispatchResult",
    "FailoverPolicy",
    "RequestConfiguration",
    "SearchOutcome",
    "ServiceMetrics",
]
