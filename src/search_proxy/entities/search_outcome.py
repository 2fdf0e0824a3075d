"""Search outcome domain entity."""

from dataclasses import dataclass
from typing import Any

from .complexity import ComplexityClass
from .request_config import RequestConfiguration


@dataclass(frozen=True)
class SearchOutcome:
    """Result of one search request, before HTTP serialization.

    Attributes:
        payload: Upstream JSON body (fresh or cached)
        complexity: Class assigned to the prompt
        config: Configuration the request was resolved to
        cached: Whether the payload came from the cache
        credential: Preview of the credential that served a fresh payload
        latency_ms: Total handling time
    """

    payload: dict[str, Any]
    complexity: ComplexityClass
    config: RequestConfiguration
    cached: bool
    credential: str | None
    latency_ms: float
