"""Resolved upstream request configuration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestConfiguration:
    """Settings applied to a single upstream completion request.

    Produced by the configuration selector and consumed by both the
    dispatcher (payload) and the cache (key and TTL).

    Attributes:
        model: Opaque upstream model identifier
        max_tokens: Output token budget
        temperature: Sampling temperature
        cache_ttl: How long a successful response stays cached, in seconds
        search_recency_filter: Web search window ("day", "week", "month") or None
    """

    model: str
    max_tokens: int
    temperature: float
    cache_ttl: int
    search_recency_filter: str | None = None
