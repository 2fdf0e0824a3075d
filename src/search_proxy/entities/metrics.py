"""Request metrics tracked by the service context."""

import threading
from dataclasses import dataclass, field


@dataclass
class ServiceMetrics:
    """Track request and upstream metrics.

    Counters are updated from request handlers; the lock keeps the running
    average consistent if handlers ever run on worker threads.
    """

    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    upstream_calls: int = 0
    upstream_failures: int = 0
    average_latency_ms: float = 0.0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        lookups = self.cache_hits + self.cache_misses
        if lookups == 0:
            return 0.0
        return self.cache_hits / lookups

    def record_request(self, latency_ms: float, cached: bool) -> None:
        """Record a completed search request and fold its latency into the average."""
        with self._lock:
            self.total_requests += 1
            if cached:
                self.cache_hits += 1
            else:
                self.cache_misses += 1
            self.average_latency_ms += (latency_ms - self.average_latency_ms) / self.total_requests

    def record_upstream(self, attempts: int, failures: int) -> None:
        """Record upstream attempts made by one dispatch."""
        with self._lock:
            self.upstream_calls += attempts
            self.upstream_failures += failures

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary."""
        return {
            "total_requests": self.total_requests,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "hit_rate": self.hit_rate,
            "upstream_calls": self.upstream_calls,
            "upstream_failures": self.upstream_failures,
            "average_latency_ms": self.average_latency_ms,
        }
