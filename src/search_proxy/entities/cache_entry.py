"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """A cached upstream response body.

    Attributes:
        value: The upstream JSON body as returned by the completion API
        stored_at: Clock reading when the entry was set
        expires_at: Clock reading after which the entry is treated as absent
    """

    value: dict[str, Any]
    stored_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
