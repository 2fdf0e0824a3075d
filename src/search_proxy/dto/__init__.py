"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract. Response models
serialize with camelCase aliases to match what the browser client reads.

Internal domain logic should use entities from the entities package.
"""

from .requests import DebugSearchRequest, KeyTestRequest, SearchRequest
from .responses import (
    ErrorResponse,
    HealthResponse,
    SearchMetadata,
    StatsResponse,
)

__all__ = [
    "SearchRequest",
    "DebugSearchRequest",
    "KeyTestRequest",
    "SearchMetadata",
    "ErrorResponse",
    "HealthResponse",
    "StatsResponse",
]
