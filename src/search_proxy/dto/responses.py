"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchMetadata(CamelModel):
    """The ``metadata`` object added to every successful search response."""

    response_time: float = Field(..., description="Handling time in milliseconds")
    timestamp: str = Field(..., description="ISO 8601 completion time")
    online: bool = Field(..., description="Whether web search augmentation was allowed")
    complexity: str = Field(..., description="Complexity class assigned to the prompt")
    model: str = Field(..., description="Model the request was resolved to")
    search_recency_filter: str | None = Field(None, description="Search window sent upstream")
    cached: bool = Field(..., description="Whether the response came from the cache")
    credential: str | None = Field(None, description="Redacted key that served a fresh response")
    version: str = Field(..., description="Proxy version")
    formatted: str | None = Field(None, description="Display text, when requested")


class ErrorResponse(BaseModel):
    """Error envelope used by every failing endpoint."""

    error: str = Field(..., description="Short error title")
    details: str = Field(..., description="Human-readable explanation")
    timestamp: str = Field(..., description="ISO 8601 time of the failure")


class HealthResponse(CamelModel):
    """Response DTO for GET /api/health. Never carries full credentials."""

    status: str = Field(..., description="'healthy' or 'degraded'")
    timestamp: str
    version: str
    uptime: float = Field(..., description="Seconds since startup")
    available_keys: int = Field(..., ge=0)
    key_previews: list[str] = Field(default_factory=list)
    models: dict[str, str] = Field(default_factory=dict, description="Model per complexity class")
    cache_healthy: bool


class StatsResponse(BaseModel):
    """Response DTO for GET /api/stats."""

    requests: dict[str, Any]
    cache: dict[str, Any]
