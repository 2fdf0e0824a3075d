"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field

from search_proxy.formatting import EmphasisMode


class SearchRequest(BaseModel):
    """Request DTO for POST /api/search.

    ``prompt`` is optional at the schema level so that a missing prompt is
    reported with the same envelope as a blank one; the service layer
    performs the actual check.
    """

    prompt: str | None = Field(None, description="The search prompt")
    online: bool = Field(True, description="Allow web search augmentation (recency filter)")
    format: EmphasisMode | None = Field(
        None,
        description="Also return display text with citations stripped and emphasis as 'html' or 'plain'",
    )


class DebugSearchRequest(BaseModel):
    """Request DTO for POST /api/debug-search."""

    prompt: str | None = Field(None, description="The search prompt")
    model: str | None = Field(None, description="Override the model chosen for the prompt", min_length=1)


class KeyTestRequest(BaseModel):
    """Request DTO for POST /api/key-test."""

    model: str | None = Field(None, description="Model to probe with (defaults to the simple-prompt model)")
