"""API routes.

Routes stay thin: each one resolves its handler from app.state and
delegates.
"""

from typing import Any

from fastapi import APIRouter, Response, status
from fastapi.responses import StreamingResponse

from search_proxy.api.dependencies import SearchHandlerDep, StatusHandlerDep
from search_proxy.dto import (
    DebugSearchRequest,
    ErrorResponse,
    HealthResponse,
    KeyTestRequest,
    SearchRequest,
    StatsResponse,
)

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse},
}

router = APIRouter()


@router.get("/")
async def root(handler: StatusHandlerDep) -> dict[str, Any]:
    """Root endpoint with API information."""
    return await handler.root()


@router.get("/api/health", response_model=HealthResponse, response_model_by_alias=True)
async def health(handler: StatusHandlerDep) -> HealthResponse:
    """Health check endpoint."""
    return await handler.health()


@router.get("/api/stats", response_model=StatsResponse)
async def stats(handler: StatusHandlerDep) -> StatsResponse:
    """Request metrics and cache statistics."""
    return await handler.stats()


@router.delete("/api/cache")
async def clear_cache(handler: StatusHandlerDep) -> dict[str, Any]:
    """Clear all entries from the response cache."""
    return await handler.clear_cache()


@router.head("/api/search")
async def search_probe() -> Response:
    """Reachability probe used by the browser client."""
    return Response(status_code=status.HTTP_200_OK)


@router.post("/api/search", responses=ERROR_RESPONSES)
async def search(request: SearchRequest, handler: SearchHandlerDep) -> dict[str, Any]:
    """Answer a search prompt, from the cache when possible."""
    return await handler.search(request)


@router.post("/api/search/stream", response_class=StreamingResponse, responses=ERROR_RESPONSES)
async def search_stream(request: SearchRequest, handler: SearchHandlerDep) -> StreamingResponse:
    """Answer a search prompt as server-sent events."""
    return await handler.stream(request)


@router.post("/api/debug-search", responses=ERROR_RESPONSES)
async def debug_search(request: DebugSearchRequest, handler: SearchHandlerDep) -> dict[str, Any]:
    """Dispatch bypassing the cache and report every key attempt."""
    return await handler.debug_search(request)


@router.post("/api/env-check")
async def env_check(handler: StatusHandlerDep) -> dict[str, Any]:
    """Show which credential slots are configured (redacted)."""
    return await handler.env_check()


@router.post("/api/key-test")
async def key_test(handler: StatusHandlerDep, request: KeyTestRequest | None = None) -> dict[str, Any]:
    """Probe every configured credential."""
    return await handler.key_test(request)
