"""HTTP handlers for search operations."""

import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

from fastapi.responses import StreamingResponse

from search_proxy.config import VERSION
from search_proxy.context import ServiceContext
from search_proxy.dto import DebugSearchRequest, SearchMetadata, SearchRequest
from search_proxy.errors import SearchProxyError
from search_proxy.formatting import display_text
from search_proxy.utils import utc_timestamp

logger = logging.getLogger(__name__)

STREAM_DONE = "data: [DONE]\n\n"


def _sse(data: dict[str, Any], event: str | None = None) -> str:
    prefix = f"event: {event}\n" if event else ""
    return f"{prefix}data: {json.dumps(data, ensure_ascii=False)}\n\n"


class SearchHandler:
    """HTTP handlers for the search endpoints.

    Example:
        ```python
        handler = SearchHandler(context)

        @app.post("/api/search")
        async def search(request: SearchRequest):
            return await handler.search(request)
        ```
    """

    def __init__(self, context: ServiceContext) -> None:
        self._context = context
        self._search = context.search

    async def search(self, request: SearchRequest) -> dict[str, Any]:
        """Handle POST /api/search requests.

        Returns:
            The upstream response body with an added ``metadata`` object

        Raises:
            SearchProxyError: Rendered as an error envelope by the app
        """
        outcome = await self._search.search(request.prompt, online=request.online)

        metadata = SearchMetadata(
            response_time=round(outcome.latency_ms, 1),
            timestamp=utc_timestamp(),
            online=request.online,
            complexity=outcome.complexity.value,
            model=outcome.config.model,
            search_recency_filter=outcome.config.search_recency_filter,
            cached=outcome.cached,
            credential=outcome.credential,
            version=VERSION,
            formatted=display_text(outcome.payload, request.format) if request.format else None,
        )
        logger.info(
            "Search completed in %.0fms (cached=%s)",
            outcome.latency_ms,
            outcome.cached,
        )
        return {**outcome.payload, "metadata": metadata.model_dump(by_alias=True, exclude_none=True)}

    async def stream(self, request: SearchRequest) -> StreamingResponse:
        """Handle POST /api/search/stream requests.

        The first delta is awaited before the response starts so that
        validation and failover errors still produce a proper status code.
        Errors after that point are sent as an ``error`` event.
        """
        complexity, chunks = await self._search.stream(request.prompt, online=request.online)
        first = await anext(chunks)

        return StreamingResponse(
            self._events(first, chunks),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Complexity": complexity.value},
        )

    async def _events(self, first: str, chunks: AsyncGenerator[str, None]) -> AsyncGenerator[str, None]:
        yield _sse({"content": first})
        try:
            async for chunk in chunks:
                yield _sse({"content": chunk})
        except SearchProxyError as e:
            logger.error("Stream interrupted: %s", e.details)
            yield _sse({**e.to_envelope(), "timestamp": utc_timestamp()}, event="error")
        yield STREAM_DONE

    async def debug_search(self, request: DebugSearchRequest) -> dict[str, Any]:
        """Handle POST /api/debug-search requests.

        Bypasses the cache and reports every credential attempt.

        Raises:
            AllCredentialsExhausted: No credential succeeded (envelope lists attempts)
            UpstreamFailure: Fail-fast policy aborted
        """
        config, result = await self._search.debug_search(request.prompt, model=request.model)
        payload = result.unwrap()

        return {
            "success": True,
            "model": config.model,
            "credential": result.credential,
            "attempts": [attempt.to_dict() for attempt in result.attempts],
            "data": payload,
            "timestamp": utc_timestamp(),
        }

