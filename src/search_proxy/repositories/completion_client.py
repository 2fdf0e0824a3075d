"""httpx-based client for OpenAI-compatible chat completion APIs.

Talks to Perplexity's ``/chat/completions`` by default; any endpoint that
accepts the same body and bearer authentication works.

Streaming responses are server-sent events: one ``data: {json}`` line per
chunk, terminated by ``data: [DONE]``.
"""

import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

import httpx

from search_proxy.config import get_settings
from search_proxy.entities import Credential
from search_proxy.errors import (
    MalformedUpstreamResponse,
    UpstreamFailure,
    UpstreamRateLimited,
    UpstreamTimeout,
)

logger = logging.getLogger(__name__)

MAX_BODY_PREVIEW = 500
DONE_MARKER = "[DONE]"


class HttpxCompletionClient:
    """Completion API client satisfying the UpstreamClient protocol.

    One ``httpx.AsyncClient`` is shared by all requests; every call is
    bounded by ``timeout`` and can be cancelled by cancelling the awaiting
    task.

    Example:
        ```python
        client = HttpxCompletionClient.create()
        body = await client.complete(credential, {"model": "sonar", "messages": [...]})
        await client.close()
        ```
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the completion client.

        Args:
            url: Completion endpoint. Defaults to settings.upstream_url.
            timeout: Per-request timeout in seconds. Defaults to settings.
            transport: Custom httpx transport (tests pass ``httpx.MockTransport``).
        """
        settings = get_settings()
        self._url = url or settings.upstream_url
        self._timeout = timeout or settings.upstream_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        url: str | None = None,
        timeout: float | None = None,
    ) -> "HttpxCompletionClient":
        """Factory method to create HttpxCompletionClient with defaults."""
        return cls(url=url, timeout=timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def url(self) -> str:
        return self._url

    @property
    def timeout(self) -> float:
        return self._timeout

    @staticmethod
    def _headers(credential: Credential) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {credential.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        body = response.text[:MAX_BODY_PREVIEW]
        if response.status_code == 429:
            raise UpstreamRateLimited(body=body)
        raise UpstreamFailure(
            f"HTTP {response.status_code}",
            upstream_status=response.status_code,
            body=body,
        )

    async def complete(self, credential: Credential, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a non-streaming completion request.

        Raises:
            UpstreamRateLimited: The upstream answered 429
            UpstreamTimeout: No response within the timeout
            UpstreamFailure: Any other non-2xx status or network error
            MalformedUpstreamResponse: 2xx with a body that is not a JSON object
        """
        try:
            response = await self.client.post(
                self._url,
                json={**payload, "stream": False},
                headers=self._headers(credential),
            )
        except httpx.TimeoutException as e:
            raise UpstreamTimeout(self._timeout) from e
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"Network error: {e}") from e

        self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedUpstreamResponse(
                f"Upstream returned non-JSON body: {response.text[:MAX_BODY_PREVIEW]!r}"
            ) from e
        if not isinstance(data, dict):
            raise MalformedUpstreamResponse(
                f"Upstream returned {type(data).__name__} instead of a JSON object"
            )
        return data

    async def stream(self, credential: Credential, payload: dict[str, Any]) -> AsyncGenerator[str, None]:
        """Send a streaming completion request and yield text deltas.

        Errors opening the stream are raised before the first item, which
        lets the dispatcher fail over to the next credential.
        """
        try:
            async with self.client.stream(
                "POST",
                self._url,
                json={**payload, "stream": True},
                headers=self._headers(credential),
            ) as response:
                if not response.is_success:
                    await response.aread()
                    self._raise_for_status(response)

                async for line in response.aiter_lines():
                    delta = _parse_event(line)
                    if delta is None:
                        continue
                    if delta == DONE_MARKER:
                        return
                    yield delta
        except httpx.TimeoutException as e:
            raise UpstreamTimeout(self._timeout) from e
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"Network error: {e}") from e

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _parse_event(line: str) -> str | None:
    """Extract the text delta from one server-sent event line.

    Returns:
        The delta text, ``DONE_MARKER`` at end of stream, or None for lines
        that carry no text (comments, keep-alives, empty deltas)
    """
    line = line.strip()
    if not line.startswith("data:"):
        return None
    data = line[len("data:"):].strip()
    if data == DONE_MARKER:
        return DONE_MARKER

    try:
        chunk = json.loads(data)
    except ValueError as e:
        raise MalformedUpstreamResponse(f"Invalid stream chunk: {data[:MAX_BODY_PREVIEW]!r}") from e

    try:
        choice = chunk["choices"][0]
    except (KeyError, IndexError, TypeError):
        return None
    delta = choice.get("delta") or {}
    content = delta.get("content")
    return content or None
