"""Upstream completion client protocol.

Defines the interface for anything that can send a resolved completion
payload to the provider on behalf of one credential.
"""

from collections.abc import AsyncGenerator
from typing import Any, Protocol, runtime_checkable

from search_proxy.entities import Credential


@runtime_checkable
class UpstreamClient(Protocol):
    """Protocol for completion API clients.

    Implementations translate transport outcomes into the error hierarchy:
    ``UpstreamRateLimited`` for 429, ``UpstreamTimeout`` when the timeout
    elapses, ``UpstreamFailure`` for any other error status or network
    error, and ``MalformedUpstreamResponse`` for a 2xx body that is not JSON.
    """

    async def complete(self, credential: Credential, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a non-streaming completion request.

        Args:
            credential: The credential to authenticate with
            payload: Fully resolved request body

        Returns:
            The decoded JSON response body
        """
        ...

    def stream(self, credential: Credential, payload: dict[str, Any]) -> AsyncGenerator[str, None]:
        """Send a streaming completion request.

        The returned iterator raises the same errors as ``complete`` before
        its first item if the stream cannot be opened.

        Returns:
            Async iterator of completion text deltas
        """
        ...

    async def close(self) -> None:
        """Release pooled connections."""
        ...
