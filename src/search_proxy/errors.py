"""Exception hierarchy for the search proxy.

Every error carries the HTTP status code and short title used in the
``{error, details}`` envelope, so the API layer can translate any of them
without a lookup table.

Hierarchy:
    SearchProxyError
    ├── ValidationError                  400, client-caused
    ├── ConfigurationError               500, operator-caused
    │   └── NoCredentialsConfigured
    └── UpstreamError                    502
        ├── UpstreamRateLimited          per credential, recovered by failover
        ├── UpstreamFailure              per credential, recovered or escalated
        │   └── UpstreamTimeout
        ├── AllCredentialsExhausted      every credential failed
        └── MalformedUpstreamResponse    upstream answered with garbage
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from search_proxy.entities import DispatchAttempt


class SearchProxyError(Exception):
    """Base class for all search proxy errors."""

    status_code = 500
    title = "Internal server error"

    def __init__(self, details: str) -> None:
        super().__init__(details)
        self.details = details

    def to_envelope(self) -> dict[str, str]:
        return {"error": self.title, "details": self.details}


class ValidationError(SearchProxyError):
    """The request prompt is missing, of the wrong type or empty."""

    status_code = 400
    title = "Invalid request"

    def __init__(self, details: str, title: str | None = None) -> None:
        super().__init__(details)
        if title is not None:
            self.title = title


class ConfigurationError(SearchProxyError):
    """The server is not configured to serve the request."""

    status_code = 500
    title = "Configuration error"


class NoCredentialsConfigured(ConfigurationError):
    title = "No API keys configured"

    def __init__(self, details: str = "Server is missing upstream API keys") -> None:
        super().__init__(details)


class UpstreamError(SearchProxyError):
    """Base class for failures talking to the completion API."""

    status_code = 502
    title = "Search failed"


class UpstreamFailure(UpstreamError):
    """A single upstream attempt failed (HTTP error status or network error).

    Attributes:
        upstream_status: HTTP status returned by the upstream, None for
            network-level failures
        body: Response body text (possibly truncated), if any
    """

    def __init__(
        self,
        details: str,
        upstream_status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(details)
        self.upstream_status = upstream_status
        self.body = body


class UpstreamRateLimited(UpstreamFailure):
    """The upstream answered 429 for this credential."""

    def __init__(self, body: str | None = None) -> None:
        super().__init__("Rate limited by upstream", upstream_status=429, body=body)


class UpstreamTimeout(UpstreamFailure):
    """The attempt did not complete within the configured timeout."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Upstream did not respond within {timeout:g}s")
        self.timeout = timeout


class MalformedUpstreamResponse(UpstreamError):
    """The upstream answered 2xx but the body is not a usable completion."""

    title = "Malformed upstream response"


class AllCredentialsExhausted(UpstreamError):
    """Every configured credential was tried and none succeeded."""

    def __init__(self, attempts: list[DispatchAttempt]) -> None:
        reasons = "; ".join(f"{a.credential}: {a.reason}" for a in attempts)
        super().__init__(f"All {len(attempts)} API key(s) failed ({reasons})")
        self.attempts = attempts

    def to_envelope(self) -> dict:
        envelope: dict = super().to_envelope()
        envelope["attempts"] = [attempt.to_dict() for attempt in self.attempts]
        return envelope
