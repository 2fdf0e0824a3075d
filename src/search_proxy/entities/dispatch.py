"""Dispatch outcome domain entities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from search_proxy.errors import AllCredentialsExhausted, UpstreamFailure


class FailoverPolicy(str, Enum):
    """What the dispatcher does after a non-rate-limit failure."""

    CONTINUE = "continue"
    FAIL_FAST = "fail_fast"


@dataclass(frozen=True)
class DispatchAttempt:
    """One credential attempt.

    Attributes:
        credential: Redacted credential preview
        status_code: Upstream HTTP status, None for network errors and timeouts
        reason: Human-readable failure reason ("ok" for the successful attempt)
        duration_ms: Wall time of the attempt
    """

    credential: str
    status_code: int | None
    reason: str
    duration_ms: float

    @property
    def succeeded(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    def to_dict(self) -> dict[str, Any]:
        return {
            "credential": self.credential,
            "status": self.status_code,
            "reason": self.reason,
            "durationMs": round(self.duration_ms, 1),
        }


@dataclass(frozen=True)
class DispatchResult:
    """Either a successful upstream payload or a terminal failure.

    Attributes:
        payload: Upstream JSON body on success, None on failure
        credential: Preview of the credential that produced the payload
        attempts: Every attempt made, in order
        aborted: True when the fail-fast policy stopped before exhausting
            the credential list
    """

    payload: dict[str, Any] | None
    credential: str | None = None
    attempts: list[DispatchAttempt] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return self.payload is not None

    def unwrap(self) -> dict[str, Any]:
        """Return the payload or raise the terminal failure.

        Raises:
            AllCredentialsExhausted: Every credential was tried and failed
            UpstreamFailure: The fail-fast policy aborted on a failure
        """
        if self.payload is not None:
            return self.payload
        if self.aborted:
            last = self.attempts[-1]
            raise UpstreamFailure(
                f"Aborted after {last.credential} failed: {last.reason}",
                upstream_status=last.status_code,
            )
        raise AllCredentialsExhausted(self.attempts)
