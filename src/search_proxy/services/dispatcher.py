"""Key-failover dispatcher.

Tries the configured credentials in priority order until one produces a
usable completion. Rate-limited credentials are always skipped; other
failures either move on to the next credential (``continue`` policy) or
stop the dispatch (``fail_fast`` policy). The dispatcher never touches
the cache.
"""

import asyncio
import logging
import time
from collections.abc import AsyncGenerator, Sequence
from typing import Any

from search_proxy.entities import (
    Credential,
    DispatchAttempt,
    DispatchResult,
    FailoverPolicy,
    RequestConfiguration,
)
from search_proxy.errors import (
    MalformedUpstreamResponse,
    NoCredentialsConfigured,
    UpstreamFailure,
    UpstreamRateLimited,
    UpstreamTimeout,
)
from search_proxy.formatting import extract_completion
from search_proxy.protocols import UpstreamClient

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_SYSTEM_PROMPT = "Be precise and concise."
PROBE_PROMPT = "test"
PROBE_MAX_TOKENS = 16


class KeyFailoverDispatcher:
    """Dispatch completion requests across an ordered credential list.

    Example:
        ```python
        dispatcher = KeyFailoverDispatcher(client, credentials)
        result = await dispatcher.dispatch("What is HTTP/3?", config)
        payload = result.unwrap()
        ```
    """

    def __init__(
        self,
        client: UpstreamClient,
        credentials: Sequence[Credential],
        policy: FailoverPolicy = FailoverPolicy.CONTINUE,
        timeout: float = DEFAULT_TIMEOUT,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            client: Upstream client used for every attempt
            credentials: Credentials in priority order (may be empty)
            policy: Behaviour after a non-rate-limit failure
            timeout: Upper bound for each attempt, in seconds
            system_prompt: System message sent ahead of the user prompt
        """
        self._client = client
        self._credentials = tuple(credentials)
        self._policy = policy
        self._timeout = timeout
        self._system_prompt = system_prompt

    @property
    def credentials(self) -> tuple[Credential, ...]:
        return self._credentials

    @property
    def policy(self) -> FailoverPolicy:
        return self._policy

    def build_payload(
        self,
        prompt: str,
        config: RequestConfiguration,
        stream: bool = False,
    ) -> dict[str, Any]:
        """Build the outbound request body for a prompt and configuration."""
        payload: dict[str, Any] = {
            "model": config.model,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "stream": stream,
        }
        if config.search_recency_filter:
            payload["search_recency_filter"] = config.search_recency_filter
        return payload

    def _require_credentials(self) -> tuple[Credential, ...]:
        if not self._credentials:
            raise NoCredentialsConfigured()
        return self._credentials

    async def _attempt(self, credential: Credential, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            return await asyncio.wait_for(
                self._client.complete(credential, payload),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamTimeout(self._timeout) from e

    def _record_failure(
        self,
        credential: Credential,
        error: UpstreamFailure,
        started: float,
    ) -> DispatchAttempt:
        attempt = DispatchAttempt(
            credential=credential.preview,
            status_code=error.upstream_status,
            reason=error.details,
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        if isinstance(error, UpstreamRateLimited):
            logger.info("Key %s rate limited, trying next key", credential)
        else:
            logger.warning(
                "Key %s failed: status=%s reason=%s body=%s",
                credential,
                error.upstream_status,
                error.details,
                error.body,
            )
        return attempt

    def _should_abort(self, error: UpstreamFailure) -> bool:
        return self._policy == FailoverPolicy.FAIL_FAST and not isinstance(error, UpstreamRateLimited)

    async def dispatch(self, prompt: str, config: RequestConfiguration) -> DispatchResult:
        """Send the prompt upstream, failing over between credentials.

        Args:
            prompt: Validated, non-empty prompt
            config: Resolved request configuration

        Returns:
            DispatchResult with the payload of the first successful attempt,
            or a failure listing every attempt

        Raises:
            NoCredentialsConfigured: The credential list is empty
            MalformedUpstreamResponse: The upstream answered 2xx with a body
                that is not a usable completion
        """
        credentials = self._require_credentials()
        payload = self.build_payload(prompt, config)
        attempts: list[DispatchAttempt] = []

        for credential in credentials:
            started = time.perf_counter()
            try:
                body = await self._attempt(credential, payload)
            except UpstreamFailure as e:
                attempts.append(self._record_failure(credential, e, started))
                if self._should_abort(e):
                    logger.error("Fail-fast policy: aborting dispatch after key %s", credential)
                    return DispatchResult(payload=None, attempts=attempts, aborted=True)
                continue

            if extract_completion(body) is None:
                raise MalformedUpstreamResponse(
                    f"Upstream response from key {credential.preview} has no completion content"
                )

            duration_ms = (time.perf_counter() - started) * 1000
            attempts.append(DispatchAttempt(credential.preview, 200, "ok", duration_ms))
            logger.info("Key %s succeeded with model %s in %.0fms", credential, config.model, duration_ms)
            return DispatchResult(payload=body, credential=credential.preview, attempts=attempts)

        logger.error("All %d API key(s) failed", len(attempts))
        return DispatchResult(payload=None, attempts=attempts)

    async def stream(
        self,
        prompt: str,
        config: RequestConfiguration,
        attempts: list[DispatchAttempt] | None = None,
    ) -> AsyncGenerator[str, None]:
        """Stream completion text deltas, failing over only before the first delta.

        Each call starts a fresh upstream request. Once a delta has been
        yielded, errors propagate to the consumer without trying another key.

        Args:
            prompt: Validated, non-empty prompt
            config: Resolved request configuration
            attempts: Optional list that receives every attempt as it is made

        Raises:
            NoCredentialsConfigured: The credential list is empty
            AllCredentialsExhausted: No credential could open a stream
            UpstreamFailure: Fail-fast policy aborted on a failure
            MalformedUpstreamResponse: A stream ended without any content
        """
        credentials = self._require_credentials()
        payload = self.build_payload(prompt, config, stream=True)
        attempts = [] if attempts is None else attempts
        aborted = False

        for credential in credentials:
            started = time.perf_counter()
            chunks = self._client.stream(credential, payload)
            try:
                first = await asyncio.wait_for(anext(chunks), timeout=self._timeout)
            except StopAsyncIteration:
                raise MalformedUpstreamResponse(
                    f"Upstream stream from key {credential.preview} ended without content"
                ) from None
            except asyncio.TimeoutError:
                await chunks.aclose()
                error: UpstreamFailure = UpstreamTimeout(self._timeout)
                attempts.append(self._record_failure(credential, error, started))
                if self._should_abort(error):
                    aborted = True
                    break
                continue
            except UpstreamFailure as e:
                attempts.append(self._record_failure(credential, e, started))
                if self._should_abort(e):
                    aborted = True
                    break
                continue

            duration_ms = (time.perf_counter() - started) * 1000
            attempts.append(DispatchAttempt(credential.preview, 200, "ok", duration_ms))
            logger.info("Key %s opened stream with model %s", credential, config.model)
            yield first
            async for chunk in chunks:
                yield chunk
            return

        if aborted:
            logger.error("Fail-fast policy: aborting stream after key %s", attempts[-1].credential)
        else:
            logger.error("All %d API key(s) failed to open a stream", len(attempts))
        DispatchResult(payload=None, attempts=attempts, aborted=aborted).unwrap()

    async def probe(self, model: str, prompt: str = PROBE_PROMPT) -> list[dict[str, Any]]:
        """Try every credential independently with a tiny request.

        Unlike ``dispatch`` this never stops early; it reports the outcome
        for each key.
        """
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": PROBE_MAX_TOKENS,
            "temperature": 0.0,
            "stream": False,
        }

        report = []
        for credential in self._credentials:
            started = time.perf_counter()
            try:
                await self._attempt(credential, payload)
            except (UpstreamFailure, MalformedUpstreamResponse) as e:
                attempt = DispatchAttempt(
                    credential=credential.preview,
                    status_code=getattr(e, "upstream_status", None),
                    reason=e.details,
                    duration_ms=(time.perf_counter() - started) * 1000,
                )
                report.append({"slot": credential.slot, "success": False, **attempt.to_dict()})
                logger.warning("Probe of key %s failed: %s", credential, e.details)
                continue

            attempt = DispatchAttempt(credential.preview, 200, "ok", (time.perf_counter() - started) * 1000)
            report.append({"slot": credential.slot, "success": True, **attempt.to_dict()})
        return report
