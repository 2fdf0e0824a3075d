"""Search orchestration service.

Ties the pipeline together for one request:

    validate -> classify -> select configuration -> cache lookup
             -> dispatch (on miss) -> cache store -> metrics

Validation happens before any cache or network activity.
"""

import logging
import time
from collections.abc import AsyncGenerator
from dataclasses import replace
from typing import Any

from search_proxy.entities import (
    ComplexityClass,
    DispatchAttempt,
    DispatchResult,
    RequestConfiguration,
    SearchOutcome,
    ServiceMetrics,
)
from search_proxy.errors import ValidationError

from .cache_service import CacheService
from .classifier import QueryClassifier
from .config_selector import ConfigurationSelector
from .dispatcher import KeyFailoverDispatcher

logger = logging.getLogger(__name__)


def validate_prompt(prompt: Any) -> str:
    """Check the raw prompt from a request body.

    Returns:
        The prompt with surrounding whitespace removed

    Raises:
        ValidationError: Missing, non-string or blank prompt
    """
    if prompt is None:
        raise ValidationError('Request body must include a "prompt" field', title="Missing prompt")
    if not isinstance(prompt, str):
        raise ValidationError("Prompt must be a string", title="Invalid prompt type")
    prompt = prompt.strip()
    if not prompt:
        raise ValidationError("Prompt cannot be empty or only whitespace", title="Empty prompt")
    return prompt


class SearchService:
    """Request-level orchestration of classifier, selector, cache and dispatcher.

    Example:
        ```python
        service = SearchService(classifier, selector, cache, dispatcher, metrics)
        outcome = await service.search("latest news on fusion power")
        ```
    """

    def __init__(
        self,
        classifier: QueryClassifier,
        selector: ConfigurationSelector,
        cache: CacheService,
        dispatcher: KeyFailoverDispatcher,
        metrics: ServiceMetrics,
    ) -> None:
        self._classifier = classifier
        self._selector = selector
        self._cache = cache
        self._dispatcher = dispatcher
        self._metrics = metrics

    def resolve(self, prompt: str, online: bool = True) -> tuple[ComplexityClass, RequestConfiguration]:
        """Classify a validated prompt and select its configuration."""
        complexity = self._classifier.classify(prompt)
        config = self._selector.select_config(complexity, prompt, online=online)
        return complexity, config

    async def search(self, prompt: Any, online: bool = True) -> SearchOutcome:
        """Answer a prompt from the cache or the upstream.

        Raises:
            ValidationError: The prompt is missing, not a string or blank
            NoCredentialsConfigured: Cache miss and no credentials configured
            AllCredentialsExhausted: Every credential failed
            UpstreamFailure: Fail-fast policy aborted on a failure
            MalformedUpstreamResponse: The upstream answered with garbage
        """
        prompt = validate_prompt(prompt)
        started = time.perf_counter()
        complexity, config = self.resolve(prompt, online=online)
        logger.info(
            "Search %r classified %s, model=%s filter=%s",
            prompt[:50],
            complexity.value,
            config.model,
            config.search_recency_filter,
        )

        cached = False
        try:
            payload = self._cache.lookup(prompt, config)
            if payload is not None:
                cached = True
                return SearchOutcome(
                    payload=payload,
                    complexity=complexity,
                    config=config,
                    cached=True,
                    credential=None,
                    latency_ms=(time.perf_counter() - started) * 1000,
                )

            result = await self._dispatch(prompt, config)
            payload = result.unwrap()
            self._cache.store(prompt, config, payload)
            return SearchOutcome(
                payload=payload,
                complexity=complexity,
                config=config,
                cached=False,
                credential=result.credential,
                latency_ms=(time.perf_counter() - started) * 1000,
            )
        finally:
            self._metrics.record_request((time.perf_counter() - started) * 1000, cached=cached)

    async def debug_search(self, prompt: Any, model: str | None = None) -> tuple[RequestConfiguration, DispatchResult]:
        """Dispatch without touching the cache, optionally overriding the model.

        The result is returned as-is so callers can inspect every attempt,
        including failures.
        """
        prompt = validate_prompt(prompt)
        _, config = self.resolve(prompt)
        if model:
            config = replace(config, model=model)
        return config, await self._dispatch(prompt, config)

    async def stream(self, prompt: Any, online: bool = True) -> tuple[ComplexityClass, AsyncGenerator[str, None]]:
        """Resolve a prompt and open a streamed completion.

        Streams bypass the cache. The returned generator performs the
        credential failover when first iterated, and records the request
        as a cache miss once the stream ends or fails.
        """
        prompt = validate_prompt(prompt)
        complexity, config = self.resolve(prompt, online=online)
        return complexity, self._metered_stream(prompt, config)

    async def _metered_stream(self, prompt: str, config: RequestConfiguration) -> AsyncGenerator[str, None]:
        started = time.perf_counter()
        attempts: list[DispatchAttempt] = []
        try:
            async for chunk in self._dispatcher.stream(prompt, config, attempts=attempts):
                yield chunk
        finally:
            failures = sum(1 for attempt in attempts if not attempt.succeeded)
            self._metrics.record_upstream(len(attempts), failures)
            self._metrics.record_request((time.perf_counter() - started) * 1000, cached=False)

    async def _dispatch(self, prompt: str, config: RequestConfiguration) -> DispatchResult:
        result = await self._dispatcher.dispatch(prompt, config)
        failures = sum(1 for attempt in result.attempts if not attempt.succeeded)
        self._metrics.record_upstream(len(result.attempts), failures)
        return result
