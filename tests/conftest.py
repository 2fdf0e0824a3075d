"""
Shared fixtures for the search proxy tests.
"""

import asyncio
from typing import Any

import pytest
from fastapi.testclient import TestClient

from search_proxy.api.app import create_app
from search_proxy.config import Settings
from search_proxy.context import ServiceContext
from search_proxy.entities import Credential
from search_proxy.repositories import InMemoryCacheRepository

FIRST_TOKEN = "pplx-first-key-0001"
SECOND_TOKEN = "pplx-second-key-0002"


def completion(content: str = "Paris is the capital of France[1].") -> dict[str, Any]:
    """Build an upstream completion body."""
    return {
        "id": "cmpl-test",
        "model": "sonar",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
        "citations": ["https://en.wikipedia.org/wiki/Paris"],
    }


class FakeUpstreamClient:
    """Scripted UpstreamClient.

    ``outcomes`` maps a token to what the upstream does for it: a dict is
    returned by ``complete``, a list of strings is streamed by ``stream``,
    an exception is raised by either. A ``delay`` postpones every outcome.
    """

    def __init__(self, outcomes: dict[str, Any], delay: float = 0.0) -> None:
        self.outcomes = outcomes
        self.delay = delay
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    @property
    def tokens(self) -> list[str]:
        return [token for token, _ in self.calls]

    async def _outcome(self, credential: Credential, payload: dict[str, Any]) -> Any:
        self.calls.append((credential.token, payload))
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes[credential.token]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def complete(self, credential: Credential, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._outcome(credential, payload)

    async def stream(self, credential: Credential, payload: dict[str, Any]):
        chunks = await self._outcome(credential, payload)
        for chunk in chunks:
            yield chunk

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def credentials() -> tuple[Credential, ...]:
    return (Credential(slot=1, token=FIRST_TOKEN), Credential(slot=2, token=SECOND_TOKEN))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        credentials=(),
        upstream_timeout=5.0,
        failover_policy="continue",
        cache_max_entries=100,
        credential_provider="PERPLEXITY",
        model_simple="sonar",
        model_medium="sonar",
        model_complex="sonar-pro",
        model_creative="sonar",
    )


@pytest.fixture
def fake_client() -> FakeUpstreamClient:
    return FakeUpstreamClient({FIRST_TOKEN: completion(), SECOND_TOKEN: completion()})


@pytest.fixture
def context(settings, fake_client, credentials) -> ServiceContext:
    return ServiceContext.create(
        settings=settings,
        client=fake_client,
        store=InMemoryCacheRepository(max_entries=settings.cache_max_entries),
        credentials=credentials,
    )


@pytest.fixture
def client(context):
    """Create a test client bound to the fake upstream."""
    with TestClient(create_app(context)) as test_client:
        yield test_client
