"""
Tests for request-level search orchestration.
"""

import pytest
from conftest import FIRST_TOKEN, SECOND_TOKEN, completion

from search_proxy.entities import ComplexityClass
from search_proxy.errors import (
    AllCredentialsExhausted,
    NoCredentialsConfigured,
    UpstreamFailure,
    UpstreamRateLimited,
    ValidationError,
)
from search_proxy.services import validate_prompt


@pytest.mark.parametrize(
    ("prompt", "title"),
    [
        (None, "Missing prompt"),
        (42, "Invalid prompt type"),
        ("", "Empty prompt"),
        ("   \n\t", "Empty prompt"),
    ],
)
def test_validate_prompt_rejects(prompt, title):
    """Test each validation failure and its title."""
    with pytest.raises(ValidationError) as excinfo:
        validate_prompt(prompt)
    assert excinfo.value.title == title
    assert excinfo.value.status_code == 400


def test_validate_prompt_strips():
    """Test that surrounding whitespace is removed."""
    assert validate_prompt("  hello  ") == "hello"


async def test_empty_prompt_touches_nothing(context, fake_client):
    """Test that an empty prompt fails before any cache or upstream call."""
    with pytest.raises(ValidationError):
        await context.search.search("")

    assert fake_client.calls == []
    assert context.cache.get_stats()["total_entries"] == 0
    assert context.metrics.total_requests == 0


async def test_miss_then_hit(context, fake_client):
    """Test that the second identical search is served from the cache."""
    first = await context.search.search("What is the capital of France?")
    second = await context.search.search("what is the capital of  FRANCE?")

    assert first.cached is False
    assert first.complexity == ComplexityClass.MEDIUM
    assert first.credential == "pplx-fir..."
    assert second.cached is True
    assert second.payload == first.payload
    assert len(fake_client.calls) == 1
    assert context.metrics.cache_hits == 1
    assert context.metrics.cache_misses == 1
    assert context.metrics.upstream_calls == 1


async def test_offline_is_cached_separately(context, fake_client):
    """Test that online and offline answers never share an entry."""
    await context.search.search("What is the capital of France?")
    offline = await context.search.search("What is the capital of France?", online=False)

    assert offline.cached is False
    assert offline.config.search_recency_filter is None
    assert "search_recency_filter" not in fake_client.calls[1][1]


async def test_failures_are_not_cached(context, fake_client):
    """Test that exhaustion leaves the cache empty."""
    fake_client.outcomes = {
        FIRST_TOKEN: UpstreamFailure("HTTP 500", upstream_status=500),
        SECOND_TOKEN: UpstreamFailure("HTTP 502", upstream_status=502),
    }

    with pytest.raises(AllCredentialsExhausted):
        await context.search.search("What is the capital of France?")

    assert context.cache.get_stats()["total_entries"] == 0
    assert context.metrics.upstream_failures == 2
    assert context.metrics.total_requests == 1


async def test_no_credentials(settings, fake_client):
    """Test that a cache miss with no keys is a configuration error."""
    from search_proxy.context import ServiceContext

    context = ServiceContext.create(settings=settings, client=fake_client, credentials=())

    with pytest.raises(NoCredentialsConfigured):
        await context.search.search("What is the capital of France?")
    assert fake_client.calls == []


async def test_debug_search_bypasses_cache_and_overrides_model(context, fake_client):
    """Test debug search model override and cache bypass."""
    await context.search.search("What is the capital of France?")
    config, result = await context.search.debug_search("What is the capital of France?", model="sonar-reasoning")

    assert config.model == "sonar-reasoning"
    assert result.ok
    assert len(fake_client.calls) == 2
    assert fake_client.calls[1][1]["model"] == "sonar-reasoning"


async def test_stream_resolves_then_streams(context, fake_client):
    """Test that stream returns the class and a lazy chunk iterator."""
    fake_client.outcomes = {FIRST_TOKEN: ["Paris", "."], SECOND_TOKEN: completion()}

    complexity, chunks = await context.search.stream("Write a limerick about Paris")

    assert complexity == ComplexityClass.CREATIVE
    assert fake_client.calls == []
    assert [chunk async for chunk in chunks] == ["Paris", "."]


async def test_stream_is_counted_in_metrics(context, fake_client):
    """Test that streamed searches show up in request and upstream metrics."""
    fake_client.outcomes = {FIRST_TOKEN: UpstreamRateLimited(), SECOND_TOKEN: ["Par", "is"]}

    _, chunks = await context.search.stream("What is the capital of France?")
    assert [chunk async for chunk in chunks] == ["Par", "is"]

    assert context.metrics.total_requests == 1
    assert context.metrics.cache_misses == 1
    assert context.metrics.upstream_calls == 2
    assert context.metrics.upstream_failures == 1


async def test_failed_stream_is_counted_in_metrics(context, fake_client):
    """Test that a stream no key can open is still recorded."""
    fake_client.outcomes = {FIRST_TOKEN: UpstreamRateLimited(), SECOND_TOKEN: UpstreamRateLimited()}

    _, chunks = await context.search.stream("What is the capital of France?")
    with pytest.raises(AllCredentialsExhausted):
        await anext(chunks)

    assert context.metrics.total_requests == 1
    assert context.metrics.upstream_failures == 2
