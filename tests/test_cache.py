"""
Tests for the in-memory cache repository and cache keys.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from conftest import FakeClock, completion

from search_proxy.entities import RequestConfiguration
from search_proxy.protocols import CacheStore
from search_proxy.repositories import InMemoryCacheRepository
from search_proxy.services import CacheService, make_key, normalize_prompt

CONFIG = RequestConfiguration(
    model="sonar",
    max_tokens=800,
    temperature=0.3,
    cache_ttl=60,
    search_recency_filter="month",
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemoryCacheRepository:
    return InMemoryCacheRepository(max_entries=3, clock=clock)


def test_satisfies_protocol(store):
    """Test that the repository satisfies the CacheStore protocol."""
    assert isinstance(store, CacheStore)


def test_round_trip(store):
    """Test that a value can be read back right after it is set."""
    store.set("k", {"answer": 42}, ttl=10)
    assert store.get("k") == {"answer": 42}


def test_missing_key(store):
    """Test that an unknown key is absent."""
    assert store.get("nope") is None


def test_expiry(store, clock):
    """Test that entries disappear once their TTL has elapsed."""
    store.set("k", {"answer": 42}, ttl=10)

    clock.advance(9.9)
    assert store.get("k") == {"answer": 42}

    clock.advance(0.1)
    assert store.get("k") is None
    assert store.count_all() == 0


def test_overwrite_resets_ttl(store, clock):
    """Test that setting an existing key replaces value and expiry."""
    store.set("k", {"v": 1}, ttl=10)
    clock.advance(8)
    store.set("k", {"v": 2}, ttl=10)
    clock.advance(8)

    assert store.get("k") == {"v": 2}


def test_evicts_oldest_set_entry_when_full(store):
    """Test insertion-order eviction once max_entries is reached."""
    for key in ("a", "b", "c"):
        store.set(key, {"key": key}, ttl=100)
    store.set("d", {"key": "d"}, ttl=100)

    assert store.count_all() == 3
    assert store.get("a") is None
    assert store.get("d") == {"key": "d"}
    assert store.get_stats()["evictions"] == 1


def test_overwrite_counts_as_newest(store):
    """Test that re-setting a key protects it from the next eviction."""
    for key in ("a", "b", "c"):
        store.set(key, {"key": key}, ttl=100)
    store.set("a", {"key": "a2"}, ttl=100)
    store.set("d", {"key": "d"}, ttl=100)

    assert store.get("a") == {"key": "a2"}
    assert store.get("b") is None


def test_expired_entries_are_purged_before_evicting(store, clock):
    """Test that a full store drops expired entries before live ones."""
    store.set("a", {"key": "a"}, ttl=100)
    store.set("short", {"key": "short"}, ttl=1)
    store.set("c", {"key": "c"}, ttl=100)
    clock.advance(5)

    store.set("d", {"key": "d"}, ttl=100)

    assert store.get("a") == {"key": "a"}
    assert store.get("c") == {"key": "c"}
    assert store.get("d") == {"key": "d"}
    assert store.get_stats()["evictions"] == 0


def test_purge_expired(store, clock):
    """Test explicit purging of expired entries."""
    store.set("a", {}, ttl=1)
    store.set("b", {}, ttl=100)
    clock.advance(2)

    assert store.purge_expired() == 1
    assert store.count_all() == 1


def test_delete_and_clear(store):
    """Test delete and clear_all."""
    store.set("a", {}, ttl=10)
    store.set("b", {}, ttl=10)

    assert store.delete("a") is True
    assert store.delete("a") is False
    assert store.clear_all() == 1
    assert store.count_all() == 0


def test_rejects_non_positive_ttl(store):
    """Test that a zero TTL is refused."""
    with pytest.raises(ValueError):
        store.set("k", {}, ttl=0)


def test_concurrent_writers_respect_bound():
    """Test that concurrent sets never grow the store past its bound."""
    store = InMemoryCacheRepository(max_entries=50)

    def write(i: int) -> None:
        store.set(f"key-{i}", {"i": i}, ttl=60)
        store.get(f"key-{i // 2}")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(write, range(500)))

    assert store.count_all() == 50


def test_normalize_prompt():
    """Test lowercasing and whitespace collapsing."""
    assert normalize_prompt("  What IS\tthe   capital\nof France? ") == "what is the capital of france?"


def test_key_ignores_case_and_whitespace():
    """Test that trivial prompt variations share a key."""
    assert make_key("What is the capital of France?", CONFIG) == make_key(
        "what is   the CAPITAL of france?", CONFIG
    )


def test_key_separates_configurations():
    """Test that different models or recency filters never collide."""
    prompt = "What is the capital of France?"
    other_model = RequestConfiguration("sonar-pro", 800, 0.3, 60, "month")
    other_filter = RequestConfiguration("sonar", 800, 0.3, 60, "day")
    no_filter = RequestConfiguration("sonar", 800, 0.3, 60, None)

    keys = {make_key(prompt, c) for c in (CONFIG, other_model, other_filter, no_filter)}
    assert len(keys) == 4


def test_key_ignores_ttl_and_sampling():
    """Test that settings which don't change the question share a key."""
    prompt = "What is the capital of France?"
    variant = RequestConfiguration("sonar", 100, 0.9, 5, "month")

    assert make_key(prompt, CONFIG) == make_key(prompt, variant)


def test_cache_service_uses_config_ttl(clock):
    """Test that CacheService stores with the configuration's TTL."""
    cache = CacheService(repository=InMemoryCacheRepository(max_entries=10, clock=clock))
    cache.store("What is the capital of France?", CONFIG, completion())

    assert cache.lookup("WHAT is the capital of France?", CONFIG) == completion()
    clock.advance(CONFIG.cache_ttl)
    assert cache.lookup("What is the capital of France?", CONFIG) is None
