#!/usr/bin/env python3
"""
Demo script for the search proxy.

Shows how prompts are classified, which configuration each one resolves
to, how cache keys collapse trivial prompt variations, and how completion
text is formatted for display. With API keys configured, it also runs a
live search through the failover dispatcher.
"""

import asyncio
import time

from search_proxy import ServiceContext, classify, format_response
from search_proxy.services import ConfigurationSelector, make_key

SAMPLE_PROMPTS = [
    "weather Paris",
    "What is the capital of France?",
    "latest news about the Mars rover",
    "How does a compiler optimize tail calls?",
    "rust, go, zig",
    "Write a short poem about autumn rain",
]


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def demo_classification() -> None:
    """Show complexity class and resolved configuration per prompt."""
    print_section("Classification & Configuration")

    selector = ConfigurationSelector()
    print(f"\n{'Prompt':<42} {'Class':<10} {'Model':<10} {'Tokens':<7} {'TTL':<7} Filter")
    print("-" * 90)
    for prompt in SAMPLE_PROMPTS:
        complexity = classify(prompt)
        config = selector.select_config(complexity, prompt)
        print(
            f"{prompt[:40]:<42} "
            f"{complexity.value:<10} "
            f"{config.model:<10} "
            f"{config.max_tokens:<7} "
            f"{config.cache_ttl:<7} "
            f"{config.search_recency_filter}"
        )


def demo_cache_keys() -> None:
    """Show that case and whitespace variations share a cache key."""
    print_section("Cache Key Normalization")

    selector = ConfigurationSelector()
    variants = [
        "What is the capital of France?",
        "what is the   capital of FRANCE?",
        "  What  is the capital of France?  ",
    ]
    for prompt in variants:
        config = selector.select_config(classify(prompt), prompt)
        print(f"  {prompt!r:<42} -> {make_key(prompt, config)[:16]}")

    prompt = variants[0]
    offline = selector.select_config(classify(prompt), prompt, online=False)
    print(f"  {'(offline) ' + prompt!r:<42} -> {make_key(prompt, offline)[:16]}")


def demo_formatting() -> None:
    """Show citation stripping and emphasis conversion."""
    print_section("Response Formatting")

    raw = "Paris is the **capital** of France[1][3]. It lies on the Seine[2]."
    print(f"\n  Raw:   {raw}")
    print(f"  HTML:  {format_response(raw, 'html')}")
    print(f"  Plain: {format_response(raw, 'plain')}")


async def demo_live_search() -> None:
    """Run one search twice through the full pipeline (second is cached)."""
    print_section("Live Search")

    context = ServiceContext.create()
    if not context.dispatcher.credentials:
        print("\n  No API keys configured, skipping.")
        print("  Set PERPLEXITY_API_KEY_1 (and optionally _2) in .env to enable.")
        return

    prompt = "What is the capital of France?"
    try:
        for attempt in ("fresh", "cached"):
            start = time.time()
            outcome = await context.search.search(prompt)
            duration = (time.time() - start) * 1000
            content = outcome.payload["choices"][0]["message"]["content"]
            print(f"\n  [{attempt}] {duration:.0f}ms, cached={outcome.cached}, key={outcome.credential}")
            print(f"  {format_response(content, 'plain')[:200]}")
        print(f"\n  Metrics: {context.metrics.to_dict()}")
    finally:
        await context.aclose()


def main() -> None:
    """Run all demos."""
    print("\n🚀 Search Proxy Demo")
    print("=" * 70)

    try:
        demo_classification()
        demo_cache_keys()
        demo_formatting()
        asyncio.run(demo_live_search())

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except Exception as e:
        print(f"\n❌ Error: {e}")
        print("\nCheck your API keys and the upstream service status.")


if __name__ == "__main__":
    main()
