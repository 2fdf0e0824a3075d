"""Display formatting for completion text.

Completions from web-augmented models carry citation markers such as
``[1]`` or ``[1][3]`` and markdown ``**bold**`` spans. The browser shows
neither, so both are rewritten before display.
"""

import re
from enum import Enum
from typing import Any

CITATION_PATTERN = re.compile(r"\[\d+\](?:\[\d+\])*")
EMPHASIS_PATTERN = re.compile(r"\*{2}(.*?)\*{2}")

NO_CONTENT_MESSAGE = "No content returned."


class EmphasisMode(str, Enum):
    """How ``**bold**`` spans are rendered."""

    HTML = "html"
    PLAIN = "plain"


def strip_citations(text: str) -> str:
    """Remove bracketed-integer citation markers.

    Substitution repeats until nothing matches, so markers that only appear
    once an inner marker is removed (``[[1]2]``) are stripped too and a
    second call never changes the result.
    """
    while True:
        stripped = CITATION_PATTERN.sub("", text)
        if stripped == text:
            return stripped
        text = stripped


def format_emphasis(text: str, mode: EmphasisMode = EmphasisMode.HTML) -> str:
    """Convert ``**x**`` spans to ``<strong>x</strong>`` or plain ``x``."""
    replacement = r"<strong>\1</strong>" if mode == EmphasisMode.HTML else r"\1"
    return EMPHASIS_PATTERN.sub(replacement, text)


def format_response(text: str, mode: EmphasisMode | str = EmphasisMode.HTML) -> str:
    """Prepare raw completion text for display.

    Args:
        text: Raw completion text
        mode: Emphasis rendering, "html" or "plain"

    Returns:
        Text with citations removed and emphasis converted
    """
    return format_emphasis(strip_citations(text), EmphasisMode(mode))


def extract_completion(payload: dict[str, Any]) -> str | None:
    """Return ``choices[0].message.content`` if it is a non-empty string."""
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(content, str) or not content.strip():
        return None
    return content


def display_text(payload: dict[str, Any], mode: EmphasisMode | str = EmphasisMode.HTML) -> str:
    """Formatted completion, or an explicit message when there is none."""
    content = extract_completion(payload)
    if content is None:
        return NO_CONTENT_MESSAGE
    return format_response(content, mode)
