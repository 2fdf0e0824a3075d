"""
Tests for completion display formatting.
"""

import pytest

from search_proxy.formatting import (
    NO_CONTENT_MESSAGE,
    display_text,
    extract_completion,
    format_response,
    strip_citations,
)


def test_strips_citation_markers():
    """Test removal of single and repeated citation markers."""
    assert strip_citations("Paris[1] is large[1][3][12].") == "Paris is large."


def test_converts_emphasis_to_html():
    """Test **bold** to <strong> conversion."""
    assert format_response("The **capital** is **Paris**[2]") == (
        "The <strong>capital</strong> is <strong>Paris</strong>"
    )


def test_converts_emphasis_to_plain():
    """Test **bold** to plain text conversion."""
    assert format_response("The **capital**[1]", "plain") == "The capital"


def test_leaves_other_text_alone():
    """Test that non-citation brackets and single asterisks are untouched."""
    text = "a [b] [1a] [ 2 ] 3*4 *x* ok"
    assert format_response(text) == text


def test_nested_markers_are_stripped_completely():
    """Test that markers revealed by a first pass are removed too."""
    assert strip_citations("x[[1]2]y") == "xy"


@pytest.mark.parametrize(
    "text",
    [
        "Paris[1][3] is the capital.",
        "x[[1]2]y",
        "[[[1]]]",
        "no citations here",
        "**bold**[4] and [5]**more**",
    ],
)
def test_citation_stripping_is_idempotent(text):
    """Test that formatting already-formatted text changes nothing."""
    once = format_response(text, "plain")
    assert format_response(once, "plain") == once
    assert strip_citations(strip_citations(text)) == strip_citations(text)


def test_rejects_unknown_mode():
    """Test that an unknown emphasis mode is an error."""
    with pytest.raises(ValueError):
        format_response("x", "markdown")


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"choices": []},
        {"choices": [{}]},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {"content": "   "}}]},
        {"choices": "nope"},
    ],
)
def test_extract_completion_rejects_empty_shapes(payload):
    """Test that missing or blank completions are reported as None."""
    assert extract_completion(payload) is None


def test_display_text_without_content():
    """Test the explicit message shown instead of empty output."""
    assert display_text({"choices": []}) == NO_CONTENT_MESSAGE


def test_display_text_with_content():
    """Test display text for a normal completion."""
    payload = {"choices": [{"message": {"content": "**Paris**[1]"}}]}
    assert display_text(payload, "html") == "<strong>Paris</strong>"
