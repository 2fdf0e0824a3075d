"""Trigger vocabularies for prompt classification.

Each category maps to the terms that place a prompt in it. Terms match
case-insensitively on word boundaries, with an optional plural suffix;
multi-word terms tolerate any run of whitespace between words.
"""

import re
from collections.abc import Iterable, Mapping

CREATIVE = "creative"
TECHNICAL = "technical"
RECENCY = "recency"

VOCABULARY: Mapping[str, tuple[str, ...]] = {
    CREATIVE: (
        "write",
        "create",
        "generate",
        "story",
        "stories",
        "poem",
        "imagine",
        "design",
        "compose",
        "invent",
        "lyrics",
        "song",
    ),
    TECHNICAL: (
        "algorithm",
        "api",
        "architecture",
        "backend",
        "blockchain",
        "compiler",
        "cryptography",
        "database",
        "debug",
        "docker",
        "encryption",
        "framework",
        "javascript",
        "kubernetes",
        "machine learning",
        "microservice",
        "neural network",
        "protocol",
        "python",
        "quantum",
        "regression",
        "sql",
        "typescript",
    ),
    RECENCY: (
        "news",
        "latest",
        "today",
        "breaking",
        "current",
        "recent",
        "recently",
        "yesterday",
        "this week",
        "right now",
    ),
}


def compile_terms(terms: Iterable[str]) -> re.Pattern[str]:
    """Build one case-insensitive alternation for a category's terms.

    Longer terms come first so "machine learning" wins over any shorter
    overlapping term.
    """
    alternatives = [
        r"\s+".join(re.escape(word) for word in term.split())
        for term in sorted(set(terms), key=len, reverse=True)
    ]
    if not alternatives:
        # matches nothing
        return re.compile(r"(?!x)x")
    return re.compile(rf"\b(?:{'|'.join(alternatives)})(?:e?s)?\b", re.IGNORECASE)
