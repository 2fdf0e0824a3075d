"""Prompt complexity classification.

Rules are evaluated in priority order and the first match wins:

1. creative: the prompt uses imperative-creative vocabulary
2. simple: shorter than 20 characters, no question mark, no technical term
3. complex: longer than 100 characters, a technical term, or a comma or
   semicolon list naming more than one topic
4. medium: everything else
"""

import re
from collections.abc import Mapping

from search_proxy.entities import ComplexityClass
from search_proxy.vocabulary import CREATIVE, TECHNICAL, VOCABULARY, compile_terms

SIMPLE_MAX_LENGTH = 20
COMPLEX_MIN_LENGTH = 100
LIST_SEPARATOR = re.compile(r"[,;]")


class QueryClassifier:
    """Deterministic, side-effect free prompt classifier.

    Example:
        ```python
        classifier = QueryClassifier()
        classifier.classify("What is the capital of France?")  # ComplexityClass.MEDIUM
        ```
    """

    def __init__(self, vocabulary: Mapping[str, tuple[str, ...]] | None = None) -> None:
        """Initialize the classifier.

        Args:
            vocabulary: Category to trigger-term mapping. Defaults to VOCABULARY.
        """
        vocabulary = VOCABULARY if vocabulary is None else vocabulary
        self._creative = compile_terms(vocabulary.get(CREATIVE, ()))
        self._technical = compile_terms(vocabulary.get(TECHNICAL, ()))

    def is_creative(self, prompt: str) -> bool:
        return self._creative.search(prompt) is not None

    def is_technical(self, prompt: str) -> bool:
        return self._technical.search(prompt) is not None

    @staticmethod
    def has_multiple_topics(prompt: str) -> bool:
        segments = [s for s in LIST_SEPARATOR.split(prompt) if s.strip()]
        return len(segments) > 1

    def classify(self, prompt: str) -> ComplexityClass:
        """Assign a complexity class to a non-empty prompt."""
        if self.is_creative(prompt):
            return ComplexityClass.CREATIVE

        technical = self.is_technical(prompt)
        if len(prompt) < SIMPLE_MAX_LENGTH and "?" not in prompt and not technical:
            return ComplexityClass.SIMPLE

        if len(prompt) > COMPLEX_MIN_LENGTH or technical or self.has_multiple_topics(prompt):
            return ComplexityClass.COMPLEX

        return ComplexityClass.MEDIUM


_default_classifier = QueryClassifier()


def classify(prompt: str) -> ComplexityClass:
    """Classify a prompt with the default vocabulary."""
    return _default_classifier.classify(prompt)
