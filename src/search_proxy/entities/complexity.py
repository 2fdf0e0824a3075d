"""Complexity class of a search prompt."""

from enum import Enum


class ComplexityClass(str, Enum):
    """Coarse prompt category used to pick model and resource settings."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"
    CREATIVE = "creative"
