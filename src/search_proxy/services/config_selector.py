"""Request configuration selection.

Each complexity class has a fixed profile. The only dynamic adjustment is
for medium prompts about recent events: they get a short cache lifetime
and a one-day search window so answers stay fresh.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace

from search_proxy.config import get_settings
from search_proxy.entities import ComplexityClass, RequestConfiguration
from search_proxy.vocabulary import RECENCY, VOCABULARY, compile_terms

MINUTE = 60
HOUR = 60 * MINUTE


@dataclass(frozen=True)
class ClassProfile:
    max_tokens: int
    temperature: float
    cache_ttl: int
    search_recency_filter: str | None


PROFILES: Mapping[ComplexityClass, ClassProfile] = {
    ComplexityClass.SIMPLE: ClassProfile(300, 0.1, 24 * HOUR, "month"),
    ComplexityClass.MEDIUM: ClassProfile(800, 0.3, 6 * HOUR, "month"),
    ComplexityClass.COMPLEX: ClassProfile(2000, 0.5, 12 * HOUR, "month"),
    # no live search for creative writing
    ComplexityClass.CREATIVE: ClassProfile(1500, 0.9, 1 * HOUR, None),
}

RECENCY_CACHE_TTL = 5 * MINUTE
RECENCY_FILTER = "day"


class ConfigurationSelector:
    """Map a complexity class and prompt to a RequestConfiguration.

    Selection is a pure function of its inputs; the cache key depends on it.
    """

    def __init__(
        self,
        models: Mapping[ComplexityClass, str] | None = None,
        vocabulary: Mapping[str, tuple[str, ...]] | None = None,
    ) -> None:
        """Initialize the selector.

        Args:
            models: Model identifier per class. Defaults to settings.models.
            vocabulary: Category to trigger-term mapping. Defaults to VOCABULARY.
        """
        self._models = dict(models or get_settings().models)
        missing = [c.value for c in ComplexityClass if not self._models.get(c)]
        if missing:
            raise ValueError(f"No model configured for: {', '.join(missing)}")

        vocabulary = VOCABULARY if vocabulary is None else vocabulary
        self._recency = compile_terms(vocabulary.get(RECENCY, ()))

    @property
    def models(self) -> dict[ComplexityClass, str]:
        return dict(self._models)

    def is_recency_sensitive(self, prompt: str) -> bool:
        return self._recency.search(prompt) is not None

    def select_config(
        self,
        complexity: ComplexityClass,
        prompt: str,
        online: bool = True,
    ) -> RequestConfiguration:
        """Resolve the configuration for a classified prompt.

        Args:
            complexity: Class assigned by the classifier
            prompt: The prompt itself, checked for recency vocabulary
            online: When False, drop the search recency filter

        Returns:
            Immutable request configuration
        """
        profile = PROFILES[complexity]
        config = RequestConfiguration(
            model=self._models[complexity],
            max_tokens=profile.max_tokens,
            temperature=profile.temperature,
            cache_ttl=profile.cache_ttl,
            search_recency_filter=profile.search_recency_filter,
        )

        if complexity == ComplexityClass.MEDIUM and self.is_recency_sensitive(prompt):
            config = replace(config, cache_ttl=RECENCY_CACHE_TTL, search_recency_filter=RECENCY_FILTER)

        if not online:
            config = replace(config, search_recency_filter=None)

        return config
