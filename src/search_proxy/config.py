import os
import re
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from search_proxy.entities import ComplexityClass, Credential, FailoverPolicy

load_dotenv()

VERSION = "0.1.0"


def load_credentials(
    provider: str | None = None,
    environ: dict[str, str] | None = None,
) -> tuple[Credential, ...]:
    """Collect ``<PROVIDER>_API_KEY_<N>`` variables into an ordered credential list.

    Blank values are dropped. An empty result is a valid state: requests fail
    with ``NoCredentialsConfigured`` instead of the process refusing to start.

    Args:
        provider: Variable prefix. Defaults to ``CREDENTIAL_PROVIDER`` or "PERPLEXITY".
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        Credentials sorted by slot number
    """
    environ = os.environ if environ is None else environ
    provider = (provider or environ.get("CREDENTIAL_PROVIDER") or "PERPLEXITY").upper()
    pattern = re.compile(rf"^{re.escape(provider)}_API_KEY_(\d+)$")

    credentials = []
    for name, value in environ.items():
        match = pattern.match(name)
        if match and value and value.strip():
            credentials.append(Credential(slot=int(match.group(1)), token=value.strip()))
    return tuple(sorted(credentials, key=lambda c: c.slot))


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Upstream
    upstream_url: str = os.getenv("UPSTREAM_URL", "https://api.perplexity.ai/chat/completions")
    upstream_timeout: float = float(os.getenv("UPSTREAM_TIMEOUT", "30"))
    credential_provider: str = os.getenv("CREDENTIAL_PROVIDER", "PERPLEXITY")
    failover_policy: str = os.getenv("FAILOVER_POLICY", FailoverPolicy.CONTINUE.value)
    system_prompt: str = os.getenv("SYSTEM_PROMPT", "Be precise and concise.")
    # None loads <credential_provider>_API_KEY_<N> from the environment
    credentials: tuple[Credential, ...] | None = None

    # Models per complexity class (opaque identifiers)
    model_simple: str = os.getenv("MODEL_SIMPLE", "sonar")
    model_medium: str = os.getenv("MODEL_MEDIUM", "sonar")
    model_complex: str = os.getenv("MODEL_COMPLEX", "sonar-pro")
    model_creative: str = os.getenv("MODEL_CREATIVE", "sonar")

    # Cache
    cache_max_entries: int = int(os.getenv("CACHE_MAX_ENTRIES", "1000"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "3000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def models(self) -> dict[ComplexityClass, str]:
        """Model identifier per complexity class."""
        return {
            ComplexityClass.SIMPLE: self.model_simple,
            ComplexityClass.MEDIUM: self.model_medium,
            ComplexityClass.COMPLEX: self.model_complex,
            ComplexityClass.CREATIVE: self.model_creative,
        }

    @property
    def policy(self) -> FailoverPolicy:
        return FailoverPolicy(self.failover_policy)

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.credentials is None:
            object.__setattr__(self, "credentials", load_credentials(self.credential_provider))

        if self.upstream_timeout <= 0:
            raise ValueError("UPSTREAM_TIMEOUT must be positive")

        if self.cache_max_entries < 1:
            raise ValueError("CACHE_MAX_ENTRIES must be at least 1")

        policies = [p.value for p in FailoverPolicy]
        if self.failover_policy not in policies:
            raise ValueError(
                f"FAILOVER_POLICY must be one of {policies}, got {self.failover_policy!r}"
            )

        for complexity, model in self.models.items():
            if not model.strip():
                raise ValueError(f"Model for {complexity.value} prompts must not be empty")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
