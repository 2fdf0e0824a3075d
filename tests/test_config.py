"""
Tests for settings and credential loading.
"""

import pytest

from search_proxy.config import Settings, load_credentials
from search_proxy.entities import ComplexityClass, Credential, FailoverPolicy


def test_load_credentials_orders_by_slot():
    """Test that slots are ordered numerically and blanks dropped."""
    environ = {
        "PERPLEXITY_API_KEY_10": "key-ten",
        "PERPLEXITY_API_KEY_2": "key-two",
        "PERPLEXITY_API_KEY_1": "key-one",
        "PERPLEXITY_API_KEY_3": "   ",
        "PERPLEXITY_API_KEY_4": "",
        "OPENAI_API_KEY_1": "other-provider",
        "PERPLEXITY_API_KEY": "unnumbered",
    }

    credentials = load_credentials(environ=environ)

    assert [c.slot for c in credentials] == [1, 2, 10]
    assert [c.token for c in credentials] == ["key-one", "key-two", "key-ten"]


def test_load_credentials_provider_prefix():
    """Test selecting a different provider prefix."""
    environ = {"OPENAI_API_KEY_1": "sk-one", "PERPLEXITY_API_KEY_1": "pplx-one"}

    assert [c.token for c in load_credentials("openai", environ)] == ["sk-one"]
    assert [c.token for c in load_credentials(environ={**environ, "CREDENTIAL_PROVIDER": "OPENAI"})] == [
        "sk-one"
    ]


def test_no_credentials_is_valid():
    """Test that an empty credential list is not an error."""
    assert load_credentials(environ={}) == ()
    assert Settings(credentials=()).credentials == ()


def test_credential_is_redacted():
    """Test that the raw token never shows in repr, str or preview."""
    credential = Credential(slot=1, token="pplx-0123456789abcdef")

    assert credential.preview == "pplx-012..."
    assert "0123456789abcdef" not in repr(credential)
    assert "0123456789abcdef" not in str(credential)


def test_settings_models_mapping():
    """Test the per-class model mapping."""
    settings = Settings(credentials=(), model_complex="sonar-pro", model_simple="sonar-mini")

    assert settings.models[ComplexityClass.COMPLEX] == "sonar-pro"
    assert settings.models[ComplexityClass.SIMPLE] == "sonar-mini"


def test_settings_policy():
    """Test failover policy parsing."""
    assert Settings(credentials=(), failover_policy="fail_fast").policy == FailoverPolicy.FAIL_FAST


@pytest.mark.parametrize(
    "overrides",
    [
        {"failover_policy": "retry_forever"},
        {"cache_max_entries": 0},
        {"upstream_timeout": 0},
        {"model_medium": "  "},
    ],
)
def test_settings_validation(overrides):
    """Test that invalid settings are rejected at construction."""
    with pytest.raises(ValueError):
        Settings(credentials=(), **overrides)


def test_allowed_origins():
    """Test CORS origin parsing."""
    settings = Settings(credentials=(), cors_origins="https://a.example, https://b.example,")
    assert settings.allowed_origins == ["https://a.example", "https://b.example"]


def test_settings_loads_credentials_for_its_provider(monkeypatch):
    """Test that credentials follow the provider given to Settings, not the environment default."""
    monkeypatch.setenv("SEARCHTEST_API_KEY_2", "st-two")
    monkeypatch.setenv("SEARCHTEST_API_KEY_1", "st-one")

    settings = Settings(credential_provider="searchtest")

    assert [c.token for c in settings.credentials] == ["st-one", "st-two"]
