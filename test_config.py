"""
Configuration System Tests

Tests for the YAML configuration loader and factory functions.
"""

import asyncio

import pytest
from pydantic import ValidationError

from paper_finder.config.factory import (
    MockLLMProvider,
    create_agent,
    create_llm_provider,
    create_providers,
)
from paper_finder.config.loader import (
    DEFAULT_CONFIG_PATH,
    LLMConfig,
    ProfileConfig,
    expand_env_vars,
    load_config,
    load_config_from_env,
    load_config_from_yaml,
)
from paper_finder.cache import TTLCache
from paper_finder.llm import AnthropicAdapter, OpenRouterAdapter


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("OPENROUTER_API_KEY", "ANTHROPIC_API_KEY", "PAPER_FINDER_PROFILE"):
        monkeypatch.delenv(var, raising=False)


def write_config(tmp_path, text: str):
    path = tmp_path / "profiles.yaml"
    path.write_text(text)
    return path


def test_load_bundled_profiles():
    """Test loading the profiles shipped with the package."""
    profile = load_config_from_yaml(DEFAULT_CONFIG_PATH, "default")
    print("\nLoaded profile: default")
    print(f"  LLM backend: {profile.llm.backend}")
    print(f"  Providers: {profile.paper_sources.providers}")

    assert profile.llm.backend == "openrouter"
    assert profile.llm.api_key is None  # ${OPENROUTER_API_KEY} unset
    assert profile.paper_sources.providers == [
        "arxiv", "semantic_scholar", "pubmed", "doaj", "core", "base",
    ]
    assert profile.search.max_search_terms == 5
    assert profile.search.max_concurrent_searches == 3
    assert profile.cache.ttl_seconds == 3600

    profile = load_config_from_yaml(DEFAULT_CONFIG_PATH, "test")
    assert profile.llm.backend == "none"
    assert profile.paper_sources.providers == ["synthetic"]
    assert profile.search.search_delay_ms == 0
    assert profile.retry.base_delay_ms == 0

    profile = load_config_from_yaml(DEFAULT_CONFIG_PATH, "offline")
    assert profile.llm.backend == "mock"


def test_unknown_profile_raises_key_error():
    with pytest.raises(KeyError, match="Available profiles"):
        load_config_from_yaml(DEFAULT_CONFIG_PATH, "does-not-exist")

    with pytest.raises(KeyError):
        load_config("does-not-exist")


def test_env_var_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")
    path = write_config(tmp_path, """
profiles:
  custom:
    llm:
      backend: openrouter
      api_key: ${OPENROUTER_API_KEY}
    search:
      max_total_papers: 15
""")
    profile = load_config_from_yaml(path, "custom")

    assert profile.llm.api_key == "sk-test"
    assert profile.search.max_total_papers == 15
    assert profile.search.max_chat_papers == 10  # default kept


def test_expand_env_vars_leaves_unknown(monkeypatch):
    monkeypatch.setenv("KNOWN", "yes")
    assert expand_env_vars("a-${KNOWN}-${UNKNOWN_VAR_XYZ}") == "a-yes-${UNKNOWN_VAR_XYZ}"
    assert expand_env_vars(3) == 3


def test_profile_selected_from_environment(monkeypatch):
    monkeypatch.setenv("PAPER_FINDER_PROFILE", "test")
    assert load_config().paper_sources.providers == ["synthetic"]


def test_missing_file_falls_back_to_env(tmp_path, caplog):
    with caplog.at_level("WARNING"):
        profile = load_config("default", config_path=tmp_path / "missing.yaml")

    assert profile.llm.backend == "none"
    assert "not found" in caplog.text


def test_invalid_file_falls_back_to_env(tmp_path, monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ak-test")
    path = write_config(tmp_path, """
profiles:
  default:
    search:
      max_search_terms: zero
""")
    profile = load_config("default", config_path=path)

    assert profile.llm.backend == "anthropic"
    assert profile.llm.api_key == "ak-test"


def test_env_fallback_prefers_openrouter(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ak-test")
    assert load_config_from_env().llm.backend == "openrouter"


def test_unknown_provider_name_is_rejected():
    with pytest.raises(ValidationError):
        ProfileConfig.model_validate({"paper_sources": {"providers": ["google_scholar"]}})


def test_create_llm_provider():
    """Test creating LLM backends from configuration."""
    assert create_llm_provider(LLMConfig(backend="none")) is None
    assert isinstance(create_llm_provider(LLMConfig(backend="mock")), MockLLMProvider)

    openrouter = create_llm_provider(LLMConfig(backend="openrouter", api_key="sk", model="m"))
    assert isinstance(openrouter, OpenRouterAdapter)
    assert openrouter.model == "m"

    anthropic = create_llm_provider(LLMConfig(backend="anthropic", api_key="ak"))
    assert isinstance(anthropic, AnthropicAdapter)


def test_missing_api_key_runs_without_llm(caplog):
    with caplog.at_level("WARNING"):
        assert create_llm_provider(LLMConfig(backend="openrouter")) is None
        assert create_llm_provider(LLMConfig(backend="anthropic")) is None

    assert "No API key for the openrouter backend" in caplog.text
    assert "No API key for the anthropic backend" in caplog.text


def test_default_profile_without_key_falls_back_to_keywords():
    profile = load_config_from_yaml(DEFAULT_CONFIG_PATH, "default")
    agent = create_agent(profile, providers=[])

    terms = asyncio.run(agent.term_generator.generate_terms("machine learning"))

    assert terms == ["machine", "learning"]


def test_create_providers_share_cache_and_retry():
    profile = ProfileConfig.model_validate({
        "paper_sources": {"providers": ["synthetic", "pubmed", "arxiv", "pubmed"]},
        "search": {"max_papers_per_term": 7},
    })
    cache = TTLCache()
    providers = create_providers(profile, cache=cache)

    assert [p.name for p in providers] == ["synthetic", "pubmed", "arxiv"]
    assert all(p._cache is cache for p in providers)
    assert all(p._max_results == 7 for p in providers)


def test_create_agent_wires_one_cache():
    profile = load_config_from_yaml(DEFAULT_CONFIG_PATH, "test")
    agent = create_agent(profile)

    assert agent.term_generator._cache is agent.cache
    assert agent.summarizer._cache is agent.cache
    assert all(p._cache is agent.cache for p in agent.orchestrator.providers)
    assert agent.term_generator._retry is agent.summarizer._retry
    assert agent.max_total_papers == 20
    assert agent.max_chat_papers == 10
