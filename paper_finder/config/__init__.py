"""Configuration system for LLM backends, providers and search limits."""

from .loader import (
    load_config,
    load_config_from_yaml,
    load_config_from_env,
    load_profiles,
    ProfileConfig,
    LLMConfig,
    SearchConfig,
    CacheConfig,
    RetryConfig,
    PaperSourcesConfig,
)
from .factory import (
    MockLLMProvider,
    create_llm_provider,
    create_providers,
    create_orchestrator,
    create_term_generator,
    create_summarizer,
    create_agent,
)

__all__ = [
    # Loader
    "load_config",
    "load_config_from_yaml",
    "load_config_from_env",
    "load_profiles",
    "ProfileConfig",
    "LLMConfig",
    "SearchConfig",
    "CacheConfig",
    "RetryConfig",
    "PaperSourcesConfig",
    # Factory
    "MockLLMProvider",
    "create_llm_provider",
    "create_providers",
    "create_orchestrator",
    "create_term_generator",
    "create_summarizer",
    "create_agent",
]
