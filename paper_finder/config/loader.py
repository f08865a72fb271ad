"""Configuration loader with Pydantic validation and env var expansion."""

import logging
import os
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "profiles.yaml"

ProviderName = Literal[
    "arxiv",
    "semantic_scholar",
    "pubmed",
    "doaj",
    "core",
    "base",
    "synthetic",
]


class SearchConfig(BaseModel):
    """Limits for term generation, fan-out and result sizes."""

    max_search_terms: int = Field(5, ge=1)
    max_papers_per_term: int = Field(10, ge=1)
    max_total_papers: int = Field(20, ge=1)
    max_chat_papers: int = Field(10, ge=1)
    max_concurrent_searches: int = Field(3, ge=1)
    search_delay_ms: int = Field(100, ge=0)
    relevance_threshold: float = Field(0.1, ge=0.0, le=1.0)


class CacheConfig(BaseModel):
    """Configuration for the shared result cache."""

    ttl_seconds: float = Field(3600, gt=0)
    max_entries: int = Field(1000, ge=1)


class RetryConfig(BaseModel):
    """Configuration for retrying upstream calls."""

    max_attempts: int = Field(3, ge=1)
    base_delay_ms: int = Field(1000, ge=0)


class LLMConfig(BaseModel):
    """Configuration for the LLM backend ("none" disables it)."""

    backend: Literal["openrouter", "anthropic", "mock", "none"] = "openrouter"
    model: str | None = None
    api_key: str | None = None
    base_url: str | None = None
    max_tokens_search_terms: int = 200
    max_tokens_response: int = 500


class PaperSourcesConfig(BaseModel):
    """Configuration for paper search providers."""

    providers: list[ProviderName] = Field(
        default_factory=lambda: ["arxiv", "semantic_scholar", "pubmed", "doaj", "core", "base"]
    )
    arxiv_rate_limit: float = 3.0  # Seconds between arXiv requests
    timeout_seconds: float = 30.0


class ProfileConfig(BaseModel):
    """Configuration profile containing all component configs."""

    llm: LLMConfig = LLMConfig()
    search: SearchConfig = SearchConfig()
    cache: CacheConfig = CacheConfig()
    retry: RetryConfig = RetryConfig()
    paper_sources: PaperSourcesConfig = PaperSourcesConfig()


class ConfigFile(BaseModel):
    """Root configuration file structure."""

    profiles: dict[str, ProfileConfig]


def expand_env_vars(value: str) -> str:
    """Expand ${VAR} references in string with environment variables.

    Unset variables are left as-is.

    Args:
        value: String potentially containing env var references

    Returns:
        String with env vars expanded
    """
    if not isinstance(value, str):
        return value

    pattern = r"\$\{([^}]+)\}"

    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replacer, value)


def expand_env_vars_recursive(data):
    """Recursively expand env vars in nested dict/list structures.

    Args:
        data: Dict, list, or primitive value

    Returns:
        Data structure with all env vars expanded
    """
    if isinstance(data, dict):
        return {k: expand_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _drop_unexpanded(data):
    # "${OPENROUTER_API_KEY}" with the variable unset means "no value"
    if isinstance(data, dict):
        return {k: _drop_unexpanded(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_drop_unexpanded(item) for item in data]
    elif isinstance(data, str) and re.fullmatch(r"\$\{[^}]+\}", data):
        return None
    return data


def load_profiles(config_path: Path = DEFAULT_CONFIG_PATH) -> ConfigFile:
    """Load and validate every profile in a YAML file."""
    with open(config_path) as f:
        raw_data = yaml.safe_load(f) or {}

    expanded_data = _drop_unexpanded(expand_env_vars_recursive(raw_data))
    return ConfigFile(**expanded_data)


def load_config_from_yaml(config_path: Path, profile_name: str) -> ProfileConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config YAML file
        profile_name: Name of profile to load

    Returns:
        ProfileConfig for the requested profile

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config is invalid
        KeyError: If profile doesn't exist
    """
    config_file = load_profiles(config_path)

    if profile_name not in config_file.profiles:
        available = ", ".join(config_file.profiles.keys())
        raise KeyError(
            f"Profile '{profile_name}' not found. " f"Available profiles: {available}"
        )

    return config_file.profiles[profile_name]


def load_config_from_env() -> ProfileConfig:
    """Load configuration from environment variables (fallback mode).

    Uses OpenRouter when OPENROUTER_API_KEY is set, otherwise Anthropic when
    ANTHROPIC_API_KEY is set, otherwise runs without an LLM.

    Returns:
        ProfileConfig constructed from environment variables
    """
    if os.environ.get("OPENROUTER_API_KEY"):
        llm = LLMConfig(
            backend="openrouter",
            model=os.environ.get("OPENROUTER_MODEL"),
            api_key=os.environ.get("OPENROUTER_API_KEY"),
            base_url=os.environ.get("OPENROUTER_BASE_URL"),
        )
    elif os.environ.get("ANTHROPIC_API_KEY"):
        llm = LLMConfig(
            backend="anthropic",
            model=os.environ.get("ANTHROPIC_MODEL"),
            api_key=os.environ.get("ANTHROPIC_API_KEY"),
        )
    else:
        llm = LLMConfig(backend="none")

    return ProfileConfig(llm=llm)


def load_config(
    profile: str | None = None,
    config_path: Path | None = None,
) -> ProfileConfig:
    """Load configuration from YAML file or environment variables.

    This is the main entry point for loading configuration. It tries to load
    from a YAML config file first, and falls back to environment variables
    if the file doesn't exist or cannot be parsed.

    Args:
        profile: Profile name to load. If None, uses PAPER_FINDER_PROFILE env var
                or "default".
        config_path: Path to config file. If None, uses the bundled profiles.yaml.

    Returns:
        ProfileConfig with all component configurations

    Raises:
        KeyError: If requested profile doesn't exist in the config file
    """
    if profile is None:
        profile = os.environ.get("PAPER_FINDER_PROFILE", "default")

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning(f"Config file {config_path} not found, using environment variables")
        return load_config_from_env()

    try:
        return load_config_from_yaml(config_path, profile)
    except KeyError:
        raise
    except Exception as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.warning("Falling back to environment variables")
        return load_config_from_env()
