"""Factory functions to create components from configuration."""

from __future__ import annotations

import logging
import random
import re
from typing import TYPE_CHECKING

from ..cache import TTLCache
from ..retry import RetryExecutor

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..agent import ResearchAgent
    from ..llm.protocols import LLMProvider
    from ..paper_sources.orchestrator import SearchOrchestrator
    from ..paper_sources.protocols import PaperSearchProvider
    from ..summarize import ResearchSummarizer
    from ..terms import TermGenerator
    from .loader import LLMConfig, ProfileConfig


class MockLLMProvider:
    """Mock LLM provider for testing.

    Returns ``response`` when given. Otherwise search-term prompts get the
    quoted query back with two variants, and any other prompt gets a
    placeholder summary.
    """

    def __init__(self, response: str | None = None):
        self.response = response
        self.calls: list[dict] = []

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        """Return a mock completion."""
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens})
        if self.response is not None:
            return self.response

        match = re.search(r'"([^"]+)"', prompt)
        if "search terms" in prompt and match:
            query = match.group(1)
            return f"{query}\n{query} survey\n{query} methods"
        return f"[Mock summary of: {prompt[:50]}...]"

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass


def create_llm_provider(config: LLMConfig) -> LLMProvider | None:
    """Create an LLM backend from configuration.

    A real backend without an API key is treated as unavailable: a warning is
    logged and None is returned, so term generation and summaries use their
    keyword and template fallbacks.

    Args:
        config: LLM configuration

    Returns:
        LLMProvider instance (OpenRouterAdapter, AnthropicAdapter or Mock),
        or None for the "none" backend or a missing API key

    Raises:
        ValueError: If backend type is not supported
    """
    if config.backend in ("openrouter", "anthropic") and not config.api_key:
        logger.warning(f"No API key for the {config.backend} backend; running without an LLM")
        return None

    if config.backend == "openrouter":
        from ..llm import OpenRouterAdapter

        return OpenRouterAdapter(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
        )

    elif config.backend == "anthropic":
        from ..llm import AnthropicAdapter

        return AnthropicAdapter(
            api_key=config.api_key,
            model=config.model,
        )

    elif config.backend == "mock":
        return MockLLMProvider()

    elif config.backend == "none":
        return None

    else:
        raise ValueError(f"Unsupported LLM backend: {config.backend}")


def create_cache(profile: ProfileConfig) -> TTLCache:
    return TTLCache(
        max_entries=profile.cache.max_entries,
        ttl_seconds=profile.cache.ttl_seconds,
    )


def create_retry(profile: ProfileConfig) -> RetryExecutor:
    return RetryExecutor(
        max_attempts=profile.retry.max_attempts,
        base_delay=profile.retry.base_delay_ms / 1000,
    )


def create_providers(
    profile: ProfileConfig,
    cache: TTLCache | None = None,
    retry: RetryExecutor | None = None,
    rng: random.Random | None = None,
) -> list[PaperSearchProvider]:
    """Create the configured paper providers, sharing one cache and retry policy.

    Raises:
        ValueError: If a provider name is not known
    """
    from ..academic_db import BASEProvider, COREProvider, DOAJProvider, PubMedProvider
    from ..arxiv import ArXivProvider
    from ..paper_sources.synthetic import SyntheticProvider
    from ..semantic_scholar import SemanticScholarProvider

    sources = profile.paper_sources
    common = {
        "cache": cache,
        "retry": retry,
        "max_results": profile.search.max_papers_per_term,
        "rng": rng,
    }
    http = {"timeout": sources.timeout_seconds}

    builders = {
        "arxiv": lambda: ArXivProvider(rate_limit_seconds=sources.arxiv_rate_limit, **common),
        "semantic_scholar": lambda: SemanticScholarProvider(**http, **common),
        "pubmed": lambda: PubMedProvider(**http, **common),
        "doaj": lambda: DOAJProvider(**http, **common),
        "core": lambda: COREProvider(**http, **common),
        "base": lambda: BASEProvider(**http, **common),
        "synthetic": lambda: SyntheticProvider(**common),
    }

    providers = []
    for name in dict.fromkeys(sources.providers):
        if name not in builders:
            raise ValueError(f"Unsupported paper provider: {name}")
        providers.append(builders[name]())
    return providers


def create_orchestrator(
    profile: ProfileConfig,
    providers: list[PaperSearchProvider],
) -> SearchOrchestrator:
    from ..paper_sources.orchestrator import SearchOrchestrator
    from ..paper_sources.processing import ResultProcessor

    search = profile.search
    return SearchOrchestrator(
        providers=providers,
        processor=ResultProcessor(
            relevance_threshold=search.relevance_threshold,
            max_results=search.max_total_papers,
        ),
        max_concurrent_searches=search.max_concurrent_searches,
        search_delay=search.search_delay_ms / 1000,
    )


def create_term_generator(
    profile: ProfileConfig,
    llm: LLMProvider | None,
    cache: TTLCache | None = None,
    retry: RetryExecutor | None = None,
) -> TermGenerator:
    from ..terms import TermGenerator

    return TermGenerator(
        llm=llm,
        cache=cache,
        retry=retry,
        max_terms=profile.search.max_search_terms,
        max_tokens=profile.llm.max_tokens_search_terms,
    )


def create_summarizer(
    profile: ProfileConfig,
    llm: LLMProvider | None,
    cache: TTLCache | None = None,
    retry: RetryExecutor | None = None,
) -> ResearchSummarizer:
    from ..summarize import ResearchSummarizer

    return ResearchSummarizer(
        llm=llm,
        cache=cache,
        retry=retry,
        max_tokens=profile.llm.max_tokens_response,
    )


def create_agent(
    profile: ProfileConfig,
    llm: LLMProvider | None = None,
    providers: list[PaperSearchProvider] | None = None,
) -> ResearchAgent:
    """Create a complete ResearchAgent from a profile.

    This is the main factory function. One cache and one retry policy are
    created here and shared by every component.

    Args:
        profile: Profile configuration
        llm: Override for the configured LLM backend
        providers: Override for the configured paper providers

    Returns:
        ResearchAgent ready to be entered with ``async with``

    Raises:
        ValueError: If any component configuration is invalid
    """
    from ..agent import ResearchAgent

    cache = create_cache(profile)
    retry = create_retry(profile)

    if llm is None:
        llm = create_llm_provider(profile.llm)
    if providers is None:
        providers = create_providers(profile, cache=cache, retry=retry)

    return ResearchAgent(
        term_generator=create_term_generator(profile, llm, cache, retry),
        orchestrator=create_orchestrator(profile, providers),
        summarizer=create_summarizer(profile, llm, cache, retry),
        cache=cache,
        llm=llm,
        max_total_papers=profile.search.max_total_papers,
        max_chat_papers=profile.search.max_chat_papers,
    )
