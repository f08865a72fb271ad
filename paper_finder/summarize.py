"""Research landscape summaries for a query and its papers, using an LLM."""

import logging

from .cache import TTLCache
from .errors import RetryExhausted
from .llm import LLMProvider
from .paper_sources.models import Paper
from .retry import RetryExecutor

logger = logging.getLogger(__name__)

TOP_PAPERS_IN_PROMPT = 5

DEFAULT_SYSTEM_PROMPT = """You are a research assistant. Summarize the state of research
for the user's query from the listed papers. Be concise, precise and technical."""


def build_summary_prompt(query: str, papers: list[Paper]) -> str:
    """Prompt listing the top papers with authors, citations and source."""
    lines = [
        f'{i}. "{p.title}" by {", ".join(p.authors)} ({p.citations} citations, {p.source})'
        for i, p in enumerate(papers[:TOP_PAPERS_IN_PROMPT], start=1)
    ]
    listing = "\n".join(lines)

    return f"""Based on the research query "{query}", I found {len(papers)} relevant research papers. Here are the top results:

{listing}

Please provide a brief summary of the research landscape for this topic, highlighting the most important findings and trends. Keep the response concise and informative."""


def fallback_summary(query: str, papers: list[Paper]) -> str:
    """Deterministic summary used when the LLM is unavailable."""
    sources = list(dict.fromkeys(p.source for p in papers))
    return (
        f'I found {len(papers)} research papers related to "{query}". '
        f"The top results include papers from {', '.join(sources) or 'no sources'}. "
        f"These papers cover various aspects of the topic and provide valuable "
        f"insights for further research."
    )


class ResearchSummarizer:
    """
    Summarizes search results for a query.

    Usage:
        summarizer = ResearchSummarizer(llm=llm, cache=cache, retry=retry)
        text = await summarizer.summarize("protein folding", papers)
    """

    def __init__(
        self,
        llm: LLMProvider | None = None,
        cache: TTLCache | None = None,
        retry: RetryExecutor | None = None,
        max_tokens: int = 500,
        temperature: float = 0.3,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ):
        self._llm = llm
        self._cache = cache
        self._retry = retry or RetryExecutor()
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.system_prompt = system_prompt

    async def summarize(self, query: str, papers: list[Paper]) -> str:
        """Summarize papers for query. Never raises for LLM failures."""
        key = TTLCache.make_key("ai_response", query, len(papers))

        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.info(f"Summary for '{query[:50]}' retrieved from cache")
                return cached

        if self._llm is None:
            return fallback_summary(query, papers)

        prompt = build_summary_prompt(query, papers)
        try:
            response = await self._retry.run(
                lambda: self._llm.complete(
                    prompt,
                    system_prompt=self.system_prompt,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )
            )
        except RetryExhausted as e:
            logger.warning(f"Summary generation failed, using fallback: {e}")
            return fallback_summary(query, papers)

        response = response.strip()
        if not response:
            logger.warning("LLM returned an empty summary, using fallback")
            return fallback_summary(query, papers)

        if self._cache is not None:
            self._cache.set(key, response)
        return response
