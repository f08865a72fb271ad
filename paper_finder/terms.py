"""Search term generation from a free-text research query."""

import logging

from .cache import TTLCache
from .errors import AIError, RetryExhausted
from .llm import LLMProvider
from .retry import RetryExecutor

logger = logging.getLogger(__name__)

SEARCH_TERMS_PROMPT = """Given this research query: "{query}"

Generate 3-5 specific search terms that would help find relevant academic research papers. Focus on:
- Technical terms and keywords
- Academic terminology
- Specific methodologies or approaches
- Domain-specific vocabulary

Return only the search terms, one per line, without numbering or bullet points."""


def normalize_query(query: str) -> str:
    """Cache-key form of a query: trimmed, lower-case, single-spaced."""
    return " ".join(query.lower().split())


def parse_terms(response: str, max_terms: int) -> list[str]:
    """Split an LLM response into at most ``max_terms`` non-blank lines."""
    terms = [line.strip() for line in response.splitlines()]
    return [t for t in terms if t][:max_terms]


def extract_keywords(query: str, max_terms: int) -> list[str]:
    """Fallback: lower-cased whitespace tokens longer than two characters."""
    return [word for word in query.lower().split() if len(word) > 2][:max_terms]


class TermGenerator:
    """
    Derives search terms for a query, preferring the LLM.

    Falls back to keyword extraction when no LLM is configured, when every
    retry fails, or when the LLM returns nothing usable. Only LLM results are
    cached. The returned list is never empty.

    Usage:
        generator = TermGenerator(llm=llm, cache=cache, retry=retry)
        terms = await generator.generate_terms("machine learning for protein folding")
    """

    def __init__(
        self,
        llm: LLMProvider | None = None,
        cache: TTLCache | None = None,
        retry: RetryExecutor | None = None,
        max_terms: int = 5,
        max_tokens: int = 200,
        temperature: float = 0.3,
    ):
        self._llm = llm
        self._cache = cache
        self._retry = retry or RetryExecutor()
        self.max_terms = max_terms
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate_terms(self, query: str) -> list[str]:
        """Return 1..max_terms search terms for the query."""
        key = TTLCache.make_key("search_terms", normalize_query(query))

        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.info(f"Search terms for '{query[:50]}' retrieved from cache")
                return list(cached)

        try:
            terms = await self._terms_from_llm(query)
        except AIError as e:
            logger.warning(f"Falling back to keyword extraction: {e}")
            terms = extract_keywords(query, self.max_terms)
            return terms or [query.strip()]

        if self._cache is not None:
            self._cache.set(key, terms)
        logger.info(f"Generated {len(terms)} search terms for '{query[:50]}'")
        return list(terms)

    async def _terms_from_llm(self, query: str) -> list[str]:
        if self._llm is None:
            raise AIError("no LLM configured")

        prompt = SEARCH_TERMS_PROMPT.format(query=query)
        try:
            response = await self._retry.run(
                lambda: self._llm.complete(
                    prompt,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )
            )
        except RetryExhausted as e:
            raise AIError(f"term generation failed: {e}") from e

        terms = parse_terms(response, self.max_terms)
        if not terms:
            raise AIError("LLM returned no search terms")
        return terms
