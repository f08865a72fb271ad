"""Research agent tying term generation, search and summaries together."""

import logging
import time
from contextlib import AsyncExitStack

from pydantic import BaseModel, Field

from .cache import TTLCache
from .llm import LLMProvider
from .paper_sources.models import Paper
from .paper_sources.orchestrator import HealthReport, SearchOrchestrator
from .summarize import ResearchSummarizer
from .terms import TermGenerator

logger = logging.getLogger(__name__)


class SearchResponse(BaseModel):
    """Result of a search request."""

    search_terms: list[str] = Field(default_factory=list, alias="searchTerms")
    papers: list[Paper] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class ChatResponse(BaseModel):
    """Result of a chat request: a summary plus the papers behind it."""

    response: str
    papers: list[Paper] = Field(default_factory=list)
    search_terms: list[str] = Field(default_factory=list, alias="searchTerms")

    model_config = {"populate_by_name": True}

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class ResearchAgent:
    """
    Entry point for searching and chatting about research papers.

    The agent is built with one shared cache and retry policy (see
    ``paper_finder.config.factory.create_agent``); every component it holds
    uses those same instances.

    Usage:
        async with create_agent(load_config()) as agent:
            result = await agent.search("graph neural networks for molecules")
            for paper in result.papers:
                print(paper.title)
    """

    def __init__(
        self,
        term_generator: TermGenerator,
        orchestrator: SearchOrchestrator,
        summarizer: ResearchSummarizer,
        cache: TTLCache,
        llm: LLMProvider | None = None,
        max_total_papers: int = 20,
        max_chat_papers: int = 10,
    ):
        self.term_generator = term_generator
        self.orchestrator = orchestrator
        self.summarizer = summarizer
        self.cache = cache
        self._llm = llm
        self.max_total_papers = max_total_papers
        self.max_chat_papers = max_chat_papers
        self._exit_stack: AsyncExitStack | None = None

    async def __aenter__(self) -> "ResearchAgent":
        async with AsyncExitStack() as stack:
            if self._llm is not None:
                await stack.enter_async_context(self._llm)
            await stack.enter_async_context(self.orchestrator)
            self._exit_stack = stack.pop_all()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        stack, self._exit_stack = self._exit_stack, None
        if stack is not None:
            await stack.__aexit__(exc_type, exc_val, exc_tb)

    async def _find_papers(self, query: str) -> tuple[list[str], list[Paper]]:
        if not query or not query.strip():
            raise ValueError("query must not be empty")

        terms = await self.term_generator.generate_terms(query)
        papers = await self.orchestrator.search_papers(terms)
        return terms, papers

    async def search(self, query: str) -> SearchResponse:
        """Search papers for a query."""
        start = time.perf_counter()
        terms, papers = await self._find_papers(query)

        elapsed = time.perf_counter() - start
        logger.info(f"Search for '{query[:50]}' returned {len(papers)} papers ({elapsed:.2f}s)")
        return SearchResponse(search_terms=terms, papers=papers[: self.max_total_papers])

    async def chat(self, query: str) -> ChatResponse:
        """Search papers and summarize the research landscape."""
        terms, papers = await self._find_papers(query)
        response = await self.summarizer.summarize(query, papers)

        return ChatResponse(
            response=response,
            papers=papers[: self.max_chat_papers],
            search_terms=terms,
        )

    async def health(self) -> HealthReport:
        return await self.orchestrator.health_check()
