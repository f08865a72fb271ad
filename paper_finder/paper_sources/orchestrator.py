"""Fan-out of search terms across every configured provider."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Iterable
from contextlib import AsyncExitStack
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field, computed_field

from .models import Paper
from .processing import ResultProcessor
from .protocols import HealthCheckable, PaperSearchProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    """Settled result of one awaitable: exactly one of value or error is meaningful."""

    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def gather_settled(aws: Iterable[Awaitable[T]]) -> list[Outcome[T]]:
    """
    Await all awaitables concurrently and report each outcome in input order.

    A failure never cancels siblings; it is returned as ``Outcome(error=...)``.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    return [
        Outcome(error=result) if isinstance(result, BaseException) else Outcome(value=result)
        for result in results
    ]


class HealthReport(BaseModel):
    """Per-provider health at a point in time."""

    providers: dict[str, bool] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @computed_field
    @property
    def status(self) -> Literal["healthy", "degraded"]:
        if self.providers and all(self.providers.values()):
            return "healthy"
        return "degraded"


class SearchOrchestrator:
    """
    Runs search terms against all providers and post-processes the union.

    For each selected term every provider call is started as its own task,
    with ``search_delay`` seconds between successive starts. Terms run
    concurrently. Results are gathered with settle semantics, flattened and
    passed through the ResultProcessor.

    Cancellation: once dispatched, provider calls run until they complete or
    fail. There is no timeout beyond each provider's HTTP timeout and retry
    policy, and an in-flight search cannot be aborted early by the caller.

    Usage:
        async with SearchOrchestrator(providers) as orchestrator:
            papers = await orchestrator.search_papers(["llm agents", "tool use"])
    """

    def __init__(
        self,
        providers: list[PaperSearchProvider],
        processor: ResultProcessor | None = None,
        max_concurrent_searches: int = 3,
        search_delay: float = 0.1,
        sleep=asyncio.sleep,
    ):
        """
        Initialize the orchestrator.

        Args:
            providers: Provider instances (names must be unique)
            processor: Post-processing pipeline
            max_concurrent_searches: Maximum terms searched per call
            search_delay: Seconds between starting successive provider calls
            sleep: Awaitable sleep, injectable for tests
        """
        names = [p.name for p in providers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate provider names: {duplicates}")

        self._providers = list(providers)
        self._processor = processor or ResultProcessor()
        self._max_concurrent = max_concurrent_searches
        self._search_delay = search_delay
        self._sleep = sleep
        self._exit_stack: AsyncExitStack | None = None

    @property
    def providers(self) -> list[PaperSearchProvider]:
        return list(self._providers)

    async def __aenter__(self) -> "SearchOrchestrator":
        """Enter async context for all providers.

        If one provider fails to open, the ones already opened are closed
        before the error propagates.
        """
        async with AsyncExitStack() as stack:
            for provider in self._providers:
                await stack.enter_async_context(provider)
            self._exit_stack = stack.pop_all()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context for all providers, in reverse order."""
        stack, self._exit_stack = self._exit_stack, None
        if stack is not None:
            await stack.__aexit__(exc_type, exc_val, exc_tb)

    async def search_papers(self, terms: list[str], limit: int | None = None) -> list[Paper]:
        """
        Search all providers for the given terms.

        Never raises for upstream reasons: provider failures contribute
        nothing and an unexpected internal error returns an empty list.

        Args:
            terms: Search terms; only the first ``max_concurrent_searches`` are used
            limit: Override for the processor's ``max_results``

        Returns:
            Deduplicated, ranked papers
        """
        start = time.perf_counter()
        selected = [t.strip() for t in terms[: self._max_concurrent] if t and t.strip()]
        if not selected or not self._providers:
            logger.warning("No search terms or providers; returning no papers")
            return []

        try:
            outcomes = await gather_settled(self._search_term(term) for term in selected)

            raw: list[Paper] = []
            for term, outcome in zip(selected, outcomes):
                if not outcome.ok:
                    logger.warning(f"Search for term '{term}' failed: {outcome.error}")
                    continue
                raw.extend(outcome.value)

            papers = self._processor.process(raw, limit=limit)
        except Exception as e:
            logger.error(f"Paper search failed unexpectedly: {e}", exc_info=True)
            return []

        elapsed = time.perf_counter() - start
        logger.info(
            f"Search completed: {len(selected)} terms, {len(raw)} raw papers, "
            f"{len(papers)} returned ({elapsed:.2f}s)"
        )
        return papers

    async def _search_term(self, term: str) -> list[Paper]:
        tasks: list[asyncio.Task] = []
        for i, provider in enumerate(self._providers):
            if i > 0 and self._search_delay > 0:
                await self._sleep(self._search_delay)
            tasks.append(asyncio.create_task(provider.search(term)))

        papers: list[Paper] = []
        for provider, outcome in zip(self._providers, await gather_settled(tasks)):
            if not outcome.ok:
                logger.warning(f"Provider {provider.name} failed for '{term}': {outcome.error}")
                continue
            papers.extend(outcome.value or [])
        return papers

    async def health_check(self) -> HealthReport:
        """Probe every provider concurrently."""
        results = await asyncio.gather(*(self._check_provider(p) for p in self._providers))
        report = HealthReport(
            providers={p.name: ok for p, ok in zip(self._providers, results)}
        )
        logger.info(f"Health check: {report.status} {report.providers}")
        return report

    async def _check_provider(self, provider: PaperSearchProvider) -> bool:
        try:
            if isinstance(provider, HealthCheckable):
                return bool(await provider.health_check())
            return isinstance(await provider.search("test"), list)
        except Exception as e:
            logger.warning(f"Health check for {provider.name} raised: {e}")
            return False

    def search_stats(self) -> dict[str, Any]:
        """Configured limits for reporting."""
        return {
            "providers": [p.name for p in self._providers],
            "max_concurrent_searches": self._max_concurrent,
            "search_delay_ms": int(self._search_delay * 1000),
            "relevance_threshold": self._processor.relevance_threshold,
            "max_results": self._processor.max_results,
        }
